"""Parsing of ``systemctl show`` style key/value output."""

import re
from dataclasses import dataclass

SHOW_PROPERTIES = ("ActiveState", "SubState", "MainPID", "ExecMainStatus", "ExecMainCode")

_INT_RE = re.compile(r"[+-]?\d+")


def parse_key_value_output(output: str, separator: str = "=") -> dict[str, str]:
    """Parse ``Key=Value`` lines into a dict keyed by lower-cased key.

    Lines without the separator or with an empty key are skipped. Later
    lines override earlier ones.
    """
    entries: dict[str, str] = {}
    for raw in output.splitlines():
        line = raw.strip()
        if not line or separator not in line:
            continue
        key, value = line.split(separator, 1)
        key = key.strip().lower()
        if not key:
            continue
        entries[key] = value.strip()
    return entries


def parse_int(value: str | None) -> int | None:
    """Parse a strict base-10 integer, returning None for anything else."""
    if not value:
        return None
    value = value.strip()
    if not _INT_RE.fullmatch(value):
        return None
    return int(value)


@dataclass
class SystemdShowInfo:
    """Diagnostic properties of a unit. Fields are None when not reported."""

    active_state: str | None = None
    sub_state: str | None = None
    main_pid: int | None = None
    exec_main_status: int | None = None
    exec_main_code: str | None = None


def parse_systemd_show(output: str) -> SystemdShowInfo:
    entries = parse_key_value_output(output)
    info = SystemdShowInfo(
        active_state=entries.get("activestate") or None,
        sub_state=entries.get("substate") or None,
        exec_main_code=entries.get("execmaincode") or None,
        exec_main_status=parse_int(entries.get("execmainstatus")),
    )
    # MainPID=0 means "no main process"
    pid = parse_int(entries.get("mainpid"))
    if pid is not None and pid > 0:
        info.main_pid = pid
    return info
