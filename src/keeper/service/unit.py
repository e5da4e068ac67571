"""Rendering and parsing of systemd unit files.

Only the fields Keeper manages are modeled: Description, ExecStart,
WorkingDirectory and Environment. Anything else in an existing unit is
ignored when reading and is not preserved when the unit is rewritten
(the previous file is kept as a .bak instead).

Quoting follows systemd's rules: an argument containing whitespace, quotes
or backslashes is wrapped in double quotes with ``\\`` and ``"`` escaped, so
that tokenizing the ExecStart line gives back the original arguments.
"""

import re

from keeper.service.base import ServiceCommandConfig

DEFAULT_DESCRIPTION = "Keeper Daemon"

_NEEDS_QUOTING = re.compile(r"[\s'\"\\]")
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


def escape_unit_arg(value: str) -> str:
    """Quote a single ExecStart argument or Environment assignment if needed."""
    if value and not _NEEDS_QUOTING.search(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def parse_exec_start(value: str) -> list[str]:
    """Split an ExecStart value into arguments.

    Honors single and double quotes and backslash escapes. A quoted empty
    string produces an empty argument.
    """
    args: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escape_next = False
    in_token = False

    for char in value:
        if escape_next:
            current.append(_ESCAPES.get(char, char))
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            in_token = True
            continue
        if quote:
            if char == quote:
                quote = None
            else:
                current.append(char)
            continue
        if char in ("'", '"'):
            quote = char
            in_token = True
            continue
        if char.isspace():
            if in_token:
                args.append("".join(current))
                current = []
                in_token = False
            continue
        current.append(char)
        in_token = True

    if in_token:
        args.append("".join(current))
    return args


def parse_env_assignment(token: str) -> tuple[str, str] | None:
    """Split one unquoted ``KEY=VALUE`` token. Returns None if there is no key."""
    key, sep, value = token.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value


def parse_env_line(raw: str) -> list[tuple[str, str]]:
    """Parse the value of an ``Environment=`` line.

    A line may carry several space separated (and possibly quoted)
    assignments. Tokens without a key are skipped.
    """
    pairs = []
    for token in parse_exec_start(raw):
        parsed = parse_env_assignment(token)
        if parsed:
            pairs.append(parsed)
    return pairs


def _check_single_line(field: str, value: str) -> None:
    if "\n" in value or "\r" in value:
        raise ValueError(f"{field} must be a single line: {value!r}")


def build_unit(
    description: str | None,
    program_arguments: list[str],
    working_directory: str | None = None,
    environment: dict[str, str] | None = None,
) -> str:
    """Render a unit file for the given command.

    Description and WorkingDirectory are written verbatim, so they must be a
    single line; the working directory must also have no surrounding
    whitespace.

    Raises:
        ValueError: If the arguments are empty or a verbatim value is invalid.
    """
    if not program_arguments:
        raise ValueError("program_arguments must not be empty")

    description = (description or "").strip() or DEFAULT_DESCRIPTION
    _check_single_line("Description", description)
    if working_directory:
        _check_single_line("WorkingDirectory", working_directory)
        if working_directory != working_directory.strip():
            raise ValueError(
                f"WorkingDirectory has surrounding whitespace: {working_directory!r}"
            )

    exec_start = " ".join(escape_unit_arg(arg) for arg in program_arguments)

    service_lines = [
        f"ExecStart={exec_start}",
        "Restart=always",
        "RestartSec=5",
        "KillMode=process",
    ]
    if working_directory:
        service_lines.append(f"WorkingDirectory={working_directory}")
    for key, value in (environment or {}).items():
        service_lines.append(f"Environment={escape_unit_arg(f'{key}={value}')}")

    lines = [
        "[Unit]",
        f"Description={description}",
        "After=network-online.target",
        "Wants=network-online.target",
        "",
        "[Service]",
        *service_lines,
        "",
        "[Install]",
        "WantedBy=default.target",
        "",
    ]
    return "\n".join(lines)


def parse_unit(
    content: str, source_path: str | None = None
) -> ServiceCommandConfig | None:
    """Read the managed fields back out of unit file text.

    Returns None when there is no ExecStart line, which callers treat the
    same as "not installed".
    """
    exec_start = ""
    working_directory = ""
    environment: dict[str, str] = {}

    for raw in content.split("\n"):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("ExecStart="):
            exec_start = line.removeprefix("ExecStart=").strip()
        elif line.startswith("WorkingDirectory="):
            working_directory = line.removeprefix("WorkingDirectory=").strip()
        elif line.startswith("Environment="):
            for key, value in parse_env_line(line.removeprefix("Environment=")):
                environment[key] = value

    if not exec_start:
        return None
    program_arguments = parse_exec_start(exec_start)
    if not program_arguments:
        return None

    return ServiceCommandConfig(
        program_arguments=program_arguments,
        working_directory=working_directory or None,
        environment=environment,
        source_path=source_path,
    )
