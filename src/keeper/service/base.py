"""Service data model, error taxonomy and manager-output classification."""

from dataclasses import dataclass, field
from enum import Enum


class ServiceState(Enum):
    """Abstract service state used for supervision decisions."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


@dataclass
class ServiceCommandConfig:
    """How the daemon is started: command line, working directory, environment.

    ``source_path`` records which unit file a config was read from and is
    ignored when comparing configs.
    """

    program_arguments: list[str]
    working_directory: str | None = None
    environment: dict[str, str] = field(default_factory=dict)
    source_path: str | None = field(default=None, compare=False)


@dataclass
class ServiceRuntimeStatus:
    """Runtime status of the service unit as reported by systemd."""

    status: ServiceState
    state: str | None = None
    sub_state: str | None = None
    pid: int | None = None
    last_exit_status: int | None = None
    last_exit_reason: str | None = None
    detail: str | None = None
    missing_unit: bool | None = None


@dataclass
class LegacyUnitRecord:
    """A unit left behind by an earlier naming scheme."""

    name: str
    unit_path: str
    enabled: bool
    exists: bool


class ServiceError(Exception):
    """Base error for service management failures."""

    pass


class ManagerUnavailable(ServiceError):
    """The systemctl binary is missing."""

    pass


class ScopeUnreachable(ServiceError):
    """systemctl exists but the selected manager instance cannot be reached."""

    def __init__(self, scope_label: str, detail: str):
        self.scope_label = scope_label
        self.detail = detail
        super().__init__(
            f"systemctl ({scope_label}) unavailable: {detail or 'unknown error'}".strip()
        )


class InvalidCommand(ServiceError):
    """The command config cannot be rendered into a unit file."""

    pass


class CommandFailed(ServiceError):
    """A systemctl action that was expected to succeed exited non-zero."""

    def __init__(self, action: str, detail: str):
        self.action = action
        self.detail = detail
        super().__init__(f"systemctl {action} failed: {detail}".strip())


class FailureKind(Enum):
    """Closed classification of systemctl failure output."""

    NOT_FOUND = "not_found"
    BUS_UNREACHABLE = "bus_unreachable"
    OTHER = "other"


# systemd's wording, not a stable contract. Update here if it changes.
NOT_FOUND_PHRASES = ("not found",)
BUS_UNREACHABLE_PHRASES = (
    "failed to connect",
    "not been booted",
    "no such file or directory",
    "not supported",
)


def classify_failure(text: str) -> FailureKind:
    """Classify systemctl failure output by substring matching.

    Bus phrases win over "not found" since bus errors often embed an errno
    string. Missing binaries and missing units both report "not found";
    which one applies depends on the command that produced the text.
    """
    lowered = text.lower()
    if any(phrase in lowered for phrase in BUS_UNREACHABLE_PHRASES):
        return FailureKind.BUS_UNREACHABLE
    if any(phrase in lowered for phrase in NOT_FOUND_PHRASES):
        return FailureKind.NOT_FOUND
    return FailureKind.OTHER
