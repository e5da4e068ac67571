"""Systemd service management for the Keeper daemon.

Installs, controls and inspects the Keeper unit through systemctl, in
either the user-session or the system-wide manager.

Example:
    from keeper.service import ServiceManager

    manager = ServiceManager()
    success, message = await manager.restart()
    status = await manager.status()
"""

from keeper.service.base import (
    CommandFailed,
    FailureKind,
    InvalidCommand,
    LegacyUnitRecord,
    ManagerUnavailable,
    ScopeUnreachable,
    ServiceCommandConfig,
    ServiceError,
    ServiceRuntimeStatus,
    ServiceState,
    classify_failure,
)
from keeper.service.identity import UnitIdentity
from keeper.service.legacy import find_legacy_units, uninstall_legacy_units
from keeper.service.manager import ServiceManager
from keeper.service.scope import ScopeResolver, ServiceScope
from keeper.service.systemctl import Systemctl
from keeper.service.systemd import SystemdService
from keeper.service.unit import build_unit, parse_unit

__all__ = [
    "CommandFailed",
    "FailureKind",
    "InvalidCommand",
    "LegacyUnitRecord",
    "ManagerUnavailable",
    "ScopeResolver",
    "ScopeUnreachable",
    "ServiceCommandConfig",
    "ServiceError",
    "ServiceManager",
    "ServiceRuntimeStatus",
    "ServiceScope",
    "ServiceState",
    "SystemdService",
    "Systemctl",
    "UnitIdentity",
    "build_unit",
    "classify_failure",
    "find_legacy_units",
    "parse_unit",
    "uninstall_legacy_units",
]
