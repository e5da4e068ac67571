"""Discovery and cleanup of units from earlier naming schemes."""

import logging
import sys
from typing import TextIO

from keeper.config.models import ServiceEnv
from keeper.config.paths import get_unit_path
from keeper.service.base import LegacyUnitRecord
from keeper.service.output import format_line
from keeper.service.systemctl import Systemctl

logger = logging.getLogger(__name__)

# Unit names used by earlier releases, oldest first
LEGACY_SERVICE_NAMES = ("keeperd", "keeper-daemon")


async def find_legacy_units(
    env: ServiceEnv,
    systemctl: Systemctl,
    names: tuple[str, ...] = LEGACY_SERVICE_NAMES,
) -> list[LegacyUnitRecord]:
    """Find legacy units that still have a unit file or are still enabled.

    Enabled state is only checked when systemctl is installed. Names with
    neither a file nor an enabled unit are not reported.
    """
    results: list[LegacyUnitRecord] = []
    systemctl_available = await systemctl.is_installed()

    for name in names:
        unit_path = get_unit_path(env.home, name)
        exists = unit_path.exists()
        enabled = False
        if systemctl_available:
            result = await systemctl.run("is-enabled", f"{name}.service")
            enabled = result.ok
        if exists or enabled:
            results.append(
                LegacyUnitRecord(
                    name=name,
                    unit_path=str(unit_path),
                    enabled=enabled,
                    exists=exists,
                )
            )
    return results


async def uninstall_legacy_units(
    env: ServiceEnv,
    systemctl: Systemctl,
    stdout: TextIO | None = None,
    names: tuple[str, ...] = LEGACY_SERVICE_NAMES,
) -> list[LegacyUnitRecord]:
    """Disable, stop and delete every legacy unit found.

    Disabling is best-effort and skipped when systemctl is missing; the
    unit file is removed either way.

    Returns:
        The legacy units that were found.
    """
    out = stdout or sys.stdout
    units = await find_legacy_units(env, systemctl, names)
    if not units:
        return units

    systemctl_available = await systemctl.is_installed()
    for unit in units:
        unit_name = f"{unit.name}.service"
        if systemctl_available:
            result = await systemctl.run("disable", "--now", unit_name)
            if not result.ok:
                logger.warning(
                    "Failed to disable legacy unit %s: %s",
                    unit_name,
                    result.detail.strip(),
                )
        else:
            out.write(
                f"systemctl unavailable; removed legacy unit file only: {unit_name}\n"
            )

        try:
            get_unit_path(env.home, unit.name).unlink()
        except FileNotFoundError:
            out.write(f"Legacy systemd unit not found at {unit.unit_path}\n")
            continue
        logger.info("Removed legacy unit file %s", unit.unit_path)
        out.write(f"{format_line('Removed legacy systemd service', unit.unit_path)}\n")

    return units
