"""Systemd service lifecycle for the Keeper daemon.

Installs, controls and inspects a single unit file under
``~/.config/systemd/user``, talking to systemd only through systemctl in the
scope picked by a ScopeResolver.
"""

import logging
import shutil
import sys
from pathlib import Path
from typing import TextIO

from keeper.config.models import ServiceEnv
from keeper.config.paths import get_backup_path
from keeper.service.base import (
    CommandFailed,
    FailureKind,
    InvalidCommand,
    ServiceCommandConfig,
    ServiceError,
    ServiceRuntimeStatus,
    ServiceState,
    classify_failure,
)
from keeper.service.identity import UnitIdentity, resolve_service_description
from keeper.service.output import format_line, write_formatted_lines
from keeper.service.show import SHOW_PROPERTIES, parse_systemd_show
from keeper.service.systemctl import Systemctl
from keeper.service.unit import build_unit, parse_unit

logger = logging.getLogger(__name__)


class SystemdService:
    """Lifecycle operations for the unit named by the service environment.

    Every operation asserts that systemctl is reachable first, except
    read_runtime(), which reports an unreachable manager as unknown status.
    """

    def __init__(
        self,
        env: ServiceEnv,
        systemctl: Systemctl | None = None,
        stdout: TextIO | None = None,
    ):
        self._env = env
        self._systemctl = systemctl or Systemctl()
        self._stdout = stdout or sys.stdout
        self.identity = UnitIdentity.from_env(env)

    @property
    def unit_path(self) -> Path:
        return self.identity.unit_path(self._env.home)

    @property
    def systemctl(self) -> Systemctl:
        return self._systemctl

    async def _run_checked(self, action: str, *args: str) -> None:
        result = await self._systemctl.run(action, *args)
        if not result.ok:
            raise CommandFailed(action, result.detail)

    async def install(
        self,
        command: ServiceCommandConfig,
        description: str | None = None,
    ) -> Path:
        """Write the unit file, then reload, enable and restart the service.

        The unit text is rendered before anything is touched. An existing
        unit is copied to ``<unit>.bak`` first. Each systemctl
        step must succeed; a failure stops the sequence with the unit file
        already written.

        Returns:
            Path of the installed unit file.

        Raises:
            InvalidCommand: The command cannot be rendered into a unit.
            ServiceError: systemctl is unavailable or a step failed.
        """
        try:
            unit = build_unit(
                description=resolve_service_description(
                    self.identity, self._env, command.environment, description
                ),
                program_arguments=command.program_arguments,
                working_directory=command.working_directory,
                environment=command.environment,
            )
        except ValueError as e:
            raise InvalidCommand(str(e)) from e

        await self._systemctl.assert_available()

        unit_path = self.unit_path
        unit_path.parent.mkdir(parents=True, exist_ok=True)

        backup_path: Path | None = get_backup_path(unit_path)
        try:
            shutil.copyfile(unit_path, backup_path)
            logger.info("Backed up %s to %s", unit_path, backup_path)
        except FileNotFoundError:
            backup_path = None

        unit_path.write_text(unit, encoding="utf-8")
        logger.info("Wrote unit file %s", unit_path)

        unit_name = self.identity.unit_name
        await self._run_checked("daemon-reload")
        await self._run_checked("enable", unit_name)
        await self._run_checked("restart", unit_name)

        lines: list[tuple[str, object]] = [("Installed systemd service", unit_path)]
        if backup_path:
            lines.append(("Previous unit backed up to", backup_path))
        write_formatted_lines(self._stdout, lines, leading_blank_line=True)
        return unit_path

    async def uninstall(self) -> bool:
        """Disable and stop the service, then delete its unit file.

        Returns:
            True if a unit file was removed.
        """
        await self._systemctl.assert_available()

        unit_name = self.identity.unit_name
        result = await self._systemctl.run("disable", "--now", unit_name)
        if not result.ok:
            # Already disabled, stopped or never loaded
            logger.debug("disable --now %s: %s", unit_name, result.detail.strip())

        unit_path = self.unit_path
        try:
            unit_path.unlink()
        except FileNotFoundError:
            self._stdout.write(f"Systemd service not found at {unit_path}\n")
            return False
        logger.info("Removed unit file %s", unit_path)
        self._stdout.write(f"{format_line('Removed systemd service', unit_path)}\n")
        return True

    async def _run_action(self, action: str, label: str) -> None:
        await self._systemctl.assert_available()
        unit_name = self.identity.unit_name
        await self._run_checked(action, unit_name)
        self._stdout.write(f"{format_line(label, unit_name)}\n")

    async def stop(self) -> None:
        await self._run_action("stop", "Stopped systemd service")

    async def restart(self) -> None:
        await self._run_action("restart", "Restarted systemd service")

    async def is_enabled(self) -> bool:
        await self._systemctl.assert_available()
        result = await self._systemctl.run("is-enabled", self.identity.unit_name)
        return result.ok

    async def read_command(self) -> ServiceCommandConfig | None:
        """Read the command config back from the installed unit file.

        Returns None if the unit is missing, unreadable or has no ExecStart.
        """
        unit_path = self.unit_path
        try:
            content = unit_path.read_text(encoding="utf-8")
        except OSError:
            return None
        return parse_unit(content, source_path=str(unit_path))

    async def read_runtime(self) -> ServiceRuntimeStatus:
        """Query systemd for the unit's runtime state.

        Never raises for manager problems: an unreachable manager is
        reported as unknown, a missing unit as stopped.
        """
        try:
            await self._systemctl.assert_available()
        except ServiceError as e:
            return ServiceRuntimeStatus(status=ServiceState.UNKNOWN, detail=str(e))

        result = await self._systemctl.run(
            "show",
            self.identity.unit_name,
            "--no-pager",
            "--property",
            ",".join(SHOW_PROPERTIES),
        )
        if not result.ok:
            detail = result.detail.strip()
            missing = classify_failure(detail) is FailureKind.NOT_FOUND
            return ServiceRuntimeStatus(
                status=ServiceState.STOPPED if missing else ServiceState.UNKNOWN,
                detail=detail or None,
                missing_unit=missing,
            )

        info = parse_systemd_show(result.stdout)
        active_state = info.active_state.lower() if info.active_state else None
        if active_state == "active":
            status = ServiceState.RUNNING
        elif active_state:
            status = ServiceState.STOPPED
        else:
            status = ServiceState.UNKNOWN

        return ServiceRuntimeStatus(
            status=status,
            state=info.active_state,
            sub_state=info.sub_state,
            pid=info.main_pid,
            last_exit_status=info.exec_main_status,
            last_exit_reason=info.exec_main_code,
        )

    async def log_command(self, lines: int = 50, follow: bool = False) -> list[str]:
        """journalctl arguments for this unit's logs in the resolved scope."""
        scope = await self._systemctl.scope()
        args = ["journalctl", *scope.args, "-u", self.identity.unit_name, "-n", str(lines)]
        if follow:
            args.append("-f")
        return args
