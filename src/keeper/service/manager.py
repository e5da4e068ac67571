"""High-level service management interface."""

from collections.abc import AsyncIterator
from typing import TextIO

from keeper.config.models import ServiceEnv
from keeper.service.base import (
    LegacyUnitRecord,
    ServiceCommandConfig,
    ServiceError,
    ServiceRuntimeStatus,
    ServiceState,
)
from keeper.service.exec import stream_command
from keeper.service.legacy import find_legacy_units, uninstall_legacy_units
from keeper.service.linger import LingerStatus, enable_linger, read_linger_status
from keeper.service.scope import ScopeResolver
from keeper.service.systemctl import Systemctl
from keeper.service.systemd import SystemdService


class ServiceManager:
    """High-level service management interface.

    Wires the environment, scope resolver and systemd service together and
    turns service errors into (success, message) results for the CLI.

    Example:
        manager = ServiceManager(ServiceEnv.from_environ())
        success, message = await manager.restart()
        status = await manager.status()
    """

    def __init__(
        self,
        env: ServiceEnv | None = None,
        systemctl: Systemctl | None = None,
        stdout: TextIO | None = None,
    ):
        """Initialize the service manager.

        Args:
            env: Service environment, or None to read os.environ.
            systemctl: Scoped systemctl, or None to create one honoring the
                environment's scope override.
            stdout: Stream for progress lines.
        """
        self._env = env or ServiceEnv.from_environ()
        self._systemctl = systemctl or Systemctl(
            ScopeResolver(self._env.scope_override)
        )
        self._stdout = stdout
        self._service = SystemdService(self._env, self._systemctl, stdout)

    @property
    def service(self) -> SystemdService:
        return self._service

    @property
    def unit_name(self) -> str:
        return self._service.identity.unit_name

    async def scope_label(self) -> str:
        scope = await self._systemctl.scope()
        return scope.label

    async def install(
        self, command: ServiceCommandConfig, description: str | None = None
    ) -> tuple[bool, str]:
        """Install, enable and (re)start the service.

        Returns:
            Tuple of (success, message).
        """
        try:
            unit_path = await self._service.install(command, description)
        except ServiceError as e:
            return False, f"Error installing service: {e}"
        return True, f"Installed {self.unit_name} ({unit_path})"

    async def uninstall(self) -> tuple[bool, str]:
        try:
            removed = await self._service.uninstall()
        except ServiceError as e:
            return False, f"Error uninstalling service: {e}"
        if removed:
            return True, "Service uninstalled"
        return True, "Service was not installed"

    async def stop(self) -> tuple[bool, str]:
        """Stop the service.

        Returns:
            Tuple of (success, message).
        """
        try:
            await self._service.stop()
        except ServiceError as e:
            return False, f"Error stopping service: {e}"
        return True, "Service stopped"

    async def restart(self) -> tuple[bool, str]:
        try:
            await self._service.restart()
        except ServiceError as e:
            return False, f"Error restarting service: {e}"
        status = await self._service.read_runtime()
        if status.status == ServiceState.RUNNING and status.pid:
            return True, f"Service restarted (PID {status.pid})"
        return True, "Service restarted"

    async def is_enabled(self) -> tuple[bool, str]:
        try:
            enabled = await self._service.is_enabled()
        except ServiceError as e:
            return False, str(e)
        return enabled, f"{self.unit_name} is {'enabled' if enabled else 'disabled'}"

    async def status(self) -> ServiceRuntimeStatus:
        return await self._service.read_runtime()

    async def command(self) -> ServiceCommandConfig | None:
        return await self._service.read_command()

    async def find_legacy(self) -> list[LegacyUnitRecord]:
        return await find_legacy_units(self._env, self._systemctl)

    async def uninstall_legacy(self) -> list[LegacyUnitRecord]:
        return await uninstall_legacy_units(self._env, self._systemctl, self._stdout)

    async def linger_status(self) -> LingerStatus:
        return await read_linger_status(self._env, self._systemctl.runner)

    async def enable_linger(self, sudo: bool = False) -> tuple[bool, str]:
        result = await enable_linger(self._env, self._systemctl.runner, sudo=sudo)
        if result.ok:
            return True, f"Enabled lingering for {self._env.user}"
        return False, f"Error enabling lingering: {result.detail.strip()}"

    async def logs(self, follow: bool = False, lines: int = 50) -> AsyncIterator[str]:
        """Stream service logs from journalctl.

        Args:
            follow: If True, continue streaming new lines.
            lines: Number of historical lines to show.

        Yields:
            Log lines.
        """
        args = await self._service.log_command(lines=lines, follow=follow)
        async for line in stream_command(*args):
            yield line
