"""Scoped systemctl invocation."""

import logging

from keeper.service.base import (
    FailureKind,
    ManagerUnavailable,
    ScopeUnreachable,
    classify_failure,
)
from keeper.service.exec import CommandResult, CommandRunner, run_command
from keeper.service.scope import SYSTEMCTL, ScopeResolver, ServiceScope

logger = logging.getLogger(__name__)


class Systemctl:
    """Runs systemctl against the scope chosen by a ScopeResolver.

    Example:
        systemctl = Systemctl(ScopeResolver(env.scope_override))
        await systemctl.assert_available()
        result = await systemctl.run("restart", "keeper.service")
    """

    def __init__(
        self,
        resolver: ScopeResolver | None = None,
        runner: CommandRunner = run_command,
    ):
        self._runner = runner
        self._resolver = resolver or ScopeResolver(runner=runner)

    @property
    def resolver(self) -> ScopeResolver:
        return self._resolver

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    async def scope(self) -> ServiceScope:
        return await self._resolver.resolve()

    async def run(self, *args: str) -> CommandResult:
        """Run systemctl with the scope flag prepended."""
        scope = await self.scope()
        return await self._runner(SYSTEMCTL, *scope.args, *args)

    async def assert_available(self) -> None:
        """Raise unless systemctl answers a status query in the resolved scope.

        Raises:
            ManagerUnavailable: systemctl is not installed.
            ScopeUnreachable: the user or system manager cannot be reached.
        """
        scope = await self.scope()
        result = await self.run("status")
        if result.ok:
            return
        detail = result.detail
        if classify_failure(detail) is FailureKind.NOT_FOUND:
            raise ManagerUnavailable(
                "systemctl not available; systemd services are required on Linux."
            )
        raise ScopeUnreachable(scope.label, detail.strip())

    async def is_available(self) -> bool:
        """Whether a status query succeeds in the resolved scope."""
        result = await self.run("status")
        return result.ok

    async def is_installed(self) -> bool:
        """Whether the systemctl binary itself can be run.

        Unlike is_available(), a failing status query still counts as long
        as the failure is not a missing binary.
        """
        result = await self.run("status")
        if result.ok:
            return True
        return classify_failure(result.detail) is not FailureKind.NOT_FOUND
