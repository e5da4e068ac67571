"""Selection between the user-session and system-wide systemd instance."""

import logging
from enum import Enum

from keeper.service.base import FailureKind, classify_failure
from keeper.service.exec import CommandRunner, run_command

logger = logging.getLogger(__name__)

SYSTEMCTL = "systemctl"


class ServiceScope(Enum):
    """Which systemd instance systemctl talks to."""

    USER = "user"
    SYSTEM = "system"

    @property
    def args(self) -> tuple[str, ...]:
        """Flags prepended to every systemctl invocation."""
        return ("--user",) if self is ServiceScope.USER else ()

    @property
    def label(self) -> str:
        return self.value


class ScopeResolver:
    """Resolves and caches the systemd scope for the lifetime of the instance.

    Resolution order:
    1. Explicit override "system" or "user"
    2. Probe ``systemctl --user status``: success means user scope; a bus
       connection failure means system scope; any other failure still
       means user scope (the probe may fail before the unit exists)

    Create one resolver at startup and pass it to everything that runs
    systemctl, so the probe happens at most once per run.
    """

    def __init__(
        self,
        override: str | None = None,
        runner: CommandRunner = run_command,
    ):
        self._override = override.strip().lower() if override else None
        self._runner = runner
        self._scope: ServiceScope | None = None

    @property
    def resolved(self) -> ServiceScope | None:
        """Cached scope, or None if not resolved yet."""
        return self._scope

    async def resolve(self) -> ServiceScope:
        if self._scope is not None:
            return self._scope

        if self._override == "system":
            self._scope = ServiceScope.SYSTEM
        elif self._override == "user":
            self._scope = ServiceScope.USER
        else:
            self._scope = await self._probe()

        logger.debug("systemd scope resolved to %s", self._scope.label)
        return self._scope

    def reset(self) -> None:
        """Forget the cached scope so the next resolve() probes again."""
        self._scope = None

    async def _probe(self) -> ServiceScope:
        result = await self._runner(SYSTEMCTL, "--user", "status")
        if result.ok:
            return ServiceScope.USER
        detail = f"{result.stderr} {result.stdout}"
        if classify_failure(detail) is FailureKind.BUS_UNREACHABLE:
            logger.info("User systemd bus unreachable, using system scope")
            return ServiceScope.SYSTEM
        return ServiceScope.USER
