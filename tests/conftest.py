"""Shared test fixtures and factories."""

import io
from pathlib import Path

import pytest

from keeper.config.models import ServiceEnv
from keeper.service.exec import CommandResult
from keeper.service.scope import ScopeResolver
from keeper.service.systemctl import Systemctl
from keeper.service.systemd import SystemdService

# =============================================================================
# Fake command runner
# =============================================================================


class FakeRunner:
    """Scripted stand-in for run_command that records every call.

    Responses are keyed by program plus an argument prefix, with the scope
    flag ``--user`` ignored when matching. The longest matching prefix wins.
    Several responses for the same key are returned in order, the last one
    repeating. Unmatched calls succeed with empty output.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self._responses: dict[tuple[str, ...], list[CommandResult]] = {}

    def on(
        self,
        program: str,
        *args: str,
        code: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> "FakeRunner":
        key = (program, *args)
        self._responses.setdefault(key, []).append(
            CommandResult(code=code, stdout=stdout, stderr=stderr)
        )
        return self

    def reset(self) -> None:
        self._responses.clear()
        self.calls.clear()

    async def __call__(self, program: str, *args: str) -> CommandResult:
        self.calls.append((program, *args))
        normalized = (program, *(a for a in args if a != "--user"))

        best: tuple[str, ...] | None = None
        for key in self._responses:
            if normalized[: len(key)] == key and (best is None or len(key) > len(best)):
                best = key
        if best is None:
            return CommandResult(code=0)

        queue = self._responses[best]
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def systemctl_calls(self) -> list[tuple[str, ...]]:
        """Calls to systemctl, without the program name."""
        return [call[1:] for call in self.calls if call[0] == "systemctl"]

    def actions(self) -> list[tuple[str, ...]]:
        """systemctl calls other than availability probes, scope flag removed."""
        return [
            tuple(a for a in call if a != "--user")
            for call in self.systemctl_calls()
            if call not in (("--user", "status"), ("status",))
        ]


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def service_env(tmp_path: Path) -> ServiceEnv:
    """Service environment rooted in a temporary home directory."""
    return ServiceEnv(home=tmp_path / "home", user="tester")


@pytest.fixture
def systemctl(runner: FakeRunner) -> Systemctl:
    """systemctl pinned to user scope so tests don't depend on probing."""
    return Systemctl(ScopeResolver("user", runner=runner), runner=runner)


@pytest.fixture
def stdout() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def service(service_env: ServiceEnv, systemctl: Systemctl, stdout: io.StringIO) -> SystemdService:
    return SystemdService(service_env, systemctl, stdout)


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
