"""Tests for systemd scope resolution and failure classification."""

import pytest

from keeper.service.base import FailureKind, classify_failure
from keeper.service.scope import ScopeResolver, ServiceScope


class TestClassifyFailure:
    """Tests for classify_failure()."""

    @pytest.mark.parametrize(
        "text",
        [
            "Failed to connect to bus: No medium found",
            "System has not been booted with systemd as init system (PID 1).",
            "Failed to connect to bus: No such file or directory",
            "Operation not supported",
        ],
    )
    def test_bus_unreachable(self, text):
        assert classify_failure(text) is FailureKind.BUS_UNREACHABLE

    def test_not_found(self):
        assert classify_failure("Unit foo.service not found.") is FailureKind.NOT_FOUND
        assert classify_failure("systemctl: command not found") is FailureKind.NOT_FOUND

    def test_case_insensitive(self):
        assert classify_failure("FAILED TO CONNECT") is FailureKind.BUS_UNREACHABLE

    def test_other(self):
        assert classify_failure("Access denied") is FailureKind.OTHER
        assert classify_failure("") is FailureKind.OTHER


class TestServiceScope:
    def test_args(self):
        assert ServiceScope.USER.args == ("--user",)
        assert ServiceScope.SYSTEM.args == ()

    def test_label(self):
        assert ServiceScope.USER.label == "user"
        assert ServiceScope.SYSTEM.label == "system"


class TestScopeResolver:
    """Tests for ScopeResolver."""

    @pytest.mark.asyncio
    async def test_system_override_skips_probe(self, runner):
        resolver = ScopeResolver("system", runner=runner)

        assert await resolver.resolve() is ServiceScope.SYSTEM
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_user_override_skips_probe(self, runner):
        resolver = ScopeResolver(" USER ", runner=runner)

        assert await resolver.resolve() is ServiceScope.USER
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_unrecognized_override_probes(self, runner):
        resolver = ScopeResolver("both", runner=runner)

        assert await resolver.resolve() is ServiceScope.USER
        assert runner.calls == [("systemctl", "--user", "status")]

    @pytest.mark.asyncio
    async def test_probe_success_is_user(self, runner):
        resolver = ScopeResolver(runner=runner)
        assert await resolver.resolve() is ServiceScope.USER

    @pytest.mark.asyncio
    async def test_bus_failure_is_system(self, runner):
        runner.on(
            "systemctl",
            "status",
            code=1,
            stderr="Failed to connect to bus: No such file or directory",
        )
        resolver = ScopeResolver(runner=runner)

        assert await resolver.resolve() is ServiceScope.SYSTEM

    @pytest.mark.asyncio
    async def test_bus_failure_in_stdout_is_system(self, runner):
        runner.on("systemctl", "status", code=1, stdout="System has not been booted")
        resolver = ScopeResolver(runner=runner)

        assert await resolver.resolve() is ServiceScope.SYSTEM

    @pytest.mark.asyncio
    async def test_unrecognized_failure_is_user(self, runner):
        runner.on("systemctl", "status", code=3, stderr="Something odd happened")
        resolver = ScopeResolver(runner=runner)

        assert await resolver.resolve() is ServiceScope.USER

    @pytest.mark.asyncio
    async def test_decision_is_cached(self, runner):
        runner.on("systemctl", "status", code=0)
        runner.on("systemctl", "status", code=1, stderr="Failed to connect to bus")
        resolver = ScopeResolver(runner=runner)

        first = await resolver.resolve()
        second = await resolver.resolve()

        assert first is second is ServiceScope.USER
        assert runner.calls == [("systemctl", "--user", "status")]
        assert resolver.resolved is ServiceScope.USER

    @pytest.mark.asyncio
    async def test_reset_probes_again(self, runner):
        runner.on("systemctl", "status", code=0)
        runner.on("systemctl", "status", code=1, stderr="Failed to connect to bus")
        resolver = ScopeResolver(runner=runner)

        assert await resolver.resolve() is ServiceScope.USER
        resolver.reset()
        assert resolver.resolved is None
        assert await resolver.resolve() is ServiceScope.SYSTEM

    @pytest.mark.asyncio
    async def test_separate_resolvers_do_not_share_cache(self, runner):
        runner.on("systemctl", "status", code=1, stderr="Failed to connect to bus")

        assert await ScopeResolver("user", runner=runner).resolve() is ServiceScope.USER
        assert await ScopeResolver(runner=runner).resolve() is ServiceScope.SYSTEM
