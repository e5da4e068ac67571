"""Tests for environment-derived configuration and unit identity."""

from pathlib import Path

import pytest

from keeper.config.models import ConfigError, ServiceEnv
from keeper.config.paths import get_backup_path, get_unit_path
from keeper.service.identity import (
    UnitIdentity,
    normalize_profile,
    resolve_service_description,
    service_name_for_profile,
)


class TestServiceEnv:
    """Tests for ServiceEnv.from_environ()."""

    def test_reads_environment(self, tmp_path):
        env = ServiceEnv.from_environ(
            {
                "HOME": str(tmp_path),
                "USER": "alice",
                "KEEPER_PROFILE": "work",
                "KEEPER_SYSTEMD_UNIT": "custom.service",
                "KEEPER_SYSTEMD_SCOPE": "system",
                "KEEPER_SERVICE_VERSION": "2.0.0",
            }
        )

        assert env.home == tmp_path
        assert env.user == "alice"
        assert env.profile == "work"
        assert env.unit_override == "custom.service"
        assert env.scope_override == "system"
        assert env.service_version == "2.0.0"

    def test_blank_values_are_none(self, tmp_path):
        env = ServiceEnv.from_environ(
            {"HOME": str(tmp_path), "KEEPER_PROFILE": "  ", "KEEPER_SYSTEMD_UNIT": ""}
        )

        assert env.profile is None
        assert env.unit_override is None
        assert env.scope_override is None

    def test_scope_override_normalized(self, tmp_path):
        env = ServiceEnv.from_environ(
            {"HOME": str(tmp_path), "KEEPER_SYSTEMD_SCOPE": " User "}
        )
        assert env.scope_override == "user"

    def test_unknown_scope_override_ignored(self, tmp_path, caplog):
        env = ServiceEnv.from_environ(
            {"HOME": str(tmp_path), "KEEPER_SYSTEMD_SCOPE": "global"}
        )

        assert env.scope_override is None
        assert "KEEPER_SYSTEMD_SCOPE" in caplog.text

    def test_logname_fallback(self, tmp_path):
        env = ServiceEnv.from_environ({"HOME": str(tmp_path), "LOGNAME": "bob"})
        assert env.user == "bob"

    def test_missing_home_uses_current_user(self):
        env = ServiceEnv.from_environ({})
        assert env.home == Path.home()

    def test_invalid_value_raises_config_error(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid service environment"):
            ServiceEnv.from_environ({"HOME": str(tmp_path), "USER": ["not", "a", "str"]})


class TestPaths:
    def test_unit_path(self, tmp_path):
        assert get_unit_path(tmp_path, "keeper") == (
            tmp_path / ".config" / "systemd" / "user" / "keeper.service"
        )

    def test_backup_path(self, tmp_path):
        unit = tmp_path / "keeper.service"
        assert get_backup_path(unit) == tmp_path / "keeper.service.bak"


class TestUnitIdentity:
    """Tests for UnitIdentity derivation."""

    @pytest.mark.parametrize(
        ("profile", "expected"),
        [
            (None, "keeper"),
            ("", "keeper"),
            ("default", "keeper"),
            ("Default", "keeper"),
            ("work", "keeper-work"),
            ("  dev ", "keeper-dev"),
        ],
    )
    def test_name_from_profile(self, profile, expected):
        assert service_name_for_profile(profile) == expected

    def test_normalize_profile(self):
        assert normalize_profile(" work ") == "work"
        assert normalize_profile("default") is None

    def test_from_env_default(self, tmp_path):
        identity = UnitIdentity.from_env(ServiceEnv(home=tmp_path))

        assert identity.name == "keeper"
        assert identity.unit_name == "keeper.service"
        assert identity.unit_path(tmp_path) == get_unit_path(tmp_path, "keeper")

    def test_override_strips_suffix(self, tmp_path):
        env = ServiceEnv(home=tmp_path, unit_override="my-daemon.service", profile="work")
        identity = UnitIdentity.from_env(env)

        assert identity.name == "my-daemon"
        assert identity.unit_name == "my-daemon.service"

    def test_override_without_suffix(self, tmp_path):
        identity = UnitIdentity.from_env(ServiceEnv(home=tmp_path, unit_override="mine"))
        assert identity.unit_name == "mine.service"


class TestServiceDescription:
    """Tests for resolve_service_description()."""

    def test_explicit_description_wins(self, tmp_path):
        env = ServiceEnv(home=tmp_path, profile="work")
        identity = UnitIdentity.from_env(env)

        assert resolve_service_description(identity, env, description=" Mine ") == "Mine"

    def test_default(self, tmp_path):
        env = ServiceEnv(home=tmp_path)
        identity = UnitIdentity.from_env(env)

        assert resolve_service_description(identity, env) == "Keeper Daemon"

    def test_profile_and_version(self, tmp_path):
        env = ServiceEnv(home=tmp_path, profile="work", service_version="1.0")
        identity = UnitIdentity.from_env(env)

        assert (
            resolve_service_description(identity, env)
            == "Keeper Daemon (profile: work) v1.0"
        )

    def test_service_environment_version_preferred(self, tmp_path):
        env = ServiceEnv(home=tmp_path, service_version="1.0")
        identity = UnitIdentity.from_env(env)

        description = resolve_service_description(
            identity, env, environment={"KEEPER_SERVICE_VERSION": "2.0"}
        )
        assert description == "Keeper Daemon v2.0"
