"""Configuration models using Pydantic."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

SCOPE_ENV_VAR = "KEEPER_SYSTEMD_SCOPE"
UNIT_ENV_VAR = "KEEPER_SYSTEMD_UNIT"
PROFILE_ENV_VAR = "KEEPER_PROFILE"
VERSION_ENV_VAR = "KEEPER_SERVICE_VERSION"

ScopeOverride = Literal["user", "system"]


class ConfigError(Exception):
    """Configuration error."""

    pass


def _blank_to_none(value: str | None) -> str | None:
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value or None


class ServiceEnv(BaseModel):
    """Environment-derived settings for managing the service unit.

    Built once by the caller (usually from ``os.environ``) and passed to
    every service operation.
    """

    home: Path
    user: str | None = None
    profile: str | None = None
    unit_override: str | None = None
    scope_override: ScopeOverride | None = None
    service_version: str | None = None

    @field_validator("user", "profile", "unit_override", "service_version", mode="before")
    @classmethod
    def _strip_blank(cls, value: str | None) -> str | None:
        return _blank_to_none(value)

    @field_validator("scope_override", mode="before")
    @classmethod
    def _normalize_scope(cls, value: str | None) -> str | None:
        value = _blank_to_none(value)
        if not isinstance(value, str):
            return value
        value = value.lower()
        if value not in ("user", "system"):
            # Unrecognized overrides fall back to auto-detection
            logger.warning(
                "Ignoring %s=%r (expected 'user' or 'system')", SCOPE_ENV_VAR, value
            )
            return None
        return value

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> "ServiceEnv":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Raises:
            ConfigError: If the environment holds invalid values.
        """
        env = os.environ if environ is None else environ
        home = env.get("HOME") or str(Path.home())
        try:
            return cls(
                home=Path(home).expanduser(),
                user=env.get("USER") or env.get("LOGNAME"),
                profile=env.get(PROFILE_ENV_VAR),
                unit_override=env.get(UNIT_ENV_VAR),
                scope_override=env.get(SCOPE_ENV_VAR),
                service_version=env.get(VERSION_ENV_VAR),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid service environment: {e}") from e
