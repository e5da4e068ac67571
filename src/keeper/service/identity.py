"""Unit naming: which unit Keeper manages for a given environment."""

from dataclasses import dataclass
from pathlib import Path

from keeper.config.models import VERSION_ENV_VAR, ServiceEnv
from keeper.config.paths import get_unit_path
from keeper.service.unit import DEFAULT_DESCRIPTION

SERVICE_NAME = "keeper"
UNIT_SUFFIX = ".service"


def normalize_profile(profile: str | None) -> str | None:
    """Return the profile name, or None for the default profile."""
    if not profile:
        return None
    profile = profile.strip()
    if not profile or profile.lower() == "default":
        return None
    return profile


def service_name_for_profile(profile: str | None) -> str:
    """Default unit name (without suffix) for a profile."""
    profile = normalize_profile(profile)
    return f"{SERVICE_NAME}-{profile}" if profile else SERVICE_NAME


@dataclass(frozen=True)
class UnitIdentity:
    """Name of the managed unit, without the .service suffix."""

    name: str
    profile: str | None = None

    @classmethod
    def from_env(cls, env: ServiceEnv) -> "UnitIdentity":
        """Derive the identity from an explicit unit override or the profile."""
        profile = normalize_profile(env.profile)
        if env.unit_override:
            return cls(name=env.unit_override.removesuffix(UNIT_SUFFIX), profile=profile)
        return cls(name=service_name_for_profile(profile), profile=profile)

    @property
    def unit_name(self) -> str:
        return f"{self.name}{UNIT_SUFFIX}"

    def unit_path(self, home: Path) -> Path:
        return get_unit_path(home, self.name)


def resolve_service_description(
    identity: UnitIdentity,
    env: ServiceEnv,
    environment: dict[str, str] | None = None,
    description: str | None = None,
) -> str:
    """Build the unit Description.

    An explicit description wins. Otherwise the default is qualified with
    the profile and the service version, preferring the version in the
    service's own environment over the caller's.
    """
    if description and description.strip():
        return description.strip()

    parts = [DEFAULT_DESCRIPTION]
    if identity.profile:
        parts.append(f"(profile: {identity.profile})")
    version = (environment or {}).get(VERSION_ENV_VAR) or env.service_version
    if version and version.strip():
        parts.append(f"v{version.strip()}")
    return " ".join(parts)
