"""Configuration for Keeper."""

from keeper.config.models import ConfigError, ServiceEnv
from keeper.config.paths import get_backup_path, get_systemd_user_dir, get_unit_path

__all__ = [
    "ConfigError",
    "ServiceEnv",
    "get_backup_path",
    "get_systemd_user_dir",
    "get_unit_path",
]
