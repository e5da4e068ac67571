"""Centralized path management for Keeper.

Unit files live where systemd looks for user units, derived from the home
directory of the service environment (not necessarily the current user's).

Default locations:
- User units: ~/.config/systemd/user/<name>.service
- Backups: alongside the unit, with a .bak suffix
"""

from pathlib import Path


def get_systemd_user_dir(home: Path) -> Path:
    """Get the systemd user unit directory for a home directory."""
    return home / ".config" / "systemd" / "user"


def get_unit_path(home: Path, name: str) -> Path:
    """Get the unit file path for a service name (without .service)."""
    return get_systemd_user_dir(home) / f"{name}.service"


def get_backup_path(unit_path: Path) -> Path:
    """Get the backup path used when an existing unit is replaced."""
    return unit_path.with_name(f"{unit_path.name}.bak")
