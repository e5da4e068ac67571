"""Keeper - systemd service lifecycle manager for the Keeper daemon."""

__version__ = "0.1.0"
