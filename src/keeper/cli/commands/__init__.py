"""CLI command modules."""

from keeper.cli.commands import service

__all__ = ["service"]
