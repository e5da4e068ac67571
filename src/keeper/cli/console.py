"""Shared console utilities for CLI commands."""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Shared console instance for all CLI commands
console = Console()


def error(msg: str) -> None:
    """Print an error message in red."""
    console.print(f"[red]{escape(msg)}[/red]")


def warning(msg: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[yellow]{escape(msg)}[/yellow]")


def success(msg: str) -> None:
    """Print a success message in green."""
    console.print(f"[green]{escape(msg)}[/green]")


def dim(msg: str) -> None:
    """Print a dimmed message."""
    console.print(f"[dim]{escape(msg)}[/dim]")


def create_table(title: str, columns: list[tuple[str, str]]) -> Table:
    """Create a styled table from (name, style) column pairs."""
    table = Table(title=title)
    for name, style in columns:
        table.add_column(name, style=style)
    return table
