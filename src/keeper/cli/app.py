"""Main CLI application."""

from typing import Annotated

import typer

from keeper.cli.commands import service

app = typer.Typer(
    name="keeper",
    help="Keeper - manage the Keeper daemon's systemd service",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log systemctl invocations (DEBUG level)",
        ),
    ] = False,
) -> None:
    """Keeper - manage the Keeper daemon's systemd service."""
    from keeper.logging import configure_logging

    configure_logging(level="DEBUG" if verbose else None, use_rich=True)


service.register(app)


if __name__ == "__main__":
    app()
