"""Service management commands."""

import asyncio
from typing import Annotated

import typer
from rich.markup import escape

from keeper.cli.console import console, create_table, dim, error, success, warning


def _create_manager():
    from keeper.config import ConfigError, ServiceEnv
    from keeper.service import ServiceManager

    try:
        env = ServiceEnv.from_environ()
    except ConfigError as e:
        error(str(e))
        raise typer.Exit(1) from e
    return ServiceManager(env, stdout=console.file)


def _run_service_action(action_name: str, *args) -> None:
    """Run a service manager action and handle the result.

    Args:
        action_name: Name of the ServiceManager method to call.
        args: Positional arguments for the method.
    """
    manager = _create_manager()
    action = getattr(manager, action_name)
    result, message = asyncio.run(action(*args))

    if result:
        success(message)
    else:
        error(message)
        raise typer.Exit(1)


def _parse_env_options(values: list[str]) -> dict[str, str]:
    environment: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"expected KEY=VALUE, got {item!r}", param_hint="--env")
        environment[key.strip()] = value
    return environment


def register(app: typer.Typer) -> None:
    """Register service subcommands."""
    service_app = typer.Typer(
        help="Manage the Keeper systemd service", no_args_is_help=True
    )
    app.add_typer(service_app, name="service")

    @service_app.command("install")
    def service_install(
        command: Annotated[
            list[str],
            typer.Argument(help="Command to run, e.g. -- /usr/bin/keeperd --port 8080"),
        ],
        description: Annotated[
            str | None,
            typer.Option("--description", "-d", help="Unit description"),
        ] = None,
        workdir: Annotated[
            str | None,
            typer.Option("--workdir", "-w", help="Working directory"),
        ] = None,
        env: Annotated[
            list[str] | None,
            typer.Option("--env", "-e", help="Environment variable (KEY=VALUE)"),
        ] = None,
    ) -> None:
        """Install (or reinstall) and start the service."""
        from keeper.service import ServiceCommandConfig

        config = ServiceCommandConfig(
            program_arguments=command,
            working_directory=workdir,
            environment=_parse_env_options(env or []),
        )
        _run_service_action("install", config, description)

    @service_app.command("uninstall")
    def service_uninstall() -> None:
        """Disable, stop and remove the service."""
        _run_service_action("uninstall")

    @service_app.command("stop")
    def service_stop() -> None:
        """Stop the service."""
        _run_service_action("stop")

    @service_app.command("restart")
    def service_restart() -> None:
        """Restart the service."""
        _run_service_action("restart")

    @service_app.command("enabled")
    def service_enabled() -> None:
        """Exit 0 if the service is enabled, 1 otherwise."""
        _run_service_action("is_enabled")

    @service_app.command("status")
    def service_status() -> None:
        """Show service status."""
        from keeper.service import ServiceState

        manager = _create_manager()

        async def gather():
            return (
                await manager.status(),
                await manager.command(),
                await manager.scope_label(),
            )

        status, command, scope = asyncio.run(gather())

        table = create_table(
            "Keeper Service Status",
            [
                ("Property", "cyan"),
                ("Value", ""),
            ],
        )

        state_colors = {
            ServiceState.RUNNING: "green",
            ServiceState.STOPPED: "yellow",
            ServiceState.UNKNOWN: "dim",
        }
        state_color = state_colors.get(status.status, "white")
        table.add_row("Status", f"[{state_color}]{status.status.value}[/{state_color}]")
        table.add_row("Unit", manager.unit_name)
        table.add_row("Scope", scope)

        if status.state:
            sub_state = f" ({status.sub_state})" if status.sub_state else ""
            table.add_row("State", f"{status.state}{sub_state}")
        if status.pid is not None:
            table.add_row("PID", str(status.pid))
        if status.last_exit_status is not None or status.last_exit_reason:
            parts = [
                str(part)
                for part in (status.last_exit_status, status.last_exit_reason)
                if part is not None
            ]
            table.add_row("Last exit", " ".join(parts))
        if status.missing_unit:
            table.add_row("Unit file", "[yellow]not loaded[/yellow]")
        if status.detail:
            table.add_row("Detail", escape(status.detail))

        if command:
            table.add_row("", "")
            table.add_row("[bold]Command[/bold]", "")
            table.add_row("Source", escape(command.source_path or ""))
            table.add_row("ExecStart", escape(" ".join(command.program_arguments)))
            if command.working_directory:
                table.add_row("Working directory", escape(command.working_directory))
            for key in command.environment:
                table.add_row("Environment", escape(key))

        console.print(table)

    @service_app.command("logs")
    def service_logs(
        follow: Annotated[
            bool,
            typer.Option(
                "--follow",
                "-f",
                help="Follow log output",
            ),
        ] = False,
        lines: Annotated[
            int,
            typer.Option(
                "--lines",
                "-n",
                help="Number of lines to show",
            ),
        ] = 50,
    ) -> None:
        """View service logs."""
        manager = _create_manager()

        async def do_logs():
            async for line in manager.logs(follow=follow, lines=lines):
                console.print(line, markup=False, highlight=False)

        try:
            asyncio.run(do_logs())
        except KeyboardInterrupt:
            pass

    @service_app.command("legacy")
    def service_legacy(
        clean: Annotated[
            bool,
            typer.Option("--clean", help="Disable and remove legacy units"),
        ] = False,
    ) -> None:
        """List (or remove) units left by older releases."""
        manager = _create_manager()

        if clean:
            units = asyncio.run(manager.uninstall_legacy())
            if not units:
                dim("No legacy units found")
            return

        units = asyncio.run(manager.find_legacy())
        if not units:
            dim("No legacy units found")
            return

        table = create_table(
            "Legacy Units",
            [("Name", "cyan"), ("Path", ""), ("File", ""), ("Enabled", "")],
        )
        for unit in units:
            table.add_row(
                unit.name,
                unit.unit_path,
                "yes" if unit.exists else "no",
                "yes" if unit.enabled else "no",
            )
        console.print(table)
        warning("Run 'keeper service legacy --clean' to remove them")

    @service_app.command("linger")
    def service_linger(
        enable: Annotated[
            bool,
            typer.Option("--enable", help="Enable lingering for the current user"),
        ] = False,
        sudo: Annotated[
            bool,
            typer.Option("--sudo", help="Use sudo (non-interactive) for loginctl"),
        ] = False,
    ) -> None:
        """Show or enable lingering so the service survives logout."""
        if enable:
            _run_service_action("enable_linger", sudo)
            return

        manager = _create_manager()
        status = asyncio.run(manager.linger_status())
        if status.linger is None:
            error(status.detail or "Unable to read lingering status")
            raise typer.Exit(1)
        if status.linger:
            success(f"Lingering is enabled for {status.user}")
        else:
            warning(f"Lingering is disabled for {status.user}")
            dim("The service stops when you log out. Run 'keeper service linger --enable'")
