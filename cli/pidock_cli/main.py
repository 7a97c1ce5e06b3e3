from __future__ import annotations

import sys

import typer

from .commands import docker_cmd, passbolt_cmd, services_cmd, settings_cmd, system_cmd
from .config import load_config, resolve_log_file
from .interactive import is_interactive
from .logging_ import setup_logging
from .version import cli_version


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pidock {cli_version()}")
        raise typer.Exit()


def _build_app() -> typer.Typer:
    app = typer.Typer(
        name="pidock",
        help="Install and manage self-hosted services with Docker Compose.",
        no_args_is_help=False,
    )

    app.add_typer(settings_cmd.app, name="settings")
    app.add_typer(docker_cmd.app, name="docker")
    app.add_typer(system_cmd.app, name="system")
    app.add_typer(passbolt_cmd.app, name="passbolt")

    app.command("install")(services_cmd.install)
    app.command("status")(services_cmd.status)
    app.command("catalog")(services_cmd.catalog)
    app.command("start")(services_cmd.start)
    app.command("stop")(services_cmd.stop)
    app.command("restart")(services_cmd.restart)
    app.command("remove")(services_cmd.remove)
    app.command("logs")(services_cmd.logs)

    @app.callback(invoke_without_command=True)
    def _main(
            ctx: typer.Context,
            verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose logs."),
            version: bool = typer.Option(
                False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
            ),
    ):
        setup_logging(verbose, resolve_log_file(load_config()))
        if ctx.invoked_subcommand is None:
            if len(sys.argv) > 1 or not is_interactive():
                typer.echo(ctx.get_help())
                raise typer.Exit(code=0)
            from .menu import run_menu

            run_menu()
            raise typer.Exit(code=0)

    return app


app = _build_app()
