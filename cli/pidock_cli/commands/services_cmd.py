from __future__ import annotations

import typer
from rich.prompt import Confirm
from rich.table import Table

from pidock_core.catalog import all_definitions, get_definition
from pidock_core.errors import PidockError
from pidock_core.lifecycle import DEFAULT_LOG_LINES, Action
from pidock_core.outcomes import OutcomeStatus, ServiceOutcome, all_ok
from pidock_core.resolver import CatalogResolver
from pidock_core.runtime import ServiceState

from .. import console
from ..config import load_config
from ..factory import make_controller, make_reconciler, make_resolver, make_runtime
from ..formatting import containers_table, format_state, print_outcomes


def _fail(exc: PidockError) -> None:
    console.err(str(exc))
    raise typer.Exit(code=2)


def _exit_for(outcomes: list[ServiceOutcome]) -> None:
    if not all_ok(outcomes):
        raise typer.Exit(code=1)


def print_install_hints(outcome: ServiceOutcome, resolver: CatalogResolver) -> None:
    if outcome.status is not OutcomeStatus.STARTED:
        return
    definition = get_definition(outcome.identifier)
    url = definition.url(resolver.host)
    if url:
        console.info(f"{definition.label} is available at {url}")
    if definition.secrets:
        path = resolver.config.credentials_path(definition.identifier.value)
        console.info(f"Credentials saved to {path}")
    if definition.note:
        console.info(definition.note)


def run_install(identifiers: list[str]) -> list[ServiceOutcome]:
    cfg = load_config()
    runtime = make_runtime()
    resolver = make_resolver(cfg)
    reconciler = make_reconciler(resolver, runtime)
    try:
        outcomes = reconciler.apply(identifiers)
    except PidockError as exc:
        _fail(exc)
    for outcome in outcomes:
        print_outcomes([outcome])
        print_install_hints(outcome, resolver)
    return outcomes


def run_action(action: Action, identifiers: list[str]) -> list[ServiceOutcome]:
    controller = make_controller(make_runtime())
    try:
        outcomes = controller.act(action, identifiers)
    except PidockError as exc:
        _fail(exc)
    verb = {
        Action.START: "started",
        Action.STOP: "stopped",
        Action.RESTART: "restarted",
        Action.REMOVE: "removed",
    }[action]
    print_outcomes(outcomes, verb=verb)
    return outcomes


def install(
        identifiers: list[str] = typer.Argument(..., help="Catalog services to install, e.g. pihole grafana."),
):
    """Generate manifests for the selected services and bring them up."""
    _exit_for(run_install(identifiers))


def status():
    """Show every container known to Docker."""
    controller = make_controller(make_runtime())
    try:
        items = controller.list()
    except PidockError as exc:
        _fail(exc)
    if not items:
        console.info("No containers found. Install some services first.")
        return
    console.print(containers_table(items))


def catalog():
    """List installable services and whether they are running."""
    runtime = make_runtime()
    states: dict[str, ServiceState] = {}
    try:
        if runtime.available():
            states = {item.name: item.state for item in runtime.containers()}
    except PidockError as exc:
        console.warn(f"Could not query Docker: {exc}")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Service")
    table.add_column("Description")
    table.add_column("State")
    for definition in all_definitions():
        state = states.get(definition.container_name, ServiceState.ABSENT)
        table.add_row(definition.identifier.value, definition.title, format_state(state))
    console.print(table)


def start(identifiers: list[str] = typer.Argument(..., help="Container names.")):
    """Start stopped containers."""
    _exit_for(run_action(Action.START, identifiers))


def stop(identifiers: list[str] = typer.Argument(..., help="Container names.")):
    """Stop running containers."""
    _exit_for(run_action(Action.STOP, identifiers))


def restart(identifiers: list[str] = typer.Argument(..., help="Container names.")):
    """Restart containers."""
    _exit_for(run_action(Action.RESTART, identifiers))


def remove(
        identifiers: list[str] = typer.Argument(..., help="Container names."),
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """Stop and delete containers. Data outside named volumes is lost."""
    if not yes:
        console.warn("Removing a container deletes all data not kept in a named volume.")
        if not Confirm.ask(f"Remove {', '.join(identifiers)}?", default=False):
            console.err("Aborted.")
            raise typer.Exit(code=1)
    _exit_for(run_action(Action.REMOVE, identifiers))


def logs(
        identifiers: list[str] = typer.Argument(..., help="Container name."),
        lines: int = typer.Option(DEFAULT_LOG_LINES, "--lines", "-n", min=1, help="Number of lines to show."),
):
    """Show the last log lines of one container."""
    controller = make_controller(make_runtime())
    try:
        text = controller.logs(identifiers, lines)
    except PidockError as exc:
        console.err(str(exc))
        output = getattr(exc, "output", "")
        if output:
            typer.echo(output, err=True)
        raise typer.Exit(code=2)
    if text:
        typer.echo(text)
    else:
        console.print("(no logs)")
