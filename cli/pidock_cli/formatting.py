from __future__ import annotations

from typing import Iterable

from rich.markup import escape
from rich.table import Table

from pidock_core.catalog import find_by_container
from pidock_core.outcomes import OutcomeStatus, ServiceOutcome
from pidock_core.runtime import ContainerInfo, ServiceState

from . import console

_STATE_LABELS = {
    ServiceState.RUNNING: "[green]running[/]",
    ServiceState.STOPPED: "[red]stopped[/]",
    ServiceState.ABSENT: "[dim]not installed[/]",
}

DEFAULT_OUTPUT_TAIL = 20


def format_state(state: ServiceState) -> str:
    return _STATE_LABELS.get(state, state.value)


def tail_lines(text: str, *, limit: int = DEFAULT_OUTPUT_TAIL) -> list[str]:
    lines = [line for line in (text or "").splitlines() if line.strip()]
    return lines[-limit:]


def containers_table(items: Iterable[ContainerInfo]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Container")
    table.add_column("Service")
    table.add_column("State")
    table.add_column("Image")
    for item in items:
        definition = find_by_container(item.name)
        table.add_row(
            escape(item.name),
            escape(definition.label) if definition else "-",
            format_state(item.state),
            escape(item.image),
        )
    return table


def print_outcome(outcome: ServiceOutcome, *, verb: str = "started") -> None:
    name = escape(outcome.identifier)
    if outcome.status is OutcomeStatus.STARTED:
        console.ok(f"{name} started.")
    elif outcome.status is OutcomeStatus.ALREADY_RUNNING:
        console.ok(f"{name} is already running.")
    elif outcome.status is OutcomeStatus.DONE:
        console.ok(f"{name} {verb}.")
    elif outcome.status is OutcomeStatus.NOT_FOUND:
        console.err(f"{name}: container not found.")
    else:
        console.err(f"{name}: {escape(outcome.message or 'failed')}")
        for line in tail_lines(outcome.output):
            console.print(f"  {escape(line)}", highlight=False)


def print_outcomes(outcomes: Iterable[ServiceOutcome], *, verb: str = "started") -> None:
    for outcome in outcomes:
        print_outcome(outcome, verb=verb)
