from __future__ import annotations

import logging

import typer
from questionary import Choice

from pidock_core.catalog import ServiceId, all_definitions
from pidock_core.errors import PidockError
from pidock_core.lifecycle import DEFAULT_LOG_LINES, Action
from pidock_core.outcomes import OutcomeStatus
from pidock_core.runtime import ContainerInfo, ServiceState

from . import console
from .commands import docker_cmd, passbolt_cmd, services_cmd, system_cmd
from .config import load_config, resolve_compose_dir
from .factory import make_controller, make_runtime
from .interactive import ask_positive_int, ask_text, confirm_choice, select_item, select_many
from .version import cli_version

log = logging.getLogger(__name__)

ABOUT_TEXT = """\
pidock installs and manages self-hosted services on a Raspberry Pi
(or any Debian-based host) using Docker Compose.

Manifests and credentials are generated once and reused afterwards.
Delete a manifest to regenerate it on the next install.
"""

_MAIN_CHOICES = [
    Choice("Install Docker & Docker Compose", value="docker"),
    Choice("Select and install services", value="install"),
    Choice("Manage containers", value="manage"),
    Choice("Service catalog", value="catalog"),
    Choice("System information", value="system"),
    Choice("About", value="about"),
    Choice("Exit", value="exit"),
]

_ACTION_CHOICES = [
    Choice("Start", value=Action.START.value),
    Choice("Stop", value=Action.STOP.value),
    Choice("Restart", value=Action.RESTART.value),
    Choice("Remove", value=Action.REMOVE.value),
    Choice("Show logs", value="logs"),
    Choice("Back", value="back"),
]


def _docker_status_label() -> str:
    result = docker_cmd.check_prereqs()
    if not result.docker_installed:
        return "Docker not installed"
    if not result.compose_installed:
        return "Compose missing"
    if not result.docker_running:
        return "daemon unreachable"
    return "Docker ready"


def _install_docker() -> None:
    cfg = load_config()
    docker_cmd.install_docker(owner=cfg.owner or None, assume_yes=False)


def _install_services() -> None:
    if not docker_cmd.check_prereqs().ready:
        console.err("Docker & Docker Compose are required. Install them first.")
        return
    runtime = make_runtime()
    try:
        running = {item.name for item in runtime.containers() if item.state is ServiceState.RUNNING}
    except PidockError as exc:
        console.err(str(exc))
        return
    choices = [
        Choice(definition.title, value=definition.identifier.value, checked=definition.container_name in running)
        for definition in all_definitions()
    ]
    selected = select_many("Select services to install (space to toggle):", choices)
    if not selected:
        console.info("No services selected.")
        return
    outcomes = services_cmd.run_install(selected)
    started = {o.identifier for o in outcomes if o.status is OutcomeStatus.STARTED}
    if ServiceId.PASSBOLT.value in started and confirm_choice("Register the first Passbolt administrator now?", default=False):
        _register_passbolt_admin()
    console.info(f"Compose files are stored in {resolve_compose_dir(load_config())}")


def _register_passbolt_admin() -> None:
    email = ask_text("Administrator e-mail", default=passbolt_cmd.DEFAULT_ADMIN_EMAIL)
    if email is None:
        return
    passbolt_cmd.register_admin(make_runtime(), email=email, first_name="Admin", last_name="User")


def container_choices(items: list[ContainerInfo]) -> list[Choice]:
    # questionary titles are plain text, rich markup would show up verbatim
    return [Choice(f"{item.name}  {item.state.value}  {item.image}", value=item.name) for item in items]


def _manage_containers() -> None:
    controller = make_controller(make_runtime())
    try:
        items = controller.list()
    except PidockError as exc:
        console.err(str(exc))
        return
    if not items:
        console.info("No containers found. Install some services first.")
        return
    selected = select_many("Select containers:", container_choices(items))
    if not selected:
        return
    action = select_item(f"Action for {', '.join(selected)}:", _ACTION_CHOICES)
    if action in (None, "back"):
        return
    if action == "logs":
        _show_logs(selected)
        return
    if action == Action.REMOVE.value:
        console.warn("Removing a container deletes all data not kept in a named volume.")
        if not confirm_choice(f"Remove {', '.join(selected)}?", default=False):
            console.info("Nothing removed.")
            return
    services_cmd.run_action(Action(action), selected)


def _show_logs(selected: list[str]) -> None:
    if len(selected) != 1:
        console.err("Select exactly one container to view logs.")
        return
    lines = ask_positive_int("How many log lines?", default=DEFAULT_LOG_LINES)
    if lines is None:
        return
    controller = make_controller(make_runtime())
    try:
        text = controller.logs(selected, lines)
    except PidockError as exc:
        console.err(str(exc))
        return
    with console.console.pager():
        console.console.print(text or "(no logs)", markup=False, highlight=False)


def _about() -> None:
    console.rule(f"pidock {cli_version()}")
    console.print(ABOUT_TEXT)


_HANDLERS = {
    "docker": _install_docker,
    "install": _install_services,
    "manage": _manage_containers,
    "catalog": services_cmd.catalog,
    "system": lambda: system_cmd.info_cmd(json_output=False),
    "about": _about,
}


def run_menu() -> None:
    while True:
        choice = select_item(f"pidock - {_docker_status_label()}", _MAIN_CHOICES)
        if choice is None or choice == "exit":
            return
        try:
            _HANDLERS[choice]()
        except typer.Exit as exc:
            # commands exit through typer; the menu keeps running
            log.debug("menu action %s exited with %s", choice, exc.exit_code)
