from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

import typer
from rich.prompt import Confirm

from pidock_core.runtime import DockerCli

from .. import console
from ..config import load_config

app = typer.Typer(help="Install and check Docker and Docker Compose.", no_args_is_help=True)

log = logging.getLogger(__name__)

GET_DOCKER_URL = "https://get.docker.com"
PREREQ_PACKAGES = [
    "ca-certificates",
    "curl",
    "gnupg",
    "lsb-release",
    "apt-transport-https",
]


@dataclass
class PrereqResult:
    docker_installed: bool
    compose_installed: bool
    docker_running: bool

    @property
    def ready(self) -> bool:
        return self.docker_installed and self.compose_installed


@dataclass(frozen=True)
class InstallStep:
    label: str
    command: list[str] | str
    fallback: list[str] | None = None

    @property
    def shell(self) -> bool:
        return isinstance(self.command, str)


def _command_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def _command_success(cmd: list[str]) -> bool:
    try:
        subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except (subprocess.CalledProcessError, OSError):
        return False
    return True


def _is_root() -> bool:
    return os.geteuid() == 0


def check_prereqs() -> PrereqResult:
    docker_installed = _command_exists("docker")
    compose_installed = False
    docker_running = False
    if docker_installed:
        compose_installed = _command_success(["docker", "compose", "version"])
        docker_running = _command_success(["docker", "info"])
    return PrereqResult(
        docker_installed=docker_installed,
        compose_installed=compose_installed,
        docker_running=docker_running,
    )


def install_steps(owner: str | None) -> list[InstallStep]:
    steps = [
        InstallStep("Updating package lists", ["apt-get", "update", "-qq"]),
        InstallStep("Installing prerequisites", ["apt-get", "install", "-y", *PREREQ_PACKAGES]),
        InstallStep("Installing Docker using the official convenience script", f"curl -fsSL {GET_DOCKER_URL} | sh"),
        InstallStep("Enabling Docker service", ["systemctl", "enable", "--now", "docker"]),
    ]
    if owner and owner != "root":
        steps.append(InstallStep(f"Adding {owner} to the docker group", ["usermod", "-aG", "docker", owner]))
    steps.append(
        InstallStep(
            "Installing Docker Compose",
            ["apt-get", "install", "-y", "docker-compose-plugin"],
            fallback=["apt-get", "install", "-y", "docker-compose"],
        )
    )
    return steps


def _run_step(step: InstallStep) -> bool:
    console.info(f"{step.label}...")
    log.info("%s", step.label)
    res = subprocess.run(step.command, shell=step.shell, capture_output=True, text=True)
    if res.returncode == 0:
        return True
    log.error("%s failed (%s): %s", step.label, res.returncode, (res.stderr or "").strip())
    if step.fallback:
        console.warn(f"{step.label} failed, trying {' '.join(step.fallback)}")
        res = subprocess.run(step.fallback, capture_output=True, text=True)
        if res.returncode == 0:
            return True
        log.error("fallback failed (%s): %s", res.returncode, (res.stderr or "").strip())
    detail = (res.stderr or res.stdout or "").strip()
    if detail:
        console.err(detail.splitlines()[-1])
    return False


def install_docker(*, owner: str | None, assume_yes: bool) -> None:
    result = check_prereqs()
    if result.ready:
        runtime = DockerCli()
        console.ok(
            f"Docker ({runtime.version() or 'unknown'}) and Docker Compose "
            f"({runtime.compose_version() or 'unknown'}) are already installed."
        )
        return
    if not _is_root():
        console.err("Installing Docker requires root. Re-run with sudo.")
        raise typer.Exit(code=2)
    if not assume_yes:
        if not Confirm.ask("Docker & Docker Compose will now be installed. This may take a few minutes. Continue?", default=True):
            console.err("Aborted.")
            raise typer.Exit(code=1)

    for step in install_steps(owner):
        if not _run_step(step):
            console.err(f"{step.label} failed. Check the installer log for details.")
            raise typer.Exit(code=2)

    result = check_prereqs()
    if not result.ready:
        console.err("Docker installation finished but docker or docker compose is still missing.")
        raise typer.Exit(code=2)
    console.ok("Docker and Docker Compose installed. Reboot or log in again to apply group changes.")


@app.command("install")
def install_cmd(
        yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
):
    """Install Docker Engine and the Compose plugin."""
    cfg = load_config()
    install_docker(owner=cfg.owner or None, assume_yes=yes)


@app.command("check")
def check_cmd():
    """Report whether Docker and Docker Compose are usable."""
    result = check_prereqs()
    if not result.docker_installed:
        console.err("Docker is not installed. Run `sudo pidock docker install`.")
        raise typer.Exit(code=2)
    if not result.compose_installed:
        console.warn("Docker is installed but the Compose plugin is missing.")
        raise typer.Exit(code=2)
    if not result.docker_running:
        console.warn("Docker is installed but the daemon is not reachable (is your user in the docker group?).")
        raise typer.Exit(code=2)
    console.ok("Docker and Docker Compose are available.")
