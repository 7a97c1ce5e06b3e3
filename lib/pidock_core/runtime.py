from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence

from .errors import ExternalCommandFailure, RuntimeUnavailable

log = logging.getLogger(__name__)

_PS_FORMAT = "{{.Names}}|{{.State}}|{{.Image}}"
_RUNNING_STATES = {"running", "restarting"}
_VERSION_RE = re.compile(r"version\s+([^\s,]+)", re.IGNORECASE)


class ServiceState(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    ABSENT = "absent"


@dataclass(frozen=True)
class ContainerInfo:
    name: str
    state: ServiceState
    image: str


@dataclass(frozen=True)
class CommandResult:
    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class ContainerRuntime(Protocol):
    def available(self) -> bool: ...

    def version(self) -> str | None: ...

    def compose_version(self) -> str | None: ...

    def volume_count(self) -> int: ...

    def containers(self) -> list[ContainerInfo]: ...

    def state(self, name: str) -> ServiceState: ...

    def compose_up(self, manifest: Path, project: str) -> CommandResult: ...

    def compose_exec(self, manifest: Path, project: str, service: str, command: Sequence[str]) -> CommandResult: ...

    def start(self, name: str) -> CommandResult: ...

    def stop(self, name: str) -> CommandResult: ...

    def restart(self, name: str) -> CommandResult: ...

    def remove(self, name: str) -> CommandResult: ...

    def logs(self, name: str, lines: int) -> CommandResult: ...


def parse_ps_output(text: str) -> list[ContainerInfo]:
    items: list[ContainerInfo] = []
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line:
            continue
        parts = line.split("|", 2)
        if len(parts) < 3:
            continue
        name, state, image = (p.strip() for p in parts)
        status = ServiceState.RUNNING if state.lower() in _RUNNING_STATES else ServiceState.STOPPED
        items.append(ContainerInfo(name=name, state=status, image=image))
    return items


class DockerCli:
    """ContainerRuntime backed by the docker command-line client."""

    def __init__(self, binary: str = "docker"):
        self._binary = binary

    def _run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        cmd = [self._binary, *args]
        log.debug("running %s", " ".join(cmd))
        try:
            res = subprocess.run(cmd, capture_output=True, text=True, cwd=cwd)
        except FileNotFoundError as exc:
            raise RuntimeUnavailable(f"{self._binary} is not installed") from exc
        output = "\n".join(part.strip() for part in (res.stdout, res.stderr) if part and part.strip())
        if res.returncode != 0:
            log.debug("%s exited with %s: %s", " ".join(cmd), res.returncode, output)
        return CommandResult(exit_code=res.returncode, output=output)

    def available(self) -> bool:
        try:
            return self._run(["info"]).ok
        except RuntimeUnavailable:
            return False

    def version(self) -> str | None:
        try:
            res = self._run(["--version"])
        except RuntimeUnavailable:
            return None
        if not res.ok:
            return None
        # "Docker version 24.0.7, build afdd53b"
        match = _VERSION_RE.search(res.output)
        return match.group(1) if match else (res.output.strip() or None)

    def compose_version(self) -> str | None:
        try:
            res = self._run(["compose", "version", "--short"])
        except RuntimeUnavailable:
            return None
        if not res.ok:
            return None
        return res.output.strip() or None

    def volume_count(self) -> int:
        res = self._run(["volume", "ls", "-q"])
        if not res.ok:
            raise ExternalCommandFailure(res.exit_code, res.output, "docker volume ls failed")
        return len([line for line in res.output.splitlines() if line.strip()])

    def containers(self) -> list[ContainerInfo]:
        res = self._run(["ps", "-a", "--format", _PS_FORMAT])
        if not res.ok:
            raise ExternalCommandFailure(res.exit_code, res.output, "docker ps failed")
        return parse_ps_output(res.output)

    def state(self, name: str) -> ServiceState:
        for item in self.containers():
            if item.name == name:
                return item.state
        return ServiceState.ABSENT

    def compose_up(self, manifest: Path, project: str) -> CommandResult:
        return self._run(
            ["compose", "-p", project, "-f", str(manifest), "up", "-d"],
            cwd=manifest.parent,
        )

    def compose_exec(self, manifest: Path, project: str, service: str, command: Sequence[str]) -> CommandResult:
        return self._run(
            ["compose", "-p", project, "-f", str(manifest), "exec", "-T", service, *command],
            cwd=manifest.parent,
        )

    def start(self, name: str) -> CommandResult:
        return self._run(["start", name])

    def stop(self, name: str) -> CommandResult:
        return self._run(["stop", name])

    def restart(self, name: str) -> CommandResult:
        return self._run(["restart", name])

    def remove(self, name: str) -> CommandResult:
        stopped = self._run(["stop", name])
        if not stopped.ok:
            log.debug("stop before remove failed for %s: %s", name, stopped.output)
        return self._run(["rm", name])

    def logs(self, name: str, lines: int) -> CommandResult:
        return self._run(["logs", "--tail", str(lines), name])
