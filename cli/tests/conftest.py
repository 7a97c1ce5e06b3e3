from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pidock_core.config_types import HostFacts, InstallerConfig
from pidock_core.resolver import CatalogResolver
from pidock_core.runtime import CommandResult, ContainerInfo, ServiceState


class FakeRuntime:
    def __init__(self, containers: list[ContainerInfo] | None = None, *, available: bool = True):
        self.items = list(containers or [])
        self.is_available = available
        self.compose_up_calls: list[tuple[Path, str]] = []
        self.exec_calls: list[tuple[Path, str, str, list[str]]] = []
        self.actions: list[tuple[str, str]] = []
        self.up_results: dict[str, CommandResult] = {}
        self.action_results: dict[str, CommandResult] = {}
        self.log_text = ""

    def available(self) -> bool:
        return self.is_available

    def version(self) -> str | None:
        return "24.0.7" if self.is_available else None

    def compose_version(self) -> str | None:
        return "2.21.0" if self.is_available else None

    def volume_count(self) -> int:
        return 3

    def containers(self) -> list[ContainerInfo]:
        return list(self.items)

    def state(self, name: str) -> ServiceState:
        for item in self.items:
            if item.name == name:
                return item.state
        return ServiceState.ABSENT

    def compose_up(self, manifest: Path, project: str) -> CommandResult:
        self.compose_up_calls.append((manifest, project))
        return self.up_results.get(project, CommandResult(exit_code=0, output=f"Container {project} Started"))

    def compose_exec(self, manifest, project, service, command) -> CommandResult:  # noqa: ANN001
        self.exec_calls.append((manifest, project, service, list(command)))
        return CommandResult(exit_code=0, output="https://127.0.0.1/setup/start/abc")

    def _act(self, action: str, name: str) -> CommandResult:
        self.actions.append((action, name))
        return self.action_results.get(name, CommandResult(exit_code=0, output=name))

    def start(self, name: str) -> CommandResult:
        return self._act("start", name)

    def stop(self, name: str) -> CommandResult:
        return self._act("stop", name)

    def restart(self, name: str) -> CommandResult:
        return self._act("restart", name)

    def remove(self, name: str) -> CommandResult:
        return self._act("remove", name)

    def logs(self, name: str, lines: int) -> CommandResult:
        self.actions.append(("logs", name))
        return CommandResult(exit_code=0, output=self.log_text)


@pytest.fixture
def installer_config(tmp_path) -> InstallerConfig:
    return InstallerConfig(compose_dir=tmp_path / "compose-files", credentials_dir=tmp_path)


@pytest.fixture
def host() -> HostFacts:
    return HostFacts(ip="192.168.1.50", timezone="Europe/Berlin")


@pytest.fixture
def resolver(installer_config, host) -> CatalogResolver:
    return CatalogResolver(installer_config, host)


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    from pidock_cli import config

    monkeypatch.setattr(config, "user_config_dir", lambda _: str(tmp_path / "config"))
    monkeypatch.setattr(config, "user_log_dir", lambda _: str(tmp_path / "logs"))
    monkeypatch.setenv(config.ENV_BASE_DIR, str(tmp_path / "base"))
    monkeypatch.setenv(config.ENV_HOST_IP, "10.0.0.2")
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    from pidock_cli import logging_

    root = logging.getLogger()
    for handler in logging_._installed:
        root.removeHandler(handler)
        handler.close()
    logging_._installed.clear()
