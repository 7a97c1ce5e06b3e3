from __future__ import annotations

from typer.testing import CliRunner

from conftest import FakeRuntime
from pidock_cli import main
from pidock_cli.commands import passbolt_cmd, services_cmd
from pidock_core.runtime import CommandResult, ContainerInfo, ServiceState


def _invoke(args: list[str], **kwargs):  # noqa: ANN003
    app = main._build_app()
    runner = CliRunner()
    return runner.invoke(app, args, **kwargs)


def test_help_lists_commands(isolated_config) -> None:
    result = _invoke(["--help"])
    assert result.exit_code == 0
    for name in ("install", "status", "logs", "settings", "docker", "system"):
        assert name in result.output


def test_install_reports_each_service_and_exits_1_on_partial_failure(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime()
    runtime.up_results["pihole"] = CommandResult(exit_code=1, output="bind: address already in use")
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["install", "pihole", "grafana"])

    assert result.exit_code == 1
    assert "address already in use" in result.output
    assert "grafana started" in result.output
    assert [project for _, project in runtime.compose_up_calls] == ["pihole", "grafana"]


def test_install_prints_url_and_credentials_hint(isolated_config, monkeypatch) -> None:
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: FakeRuntime())

    result = _invoke(["install", "pihole"])

    assert result.exit_code == 0
    assert "http://10.0.0.2:8080/admin" in result.output
    assert "pihole_credentials.txt" in result.output.replace("\n", "")


def test_install_without_docker_is_fatal(isolated_config, monkeypatch) -> None:
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: FakeRuntime(available=False))

    result = _invoke(["install", "grafana"])

    assert result.exit_code == 2
    assert "Docker is not available" in result.output


def test_remove_requires_confirmation(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("grafana", ServiceState.RUNNING, "grafana/grafana")])
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["remove", "grafana"], input="n\n")

    assert result.exit_code == 1
    assert runtime.actions == []


def test_remove_with_yes(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("grafana", ServiceState.RUNNING, "grafana/grafana")])
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["remove", "grafana", "--yes"])

    assert result.exit_code == 0
    assert runtime.actions == [("remove", "grafana")]


def test_stop_unknown_container_exits_1(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("pihole", ServiceState.RUNNING, "pihole/pihole")])
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["stop", "ghost", "pihole"])

    assert result.exit_code == 1
    assert "ghost: container not found" in result.output
    assert runtime.actions == [("stop", "pihole")]


def test_logs_rejects_several_containers(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("pihole", ServiceState.RUNNING, "pihole/pihole")])
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["logs", "pihole", "grafana"])

    assert result.exit_code == 2
    assert "exactly one container" in result.output
    assert runtime.actions == []


def test_logs_prints_output(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("pihole", ServiceState.RUNNING, "pihole/pihole")])
    runtime.log_text = "FTL started"
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["logs", "pihole", "--lines", "5"])

    assert result.exit_code == 0
    assert "FTL started" in result.output


def test_status_lists_containers(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime([ContainerInfo("pihole", ServiceState.RUNNING, "pihole/pihole")])
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["status"])

    assert result.exit_code == 0
    assert "Pi-hole" in result.output
    assert "running" in result.output


def test_settings_set_and_get(isolated_config) -> None:
    result = _invoke(["settings", "set", "--timezone", "Europe/Berlin"])
    assert result.exit_code == 0

    result = _invoke(["settings", "get", "timezone"])
    assert result.exit_code == 0
    assert result.output.strip() == "Europe/Berlin"


def test_settings_get_unknown_key(isolated_config) -> None:
    result = _invoke(["settings", "get", "api_token"])
    assert result.exit_code == 2


def test_passbolt_register_admin_requires_manifest(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime()
    monkeypatch.setattr(passbolt_cmd, "make_runtime", lambda: runtime)

    result = _invoke(["passbolt", "register-admin", "--email", "ops@example.com"])

    assert result.exit_code == 2
    assert runtime.exec_calls == []


def test_passbolt_register_admin_execs_in_container(isolated_config, monkeypatch) -> None:
    runtime = FakeRuntime()
    monkeypatch.setattr(services_cmd, "make_runtime", lambda: runtime)
    monkeypatch.setattr(passbolt_cmd, "make_runtime", lambda: runtime)
    assert _invoke(["install", "passbolt"]).exit_code == 0

    result = _invoke(["passbolt", "register-admin", "--email", "ops@example.com"])

    assert result.exit_code == 0
    manifest, project, service, command = runtime.exec_calls[0]
    assert (project, service) == ("passbolt", "passbolt")
    assert manifest.name == "passbolt.yaml"
    assert "ops@example.com" in command[3]
