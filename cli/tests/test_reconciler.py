from __future__ import annotations

import pytest

from conftest import FakeRuntime
from pidock_core import resolver as resolver_mod
from pidock_core.errors import GenerationFailure, RuntimeUnavailable
from pidock_core.outcomes import OutcomeStatus, all_ok
from pidock_core.reconciler import Reconciler
from pidock_core.runtime import CommandResult, ContainerInfo, ServiceState


def test_running_service_is_not_brought_up_again(resolver, installer_config) -> None:
    runtime = FakeRuntime([ContainerInfo("grafana", ServiceState.RUNNING, "grafana/grafana:latest")])

    outcomes = Reconciler(resolver, runtime).apply(["grafana"])

    assert [o.status for o in outcomes] == [OutcomeStatus.ALREADY_RUNNING]
    assert runtime.compose_up_calls == []
    assert not installer_config.manifest_path("grafana").exists()


def test_stopped_service_is_brought_up_with_its_manifest(resolver, installer_config) -> None:
    runtime = FakeRuntime([ContainerInfo("portainer", ServiceState.STOPPED, "portainer/portainer-ce")])

    outcomes = Reconciler(resolver, runtime).apply(["portainer"])

    assert outcomes[0].status is OutcomeStatus.STARTED
    assert runtime.compose_up_calls == [(installer_config.manifest_path("portainer"), "portainer")]


def test_batch_continues_after_failure(resolver) -> None:
    runtime = FakeRuntime()
    runtime.up_results["pihole"] = CommandResult(exit_code=1, output="port 8080 already allocated")

    outcomes = Reconciler(resolver, runtime).apply(["pihole", "grafana"])

    assert [(o.identifier, o.status) for o in outcomes] == [
        ("pihole", OutcomeStatus.FAILED),
        ("grafana", OutcomeStatus.STARTED),
    ]
    assert outcomes[0].exit_code == 1
    assert "already allocated" in outcomes[0].output
    assert not all_ok(outcomes)


def test_unknown_identifier_fails_only_itself(resolver) -> None:
    runtime = FakeRuntime()

    outcomes = Reconciler(resolver, runtime).apply(["nextcloud", "watchtower"])

    assert outcomes[0].status is OutcomeStatus.FAILED
    assert "nextcloud" in (outcomes[0].message or "")
    assert outcomes[1].status is OutcomeStatus.STARTED
    assert [project for _, project in runtime.compose_up_calls] == ["watchtower"]


def test_duplicates_are_applied_once_in_order(resolver) -> None:
    runtime = FakeRuntime()

    outcomes = Reconciler(resolver, runtime).apply(["unbound", "grafana", "unbound"])

    assert [o.identifier for o in outcomes] == ["unbound", "grafana"]


def test_unavailable_runtime_fails_before_generation(resolver, installer_config) -> None:
    runtime = FakeRuntime(available=False)

    with pytest.raises(RuntimeUnavailable):
        Reconciler(resolver, runtime).apply(["pihole"])

    assert not installer_config.credentials_path("pihole").exists()
    assert not installer_config.compose_dir.exists()


def test_unreadable_manifest_fails_only_its_service(resolver, installer_config) -> None:
    path = installer_config.manifest_path("grafana")
    path.parent.mkdir(parents=True)
    path.write_bytes(b"# \xff edited\nservices: {}\n")
    runtime = FakeRuntime()

    outcomes = Reconciler(resolver, runtime).apply(["grafana", "portainer"])

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.STARTED]
    assert "grafana.yaml" in (outcomes[0].message or "")
    assert [project for _, project in runtime.compose_up_calls] == ["portainer"]


def test_unreadable_credentials_fail_only_their_service(resolver, installer_config) -> None:
    installer_config.credentials_path("pihole").write_bytes(b"WEBPASSWORD=\xfe\xff\n")
    runtime = FakeRuntime()

    outcomes = Reconciler(resolver, runtime).apply(["pihole", "portainer"])

    assert [o.status for o in outcomes] == [OutcomeStatus.FAILED, OutcomeStatus.STARTED]
    assert not installer_config.manifest_path("pihole").exists()
    assert installer_config.manifest_path("portainer").exists()


def test_generation_failure_is_reported_and_batch_continues(resolver, installer_config, monkeypatch) -> None:
    def _broken_tls(directory, common_name, *, owner):  # noqa: ANN001, ARG001
        raise GenerationFailure(f"failed to generate TLS keypair in {directory}")

    monkeypatch.setattr(resolver_mod, "load_or_create_self_signed", _broken_tls)
    runtime = FakeRuntime()

    outcomes = Reconciler(resolver, runtime).apply(["passbolt", "grafana"])

    assert [(o.identifier, o.status) for o in outcomes] == [
        ("passbolt", OutcomeStatus.FAILED),
        ("grafana", OutcomeStatus.STARTED),
    ]
    assert "TLS keypair" in (outcomes[0].message or "")
    assert not installer_config.manifest_path("passbolt").exists()
    assert installer_config.manifest_path("grafana").exists()
    assert [project for _, project in runtime.compose_up_calls] == ["grafana"]
