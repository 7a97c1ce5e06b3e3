from __future__ import annotations

from pidock_core import CatalogResolver, DockerCli, LifecycleController, Reconciler
from pidock_core.runtime import ContainerRuntime

from .config import AppConfig, resolve_host_facts, to_installer_config


def make_runtime() -> ContainerRuntime:
    return DockerCli()


def make_resolver(cfg: AppConfig) -> CatalogResolver:
    return CatalogResolver(to_installer_config(cfg), resolve_host_facts(cfg))


def make_reconciler(resolver: CatalogResolver, runtime: ContainerRuntime) -> Reconciler:
    return Reconciler(resolver, runtime)


def make_controller(runtime: ContainerRuntime) -> LifecycleController:
    return LifecycleController(runtime)
