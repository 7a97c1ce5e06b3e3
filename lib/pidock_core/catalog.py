from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from . import manifests
from .config_types import HostFacts
from .credentials import SecretSpec
from .errors import UnknownService
from .manifests import RenderContext


class ServiceId(str, Enum):
    PORTAINER = "portainer"
    WATCHTOWER = "watchtower"
    PIALERT = "pialert"
    PIHOLE = "pihole"
    VAULTWARDEN = "vaultwarden"
    PASSBOLT = "passbolt"
    UNBOUND = "unbound"
    GRAFANA = "grafana"
    PROMETHEUS = "prometheus"
    HEDGEDOC = "hedgedoc"


@dataclass(frozen=True)
class CompanionFile:
    """Extra file written next to the manifest on first install."""

    relative_path: str
    render: Callable[[RenderContext], str]
    mode: int = 0o644


@dataclass(frozen=True)
class ServiceDefinition:
    identifier: ServiceId
    label: str
    description: str
    container_name: str
    manifest: Callable[[RenderContext], dict[str, Any]]
    secrets: tuple[SecretSpec, ...] = ()
    url_template: str | None = None
    note: str | None = None
    companions: tuple[CompanionFile, ...] = ()
    needs_tls: bool = False

    @property
    def title(self) -> str:
        return f"{self.label} - {self.description}"

    def url(self, host: HostFacts) -> str | None:
        if not self.url_template:
            return None
        return self.url_template.format(ip=host.ip)


_DEFINITIONS = (
    ServiceDefinition(
        identifier=ServiceId.PORTAINER,
        label="Portainer",
        description="Docker Web UI",
        container_name="portainer",
        manifest=manifests.portainer,
        url_template="http://{ip}:9000",
    ),
    ServiceDefinition(
        identifier=ServiceId.WATCHTOWER,
        label="Watchtower",
        description="Auto-update containers",
        container_name="watchtower",
        manifest=manifests.watchtower,
        note="Checks for image updates daily at 04:00.",
    ),
    ServiceDefinition(
        identifier=ServiceId.PIALERT,
        label="Pi.Alert",
        description="Detect unknown devices",
        container_name="pialert",
        manifest=manifests.pialert,
        url_template="http://{ip}:20211",
    ),
    ServiceDefinition(
        identifier=ServiceId.PIHOLE,
        label="Pi-hole",
        description="Network ad blocker",
        container_name="pihole",
        manifest=manifests.pihole,
        secrets=(SecretSpec("WEBPASSWORD", "Pi-hole web password", 12),),
        url_template="http://{ip}:8080/admin",
    ),
    ServiceDefinition(
        identifier=ServiceId.VAULTWARDEN,
        label="Vaultwarden",
        description="Bitwarden server",
        container_name="vaultwarden",
        manifest=manifests.vaultwarden,
        url_template="http://{ip}:8100",
    ),
    ServiceDefinition(
        identifier=ServiceId.PASSBOLT,
        label="Passbolt",
        description="Open source password manager",
        container_name="passbolt",
        manifest=manifests.passbolt,
        secrets=(
            SecretSpec("MYSQL_ROOT_PASSWORD", "Passbolt database root password", 16),
            SecretSpec("MYSQL_PASSWORD", "Passbolt database user password", 16),
        ),
        url_template="https://{ip}",
        note="Register the first admin with `pidock passbolt register-admin` once the container is healthy.",
        companions=(
            CompanionFile(manifests.PASSBOLT_REGISTER_SCRIPT, manifests.passbolt_register_script, mode=0o755),
        ),
        needs_tls=True,
    ),
    ServiceDefinition(
        identifier=ServiceId.UNBOUND,
        label="Unbound",
        description="DNS resolver",
        container_name="unbound",
        manifest=manifests.unbound,
        note="Recursive DNS listens on port 5335.",
    ),
    ServiceDefinition(
        identifier=ServiceId.GRAFANA,
        label="Grafana",
        description="Dashboards & Visualization",
        container_name="grafana",
        manifest=manifests.grafana,
        url_template="http://{ip}:3000",
        note="Default login: admin/admin",
    ),
    ServiceDefinition(
        identifier=ServiceId.PROMETHEUS,
        label="Prometheus",
        description="Monitoring & Alerts",
        container_name="prometheus",
        manifest=manifests.prometheus,
        url_template="http://{ip}:9090",
        companions=(CompanionFile(manifests.PROMETHEUS_CONFIG, manifests.prometheus_config),),
    ),
    ServiceDefinition(
        identifier=ServiceId.HEDGEDOC,
        label="HedgeDoc",
        description="Collaborative Markdown editor",
        container_name="hedgedoc",
        manifest=manifests.hedgedoc,
        secrets=(
            SecretSpec("POSTGRES_PASSWORD", "HedgeDoc PostgreSQL password", 16),
            SecretSpec("CMD_SESSION_SECRET", "HedgeDoc session secret", 24),
        ),
        url_template="http://{ip}:3001",
    ),
)

CATALOG: dict[ServiceId, ServiceDefinition] = {d.identifier: d for d in _DEFINITIONS}

_missing = [sid.value for sid in ServiceId if sid not in CATALOG]
if _missing:
    raise RuntimeError(f"catalog has no definition for: {', '.join(_missing)}")


def parse_service_id(value: str | ServiceId) -> ServiceId:
    if isinstance(value, ServiceId):
        return value
    try:
        return ServiceId((value or "").strip().lower())
    except ValueError:
        raise UnknownService(value) from None


def get_definition(value: str | ServiceId) -> ServiceDefinition:
    return CATALOG[parse_service_id(value)]


def all_definitions() -> list[ServiceDefinition]:
    return [CATALOG[sid] for sid in ServiceId]


def find_by_container(name: str) -> ServiceDefinition | None:
    for definition in _DEFINITIONS:
        if definition.container_name == name:
            return definition
    return None
