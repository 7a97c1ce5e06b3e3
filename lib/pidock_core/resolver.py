from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .catalog import ServiceDefinition, ServiceId, get_definition
from .config_types import HostFacts, InstallerConfig
from .credentials import materialize_secrets
from .errors import GenerationFailure
from .files import write_file
from .manifests import RenderContext, dump_yaml
from .tls import load_or_create_self_signed

log = logging.getLogger(__name__)

MANIFEST_MODE = 0o640


@dataclass(frozen=True)
class ManifestFile:
    identifier: ServiceId
    path: Path
    content: str
    created: bool = False


class CatalogResolver:
    """Turns a catalog identifier into a manifest on disk.

    Existing manifests are never rewritten: an operator may have edited one
    by hand, and reinstalling from scratch means deleting it first.
    """

    def __init__(self, config: InstallerConfig, host: HostFacts):
        self._config = config
        self._host = host

    @property
    def config(self) -> InstallerConfig:
        return self._config

    @property
    def host(self) -> HostFacts:
        return self._host

    def manifest_path(self, identifier: str | ServiceId) -> Path:
        return self._config.manifest_path(get_definition(identifier).identifier.value)

    def resolve(self, identifier: str | ServiceId) -> ManifestFile:
        definition = get_definition(identifier)
        path = self._config.manifest_path(definition.identifier.value)
        if path.exists():
            log.debug("manifest for %s already exists at %s", definition.identifier.value, path)
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise GenerationFailure(f"cannot read existing manifest {path}: {exc}") from exc
            return ManifestFile(identifier=definition.identifier, path=path, content=content)
        content = self._materialize(definition, path)
        log.info("wrote manifest for %s to %s", definition.identifier.value, path)
        return ManifestFile(identifier=definition.identifier, path=path, content=content, created=True)

    def _materialize(self, definition: ServiceDefinition, path: Path) -> str:
        cfg = self._config
        name = definition.identifier.value
        secrets: dict[str, str] = {}
        if definition.secrets:
            secrets = materialize_secrets(
                cfg.credentials_path(name),
                title=f"{definition.label} credentials",
                specs=definition.secrets,
                alphabet=cfg.secret_alphabet,
                owner=cfg.owner,
            )
        if definition.needs_tls:
            load_or_create_self_signed(cfg.tls_dir(name), self._host.ip, owner=cfg.owner)

        ctx = RenderContext(
            identifier=name,
            host=self._host,
            secrets=secrets,
            compose_dir=cfg.compose_dir,
            ssl_dir=cfg.tls_dir(name),
        )
        try:
            for companion in definition.companions:
                target = cfg.compose_dir / companion.relative_path
                if target.exists():
                    continue
                write_file(target, companion.render(ctx), mode=companion.mode, owner=cfg.owner)
            content = dump_yaml(
                definition.manifest(ctx),
                header=f"{definition.title}\nGenerated by pidock. Delete this file to regenerate it.",
            )
            write_file(path, content, mode=MANIFEST_MODE, owner=cfg.owner)
        except OSError as exc:
            raise GenerationFailure(f"failed to write manifest for {name}: {exc}") from exc
        return content
