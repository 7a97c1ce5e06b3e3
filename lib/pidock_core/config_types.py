from __future__ import annotations

import string
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SECRET_ALPHABET = string.ascii_letters + string.digits


@dataclass(frozen=True)
class HostFacts:
    ip: str
    timezone: str


@dataclass(frozen=True)
class InstallerConfig:
    compose_dir: Path
    credentials_dir: Path
    owner: str | None = None
    secret_alphabet: str = DEFAULT_SECRET_ALPHABET

    def manifest_path(self, identifier: str) -> Path:
        return self.compose_dir / f"{identifier}.yaml"

    def credentials_path(self, identifier: str) -> Path:
        return self.credentials_dir / f"{identifier}_credentials.txt"

    def tls_dir(self, identifier: str) -> Path:
        return self.compose_dir / f"{identifier}-ssl"
