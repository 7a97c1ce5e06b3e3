from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from pathlib import Path

from .config_types import DEFAULT_SECRET_ALPHABET
from .errors import GenerationFailure
from .files import write_file

log = logging.getLogger(__name__)

CREDENTIALS_MODE = 0o600


@dataclass(frozen=True)
class SecretSpec:
    name: str
    label: str
    length: int = 16


def generate_secret(length: int, alphabet: str = DEFAULT_SECRET_ALPHABET) -> str:
    if length <= 0:
        raise GenerationFailure(f"secret length must be positive, got {length}")
    if not alphabet:
        raise GenerationFailure("secret alphabet is empty")
    return "".join(secrets.choice(alphabet) for _ in range(length))


def read_credentials(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise GenerationFailure(f"cannot read credentials from {path}: {exc}") from exc
    return parse_credentials(content)


def parse_credentials(content: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw in content.splitlines():
        if not raw.strip() or raw.lstrip().startswith("#"):
            continue
        if "=" not in raw:
            continue
        key, value = raw.split("=", 1)
        data[key.strip()] = value
    return data


def render_credentials(title: str, specs: tuple[SecretSpec, ...], values: dict[str, str]) -> str:
    lines = [f"# {title}"]
    for spec in specs:
        lines.append(f"# {spec.label}")
        lines.append(f"{spec.name}={values[spec.name]}")
    return "\n".join(lines) + "\n"


def materialize_secrets(
    path: Path,
    *,
    title: str,
    specs: tuple[SecretSpec, ...],
    alphabet: str,
    owner: str | None,
) -> dict[str, str]:
    """Return the secrets for one service, generating only those not yet on disk.

    The record is rewritten only when something new was generated, so an
    interrupted install resumes with the values it already handed out.
    """
    existing = read_credentials(path)
    values: dict[str, str] = {}
    generated: list[str] = []
    for spec in specs:
        current = existing.get(spec.name)
        if current:
            values[spec.name] = current
            continue
        values[spec.name] = generate_secret(spec.length, alphabet)
        generated.append(spec.name)

    if generated:
        try:
            write_file(path, render_credentials(title, specs, values), mode=CREDENTIALS_MODE, owner=owner)
        except OSError as exc:
            raise GenerationFailure(f"failed to write credentials to {path}: {exc}") from exc
        log.info("generated %s for %s", ", ".join(generated), path.name)
    return values
