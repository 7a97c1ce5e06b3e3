from __future__ import annotations

import getpass
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import user_config_dir, user_log_dir

from pidock_core.config_types import DEFAULT_SECRET_ALPHABET, HostFacts, InstallerConfig
from pidock_core.host import discover_host_facts

APP_NAME = "pidock"
CONFIG_FILENAME = "config.toml"
BASE_DIRNAME = ".docker-installer"
COMPOSE_DIRNAME = "compose-files"
LOG_FILENAME = "installer.log"
ENV_BASE_DIR = "PIDOCK_BASE_DIR"
ENV_HOST_IP = "PIDOCK_HOST_IP"

SETTING_KEYS = ("base_dir", "compose_dir", "owner", "timezone", "host_ip", "secret_alphabet", "log_file")


@dataclass
class AppConfig:
    base_dir: str
    compose_dir: str = ""
    owner: str = ""
    timezone: str = ""
    host_ip: str = ""
    secret_alphabet: str = DEFAULT_SECRET_ALPHABET
    log_file: str = ""


def config_path() -> str:
    return f"{user_config_dir(APP_NAME)}/{CONFIG_FILENAME}"


def default_owner() -> str:
    # sudo keeps the operator's name around; files should end up owned by them, not root
    for key in ("SUDO_USER", "USER", "LOGNAME"):
        value = (os.getenv(key) or "").strip()
        if value and value != "root":
            return value
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def default_base_dir(owner: str | None = None) -> str:
    owner = owner if owner is not None else default_owner()
    home = os.path.expanduser(f"~{owner}") if owner else os.path.expanduser("~")
    if home.startswith("~"):
        home = os.path.expanduser("~")
    return os.path.join(home, BASE_DIRNAME)


def default_config() -> AppConfig:
    owner = default_owner()
    return AppConfig(base_dir=default_base_dir(owner), owner=owner)


def to_toml(cfg: AppConfig) -> dict[str, Any]:
    data = {key: getattr(cfg, key) for key in SETTING_KEYS}
    return {k: v for k, v in data.items() if v}


def from_toml(data: dict[str, Any]) -> AppConfig:
    cfg = default_config()
    for key in SETTING_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            setattr(cfg, key, value.strip() if key != "secret_alphabet" else value)
    return cfg


def load_config() -> AppConfig:
    path = config_path()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        cfg = from_toml(data)
    except FileNotFoundError:
        cfg = default_config()
    env_base = os.getenv(ENV_BASE_DIR, "").strip()
    if env_base:
        cfg.base_dir = env_base
    return cfg


def ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)


def save_config(cfg: AppConfig) -> str:
    path = config_path()
    ensure_parent_dir(path)
    with open(path, "wb") as f:
        f.write(tomli_w.dumps(to_toml(cfg)).encode("utf-8"))
    os.chmod(path, 0o600)
    return path


def resolve_compose_dir(cfg: AppConfig) -> str:
    return cfg.compose_dir or os.path.join(cfg.base_dir, COMPOSE_DIRNAME)


def resolve_log_file(cfg: AppConfig) -> str:
    return cfg.log_file or os.path.join(user_log_dir(APP_NAME), LOG_FILENAME)


def to_installer_config(cfg: AppConfig) -> InstallerConfig:
    return InstallerConfig(
        compose_dir=Path(resolve_compose_dir(cfg)).expanduser(),
        credentials_dir=Path(cfg.base_dir).expanduser(),
        owner=cfg.owner or None,
        secret_alphabet=cfg.secret_alphabet or DEFAULT_SECRET_ALPHABET,
    )


def resolve_host_facts(cfg: AppConfig) -> HostFacts:
    ip_override = os.getenv(ENV_HOST_IP, "").strip() or cfg.host_ip
    return discover_host_facts(ip_override=ip_override, timezone_override=cfg.timezone)
