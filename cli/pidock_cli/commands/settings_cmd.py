from __future__ import annotations

import os

import typer

from .. import console
from ..config import (
    SETTING_KEYS,
    config_path,
    default_config,
    load_config,
    resolve_compose_dir,
    resolve_log_file,
    save_config,
)

app = typer.Typer(help="Manage local installer settings (~/.config/pidock/config.toml).")


@app.command("init")
def init_settings(
        force: bool = typer.Option(False, "--force", help="Overwrite existing config."),
        base_dir: str = typer.Option(
            default_config().base_dir,
            "--base-dir",
            help="Directory for credentials and generated compose files.",
        ),
):
    path = config_path()
    if os.path.exists(path) and not force:
        console.info(f"Config already exists: {path}")
        console.info("Use --force to overwrite.")
        return

    cfg = default_config()
    cfg.base_dir = base_dir.strip()
    if not cfg.base_dir:
        console.err("Base directory cannot be empty.")
        raise typer.Exit(code=2)
    saved = save_config(cfg)
    console.ok(f"Config written: {saved}")


@app.command("show")
def show_settings():
    cfg = load_config()
    console.console.print(
        f"base_dir={cfg.base_dir} compose_dir={resolve_compose_dir(cfg)} owner={cfg.owner or '-'} "
        f"timezone={cfg.timezone or '(auto)'} host_ip={cfg.host_ip or '(auto)'} log_file={resolve_log_file(cfg)}",
        highlight=False,
    )


@app.command("get")
def get_setting(
        key: str = typer.Argument(..., help=f"Setting key ({', '.join(SETTING_KEYS)})."),
):
    cfg = load_config()
    k = key.strip().lower()
    if k not in SETTING_KEYS:
        console.err(f"Unknown setting: {key}")
        raise typer.Exit(code=2)
    if k == "compose_dir":
        value = resolve_compose_dir(cfg)
    elif k == "log_file":
        value = resolve_log_file(cfg)
    else:
        value = getattr(cfg, k)
    console.console.print(value, highlight=False)


@app.command("set")
def set_setting(
        base_dir: str | None = typer.Option(None, "--base-dir", help="Directory for credentials."),
        compose_dir: str | None = typer.Option(None, "--compose-dir", help="Directory for compose manifests."),
        owner: str | None = typer.Option(None, "--owner", help="User that owns generated files."),
        timezone: str | None = typer.Option(None, "--timezone", help="Timezone passed to containers, e.g. Europe/Berlin."),
        host_ip: str | None = typer.Option(None, "--host-ip", help="Host IP used in URLs and certificates."),
        secret_alphabet: str | None = typer.Option(None, "--secret-alphabet", help="Characters used for generated secrets."),
        log_file: str | None = typer.Option(None, "--log-file", help="Installer log file."),
):
    cfg = load_config()
    updates = {
        "base_dir": base_dir,
        "compose_dir": compose_dir,
        "owner": owner,
        "timezone": timezone,
        "host_ip": host_ip,
        "secret_alphabet": secret_alphabet,
        "log_file": log_file,
    }
    for key, value in updates.items():
        if value is None:
            continue
        if key == "secret_alphabet" and not value:
            console.err("Secret alphabet cannot be empty.")
            raise typer.Exit(code=2)
        setattr(cfg, key, value if key == "secret_alphabet" else value.strip())
    saved = save_config(cfg)
    console.ok(f"Settings updated: {saved}")
