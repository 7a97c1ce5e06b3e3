from __future__ import annotations

import typer

from pidock_core.catalog import ServiceId
from pidock_core.errors import PidockError
from pidock_core.manifests import passbolt_register_command
from pidock_core.runtime import ContainerRuntime

from .. import console
from ..config import load_config, to_installer_config
from ..factory import make_runtime
from ..formatting import tail_lines

app = typer.Typer(help="Passbolt helpers.", no_args_is_help=True)

DEFAULT_ADMIN_EMAIL = "admin@example.com"


def register_admin(
        runtime: ContainerRuntime,
        *,
        email: str,
        first_name: str,
        last_name: str,
) -> bool:
    cfg = to_installer_config(load_config())
    name = ServiceId.PASSBOLT.value
    manifest = cfg.manifest_path(name)
    if not manifest.exists():
        console.err(f"Passbolt is not installed ({manifest} is missing). Run `pidock install passbolt` first.")
        return False
    console.info(f"Registering Passbolt admin {email}...")
    try:
        result = runtime.compose_exec(manifest, name, "passbolt", passbolt_register_command(email, first_name, last_name))
    except PidockError as exc:
        console.err(str(exc))
        return False
    for line in tail_lines(result.output, limit=40):
        console.print(line, highlight=False, markup=False)
    if not result.ok:
        console.err(f"Registration failed (exit code {result.exit_code}). Wait for the container to become healthy and retry.")
        return False
    console.ok("Admin registration initiated. Open the link above to finish the setup.")
    return True


@app.command("register-admin")
def register_admin_cmd(
        email: str = typer.Option(DEFAULT_ADMIN_EMAIL, "--email", help="Admin email."),
        first_name: str = typer.Option("Admin", "--first-name", help="Admin first name."),
        last_name: str = typer.Option("User", "--last-name", help="Admin last name."),
):
    if "@" not in email:
        console.err("Email must include '@'.")
        raise typer.Exit(code=2)
    if not register_admin(make_runtime(), email=email, first_name=first_name, last_name=last_name):
        raise typer.Exit(code=2)
