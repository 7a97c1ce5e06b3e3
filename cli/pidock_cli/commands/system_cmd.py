from __future__ import annotations

import os
import platform as platform_mod
import shutil
from pathlib import Path

import typer
from rich.table import Table

from pidock_core.errors import PidockError
from pidock_core.host import host_ip_addresses
from pidock_core.runtime import ContainerRuntime, ServiceState

from .. import console
from ..factory import make_runtime

app = typer.Typer(help="Host information.", no_args_is_help=True)


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return ""


def _os_pretty_name(root: Path) -> str | None:
    for raw in _read(root / "etc" / "os-release").splitlines():
        if raw.startswith("PRETTY_NAME="):
            return raw.split("=", 1)[1].strip().strip('"') or None
    return None


def _cpu_model(cpuinfo: str) -> str | None:
    for key in ("model name", "Model", "Processor", "Hardware"):
        for raw in cpuinfo.splitlines():
            name, _, value = raw.partition(":")
            if name.strip() == key and value.strip():
                return value.strip()
    return None


def _memory(meminfo: str) -> tuple[int, int] | None:
    values: dict[str, int] = {}
    for raw in meminfo.splitlines():
        name, _, rest = raw.partition(":")
        parts = rest.split()
        if parts and parts[0].isdigit():
            values[name.strip()] = int(parts[0]) * 1024
    total = values.get("MemTotal")
    available = values.get("MemAvailable")
    if total is None or available is None:
        return None
    return total - available, total


def _human_bytes(value: int) -> str:
    size = float(value)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if size < 1024 or unit == "TiB":
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TiB"


def collect_system_info(runtime: ContainerRuntime, root: Path = Path("/")) -> dict[str, object]:
    proc = root / "proc"
    cpuinfo = _read(proc / "cpuinfo")
    info: dict[str, object] = {
        "model": _read(proc / "device-tree" / "model").strip("\x00\n ") or None,
        "os": _os_pretty_name(root),
        "kernel": f"{platform_mod.system()} {platform_mod.release()} {platform_mod.machine()}",
        "cpu": _cpu_model(cpuinfo),
        "cpu_cores": sum(1 for line in cpuinfo.splitlines() if line.startswith("processor")) or os.cpu_count(),
        "ip_addresses": host_ip_addresses(),
    }
    memory = _memory(_read(proc / "meminfo"))
    if memory:
        info["memory"] = f"{_human_bytes(memory[0])} / {_human_bytes(memory[1])}"
    try:
        usage = shutil.disk_usage(root)
        info["disk"] = (
            f"{_human_bytes(usage.used)} / {_human_bytes(usage.total)} "
            f"(used {usage.used * 100 // max(usage.total, 1)}%)"
        )
    except OSError:
        info["disk"] = None

    docker: dict[str, object] = {"version": runtime.version(), "compose_version": runtime.compose_version()}
    if docker["version"] and runtime.available():
        try:
            containers = runtime.containers()
            docker["containers_running"] = sum(1 for c in containers if c.state is ServiceState.RUNNING)
            docker["containers_total"] = len(containers)
            docker["volumes"] = runtime.volume_count()
        except PidockError as exc:
            docker["error"] = str(exc)
    info["docker"] = docker
    return info


def _render(info: dict[str, object]) -> Table:
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    rows = [
        ("Model", info.get("model")),
        ("OS", info.get("os")),
        ("Kernel", info.get("kernel")),
        ("CPU", info.get("cpu")),
        ("CPU cores", info.get("cpu_cores")),
        ("Memory", info.get("memory")),
        ("Disk", info.get("disk")),
        ("IP addresses", " ".join(info.get("ip_addresses") or []) or None),
    ]
    docker = info.get("docker") or {}
    if isinstance(docker, dict) and docker.get("version"):
        rows.append(("Docker", docker.get("version")))
        rows.append(("Docker Compose", docker.get("compose_version") or "not installed"))
        if "containers_total" in docker:
            rows.append(
                ("Containers", f"{docker['containers_running']} running, {docker['containers_total']} total")
            )
            rows.append(("Volumes", docker.get("volumes")))
    else:
        rows.append(("Docker", "not installed"))
    for key, value in rows:
        table.add_row(key, "-" if value in (None, "") else str(value))
    return table


@app.command("info")
def info_cmd(
        json_output: bool = typer.Option(False, "--json", help="Output JSON only."),
):
    """Show board, OS, resources and Docker details."""
    runtime = make_runtime()
    info = collect_system_info(runtime)
    if json_output:
        console.print_json(info)
        return
    console.print(_render(info))
