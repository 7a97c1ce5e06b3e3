from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path

from .config_types import HostFacts

log = logging.getLogger(__name__)

HOST_IP_PLACEHOLDER = "127.0.0.1"
TIMEZONE_FALLBACK = "Etc/UTC"

_IP_RE = re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b")
_ZONEINFO_MARKER = "zoneinfo/"


def _extract_ips(text: str) -> list[str]:
    return _IP_RE.findall(text or "")


def _run_quiet(args: list[str]) -> str:
    try:
        res = subprocess.run(args, capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.TimeoutExpired) as exc:
        log.debug("%s failed: %s", args[0], exc)
        return ""
    if res.returncode != 0:
        return ""
    return res.stdout or ""


def host_ip_addresses() -> list[str]:
    return _extract_ips(_run_quiet(["hostname", "-I"]))


def discover_primary_ip() -> str | None:
    ips = host_ip_addresses()
    if ips:
        return ips[0]
    route = _run_quiet(["ip", "route", "get", "1.1.1.1"]).split()
    if "src" in route:
        idx = route.index("src")
        if idx + 1 < len(route) and _IP_RE.fullmatch(route[idx + 1]):
            return route[idx + 1]
    return None


def discover_timezone(etc: Path = Path("/etc")) -> str | None:
    tz_file = etc / "timezone"
    try:
        value = tz_file.read_text(encoding="utf-8").strip()
    except OSError:
        value = ""
    if value:
        return value
    localtime = etc / "localtime"
    try:
        target = os.readlink(localtime)
    except OSError:
        return None
    if _ZONEINFO_MARKER in target:
        return target.split(_ZONEINFO_MARKER, 1)[1]
    return None


def discover_host_facts(*, ip_override: str | None = None, timezone_override: str | None = None) -> HostFacts:
    ip = (ip_override or "").strip() or discover_primary_ip()
    if not ip:
        log.warning("could not determine host IP, using %s", HOST_IP_PLACEHOLDER)
        ip = HOST_IP_PLACEHOLDER
    tz = (timezone_override or "").strip() or discover_timezone()
    if not tz:
        tz = TIMEZONE_FALLBACK
    return HostFacts(ip=ip, timezone=tz)
