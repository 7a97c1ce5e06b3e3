from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

log = logging.getLogger(__name__)


def chown_to_owner(path: Path, owner: str | None) -> None:
    # Only root can hand files over; everyone else already owns what they write.
    if not owner or os.geteuid() != 0:
        return
    try:
        shutil.chown(path, user=owner, group=owner)
    except (LookupError, OSError) as exc:
        log.warning("could not chown %s to %s: %s", path, owner, exc)


def ensure_dir(path: Path, owner: str | None) -> Path:
    created = not path.exists()
    path.mkdir(parents=True, exist_ok=True)
    if created:
        chown_to_owner(path, owner)
    return path


def write_bytes(path: Path, data: bytes, *, mode: int, owner: str | None) -> Path:
    ensure_dir(path.parent, owner)
    # the mode is applied before any byte lands, also for a file that already exists
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as f:
        os.fchmod(f.fileno(), mode)
        f.write(data)
    chown_to_owner(path, owner)
    return path


def write_file(path: Path, content: str, *, mode: int, owner: str | None) -> Path:
    return write_bytes(path, content.encode("utf-8"), mode=mode, owner=owner)
