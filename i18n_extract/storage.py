"""Filesystem helpers: discovery, backups, the run journal and atomic writes."""

from __future__ import annotations

import fnmatch
import os
import pathlib
import shutil
import sys
import tempfile
import time
from datetime import datetime, timezone
from typing import Iterable, List, Sequence


def is_ignored(base: pathlib.Path, path: pathlib.Path, ignore: Sequence[str]) -> bool:
    """True when any part of the path below ``base`` matches an ignore entry."""

    try:
        relative = path.relative_to(base)
    except ValueError:
        return True
    rel_text = relative.as_posix()
    for pattern in ignore:
        if fnmatch.fnmatch(rel_text, pattern):
            return True
        if any(fnmatch.fnmatch(part, pattern) for part in relative.parts):
            return True
    return False


def discover_documents(
    root: pathlib.Path,
    extensions: Iterable[str],
    ignore: Sequence[str] = (),
) -> List[pathlib.Path]:
    """List matching files under ``root`` in a stable order."""

    if not root.is_dir():
        print(
            f"[i18n-extract] warning: scan directory {root} does not exist; skipping.",
            file=sys.stderr,
        )
        return []

    found = set()
    for extension in extensions:
        suffix = extension if extension.startswith(".") else f".{extension}"
        for path in root.rglob(f"*{suffix}"):
            if path.is_file() and not is_ignored(root, path, ignore):
                found.add(path)
    return sorted(found)


def backup_file(path: pathlib.Path, backup_dir: pathlib.Path) -> pathlib.Path:
    """Copy ``path`` to ``<name>.<unix millis>.bak`` inside ``backup_dir``."""

    backup_dir.mkdir(parents=True, exist_ok=True)
    millis = int(time.time() * 1000)
    destination = backup_dir / f"{path.name}.{millis}.bak"
    shutil.copyfile(path, destination)
    return destination


def append_journal(log_path: pathlib.Path, event: str) -> None:
    """Append one ``[timestamp] event`` line to the run journal."""

    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(f"[{timestamp}] {event}\n")


def read_text(path: pathlib.Path) -> str:
    """Read a UTF-8 file without translating its line endings."""

    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_text_atomic(path: pathlib.Path, data: str) -> None:
    """Write to a temporary file beside ``path``, then replace the target."""

    orig_mode = path.stat().st_mode & 0o777 if path.exists() else None

    with tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.",
        encoding="utf-8",
        newline="",
    ) as handle:
        handle.write(data)
        tmp_name = handle.name
    try:
        os.replace(tmp_name, path)
    except OSError:
        os.unlink(tmp_name)
        raise
    if orig_mode is not None:
        os.chmod(path, orig_mode)
