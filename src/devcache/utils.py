"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

log = logging.getLogger(__name__)

RemoveCallback = Callable[[Path, str], None]  # (path, status)


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def expand_path(path: str | Path) -> Path:
    """Expand ``~`` and environment variables in *path*."""
    return Path(os.path.expandvars(os.path.expanduser(str(path))))


def dir_info(path: Path | str) -> tuple[int, int, datetime | None, str]:
    """Calculate total size, file count and newest mtime of a directory tree.

    Symlinks are counted as entries but never followed. Entries that cannot
    be read do not stop the walk; the first such error is returned so the
    caller can attach it to its result.

    Returns:
        (total_bytes, file_count, latest_mtime, error) tuple. ``latest_mtime``
        is None for a tree without files, ``error`` is empty when nothing
        failed.
    """
    total = 0
    count = 0
    latest: float | None = None
    error = ""
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                            continue
                        st = entry.stat(follow_symlinks=False)
                    except OSError as e:
                        log.debug("Cannot stat %s: %s", entry.path, e)
                        error = error or str(e)
                        continue
                    total += st.st_size
                    count += 1
                    if latest is None or st.st_mtime > latest:
                        latest = st.st_mtime
        except OSError as e:
            log.debug("Cannot read %s: %s", current, e)
            error = error or str(e)

    mtime = datetime.fromtimestamp(latest, tz=timezone.utc) if latest is not None else None
    return total, count, mtime, error


def remove_directories(
    paths: Iterable[Path],
    on_progress: RemoveCallback | None = None,
) -> tuple[int, list[str]]:
    """Remove directory trees one at a time.

    A failure on one path is recorded and the remaining paths are still
    attempted.

    Returns:
        (removed_count, errors) tuple.
    """
    removed = 0
    errors: list[str] = []

    for path in paths:
        if on_progress:
            on_progress(path, "deleting")
        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
            removed += 1
            if on_progress:
                on_progress(path, "done")
        except OSError as e:
            log.warning("Could not remove %s: %s", path, e)
            errors.append(f"{path}: {e}")
            if on_progress:
                on_progress(path, "error")

    return removed, errors


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ("KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units:
        value /= 1024
        if value < 1024 or unit == units[-1]:
            break
    return f"{value:.2f} {unit}"
