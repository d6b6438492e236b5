"""Stale git lock removal."""

from __future__ import annotations

from pathlib import Path

DEFAULT_LOCK_FILE = ".git/index.lock"


def clear_stale_lock(path: Path, lock_file: str = DEFAULT_LOCK_FILE) -> bool:
    """Remove a leftover index.lock before running git.

    A git process that crashed mid-operation leaves the lock behind and
    every later command fails with "Unable to create index.lock". Removal
    is best effort: if it fails, the next git command reports the real error.

    Args:
        path: Package (working tree) directory.
        lock_file: Lock path relative to ``path``.

    Returns:
        True if a lock file was found and removed.
    """
    try:
        (path / lock_file).unlink()
    except OSError:
        return False
    return True
