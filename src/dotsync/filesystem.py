"""Filesystem helpers for dotsync."""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

from .errors import ChecksumToolError

BACKUP_SUFFIX = ".bak"
_CHUNK_SIZE = 1024 * 1024


def resolve_algorithm(name: str) -> str:
    """Return ``name`` normalised if ``hashlib`` can digest with it.

    Raises ``ChecksumToolError`` when the algorithm is unavailable, which is
    fatal for a run.
    """

    normalised = name.strip().lower()
    if normalised not in hashlib.algorithms_available:
        raise ChecksumToolError(f"No checksum tool found ({name}).")
    try:
        hashlib.new(normalised)
    except ValueError as exc:
        raise ChecksumToolError(f"No checksum tool found ({name}).") from exc
    return normalised


def hash_file(path: Path, algorithm: str = "sha256") -> str:
    """Return the hex digest of ``path`` contents."""

    hasher = hashlib.new(algorithm)
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def copy_file(source: Path, destination: Path) -> None:
    """Copy ``source`` over ``destination`` preserving metadata."""

    shutil.copy2(source, destination)


def backup_path(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def backup_file(path: Path) -> Path:
    """Copy ``path`` to its ``.bak`` sibling and return the backup path."""

    backup = backup_path(path)
    shutil.copy2(path, backup)
    return backup
