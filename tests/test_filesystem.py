from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from dotsync.errors import ChecksumToolError
from dotsync.filesystem import backup_file, backup_path, copy_file, hash_file, resolve_algorithm


def test_hash_file_matches_hashlib(tmp_path: Path) -> None:
    target = tmp_path / "sample"
    target.write_bytes(b"alias ll='ls -la'\n")

    assert hash_file(target) == hashlib.sha256(b"alias ll='ls -la'\n").hexdigest()


def test_hash_file_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        hash_file(tmp_path / "missing")


def test_resolve_algorithm_normalises_name() -> None:
    assert resolve_algorithm(" SHA256 ") == "sha256"


def test_resolve_algorithm_rejects_unknown() -> None:
    with pytest.raises(ChecksumToolError):
        resolve_algorithm("not-a-real-hash")


def test_backup_file_copies_to_bak_sibling(tmp_path: Path) -> None:
    original = tmp_path / ".bashrc"
    original.write_text("old\n")
    stale = backup_path(original)
    stale.write_text("older\n")

    backup = backup_file(original)

    assert backup == tmp_path / ".bashrc.bak"
    assert backup.read_text() == "old\n"
    assert original.read_text() == "old\n"


def test_copy_file_overwrites_destination(tmp_path: Path) -> None:
    source = tmp_path / "source"
    source.write_text("new\n")
    destination = tmp_path / "destination"
    destination.write_text("old\n")

    copy_file(source, destination)

    assert destination.read_text() == "new\n"
