"""Checksum manifest persistence for dotsync."""

from __future__ import annotations

import filecmp
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Sequence

from .errors import ManifestError
from .filesystem import hash_file
from .models import ChecksumEntry

logger = logging.getLogger(__name__)


class ChecksumManifest:
    """An ordered list of ``ChecksumEntry`` records stored as plain text."""

    def __init__(self, path: Path, entries: Iterable[ChecksumEntry] | None = None) -> None:
        self.path = path
        self._entries: list[ChecksumEntry] = list(entries or [])

    @classmethod
    def load(cls, path: Path) -> "ChecksumManifest":
        if not path.exists():
            return cls(path, [])

        entries = [
            ChecksumEntry.parse(line)
            for line in path.read_text(encoding="utf-8").splitlines()
            if line.strip()
        ]
        return cls(path, entries)

    @classmethod
    def build(cls, path: Path, sources: Sequence[Path], algorithm: str) -> "ChecksumManifest":
        """Digest every source in order.

        Raises ``ManifestError`` as soon as one source cannot be read.
        """

        entries: list[ChecksumEntry] = []
        for source in sources:
            try:
                digest = hash_file(source, algorithm)
            except OSError as exc:
                raise ManifestError(f"Unable to checksum '{source}': {exc.strerror or exc}") from exc
            entries.append(ChecksumEntry(digest=digest, path=source))
        return cls(path, entries)

    def entries(self) -> list[ChecksumEntry]:
        return list(self._entries)

    def render(self) -> str:
        return "".join(f"{entry.render()}\n" for entry in self._entries)

    def save(self) -> None:
        """Overwrite the manifest file with the current entries."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{self.path.name}.dotsync-tmp-", dir=self.path.parent)
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(self.render())
            os.replace(temp_path, self.path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise

    def append(self, entry: ChecksumEntry) -> None:
        """Append ``entry`` to the in-memory list and to the file on disk."""

        self._entries.append(entry)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8", newline="\n") as handle:
            handle.write(f"{entry.render()}\n")


class ManifestManager:
    """Keeps the repository manifest in step with the tracked files."""

    def __init__(self, manifest_path: Path, sources: Sequence[Path], algorithm: str) -> None:
        self.manifest_path = manifest_path
        self.sources = tuple(sources)
        self.algorithm = algorithm
        self.drifted: list[Path] = []

    def exists(self) -> bool:
        return self.manifest_path.is_file()

    def rebuild_repository_manifest(self) -> ChecksumManifest:
        manifest = ChecksumManifest.build(self.manifest_path, self.sources, self.algorithm)
        manifest.save()
        logger.debug("rebuilt %s with %d entries", self.manifest_path, len(self.sources))
        return manifest

    def verify_repository_manifest(self) -> bool:
        """Rebuild the manifest if it differs from a freshly computed one.

        Returns ``True`` when a rebuild happened.
        """

        reference = ChecksumManifest.build(self.manifest_path, self.sources, self.algorithm)
        self.drifted = []

        fd, temp_name = tempfile.mkstemp(prefix=f".{self.manifest_path.name}.dotsync-ref-")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(reference.render())
            if self.exists() and filecmp.cmp(self.manifest_path, temp_path, shallow=False):
                return False
        finally:
            temp_path.unlink(missing_ok=True)

        self.drifted = self._drifted_paths(reference)
        reference.save()
        logger.debug("manifest %s was stale and has been rebuilt", self.manifest_path)
        return True

    def _drifted_paths(self, reference: ChecksumManifest) -> list[Path]:
        """Return tracked paths whose persisted digest is absent or different."""

        try:
            persisted = ChecksumManifest.load(self.manifest_path)
        except (ManifestError, ValueError):
            return [entry.path for entry in reference.entries()]
        recorded = {entry.path: entry.digest for entry in persisted.entries()}
        return [entry.path for entry in reference.entries() if recorded.get(entry.path) != entry.digest]


def append_target_checksum(target_dir: Path, manifest_name: str, destination: Path, algorithm: str) -> ChecksumEntry:
    """Append the digest of ``destination`` to the manifest inside ``target_dir``."""

    entry = ChecksumEntry(digest=hash_file(destination, algorithm), path=destination)
    ChecksumManifest(target_dir / manifest_name).append(entry)
    return entry
