"""Shared models and enums for dotsync."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .errors import ManifestError


@dataclass(frozen=True, slots=True)
class RunMode:
    """How a run resolves differences."""

    auto: bool = False
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class ChecksumEntry:
    """A ``(digest, path)`` record persisted in a checksum manifest."""

    digest: str
    path: Path

    def render(self) -> str:
        return f"{self.digest}  {self.path}"

    @classmethod
    def parse(cls, line: str) -> "ChecksumEntry":
        digest, sep, raw_path = line.rstrip("\n").partition("  ")
        if not sep or not digest or not raw_path:
            raise ManifestError(f"Malformed checksum line: {line!r}")
        return cls(digest=digest, path=Path(raw_path))


class PairState(str, Enum):
    """Outcome of comparing one tracked file against one target directory."""

    IDENTICAL = "identical"
    COPIED = "copied"
    CHANGED = "changed"
    SKIPPED_BY_USER = "skipped_by_user"
    SKIPPED_MISSING_SOURCE = "skipped_missing_source"
    SKIPPED_ERROR = "skipped_error"
    WOULD_COPY = "would_copy"
    WOULD_OVERWRITE = "would_overwrite"


@dataclass(frozen=True, slots=True)
class PairResult:
    """Result emitted for a ``(file, target)`` pair."""

    file: str
    target: Path | None
    destination: Path | None
    state: PairState


@dataclass(slots=True)
class RunOutcome:
    """Changed, copied and skipped destinations accumulated during a run."""

    changed: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    results: list[PairResult] = field(default_factory=list)

    def record(self, result: PairResult) -> None:
        self.results.append(result)
        if result.state is PairState.CHANGED:
            self.changed.append(str(result.destination))
        elif result.state is PairState.COPIED:
            self.copied.append(str(result.destination))
        elif result.state is PairState.SKIPPED_MISSING_SOURCE:
            self.skipped.append(f"{result.file} (missing in repo)")
        elif result.state in (PairState.SKIPPED_BY_USER, PairState.SKIPPED_ERROR):
            self.skipped.append(str(result.destination))

    def states(self) -> list[PairState]:
        return [result.state for result in self.results]
