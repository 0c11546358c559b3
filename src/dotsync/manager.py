"""High level orchestration for dotsync runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .config import Config
from .errors import ManifestError
from .filesystem import backup_file, backup_path, copy_file, hash_file, resolve_algorithm
from .manifest import ManifestManager, append_target_checksum
from .models import PairResult, PairState, RunMode, RunOutcome
from .reporter import RunReporter

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


def is_affirmative(answer: str | None) -> bool:
    return answer is not None and answer.strip().lower() in AFFIRMATIVE_ANSWERS


def _decline(_prompt: str) -> bool:
    return False


class SyncManager:
    """Compares tracked files with every target directory and resolves drift."""

    def __init__(
        self,
        config: Config,
        reporter: RunReporter,
        *,
        mode: RunMode | None = None,
        confirm: Confirm | None = None,
    ) -> None:
        self.config = config
        self.reporter = reporter
        self.mode = mode or RunMode()
        self.confirm = confirm or _decline
        self.algorithm = resolve_algorithm(config.settings.algorithm)

    @property
    def repo_dir(self) -> Path:
        return self.config.settings.repo_dir

    def sources(self) -> list[Path]:
        return [self.config.sync.source_path(self.repo_dir, name) for name in self.config.sync.files]

    def run(self) -> RunOutcome:
        """Verify the repository manifest, then sync every ``(file, target)`` pair."""

        if self.mode.dry_run:
            self.reporter.info("Running in DRY-RUN mode (no changes will be made).")
        if self.mode.auto:
            self.reporter.info("Running in FULL AUTOMATION mode.")

        self.refresh_manifest()
        return self.compare_and_sync()

    def refresh_manifest(self) -> None:
        manifests = ManifestManager(self.config.settings.manifest_path, self.sources(), self.algorithm)
        try:
            if not manifests.exists():
                self.reporter.warn("Checksum file missing. Creating...")
                self.reporter.info("Updating checksum file in repo...")
                manifests.rebuild_repository_manifest()

            self.reporter.info("Verifying checksum file...")
            if manifests.verify_repository_manifest():
                self.reporter.warn("Checksum file is outdated. Updating...")
                for path in manifests.drifted:
                    self.reporter.info(f"Checksum changed for {path}")
            else:
                self.reporter.success("Checksum file is up-to-date.")
        except ManifestError as exc:
            self.reporter.error(str(exc))

    def compare_and_sync(self) -> RunOutcome:
        outcome = RunOutcome()

        for name in self.config.sync.files:
            source = self.config.sync.source_path(self.repo_dir, name)
            if not source.is_file():
                self.reporter.error(f"{name} not found in repo. Skipping.")
                outcome.record(PairResult(name, None, None, PairState.SKIPPED_MISSING_SOURCE))
                continue

            for target in self.config.sync.targets:
                if not target.is_dir():
                    logger.debug("target %s does not exist, skipping %s", target, name)
                    continue
                outcome.record(self._sync_pair(name, source, target))

        return outcome

    def _sync_pair(self, name: str, source: Path, target: Path) -> PairResult:
        destination = target / name
        if destination.exists() and not destination.is_file():
            self.reporter.error(f"{destination} exists but is not a regular file. Skipping.")
            return PairResult(name, target, destination, PairState.SKIPPED_ERROR)

        try:
            if destination.is_file():
                state = self._resolve_existing(name, source, target, destination)
            else:
                state = self._resolve_missing(name, source, target, destination)
        except OSError as exc:
            self.reporter.error(f"Failed to sync {destination}: {exc.strerror or exc}")
            return PairResult(name, target, destination, PairState.SKIPPED_ERROR)

        try:
            self._record_target_checksum(target, destination, state)
        except OSError as exc:
            self.reporter.error(f"Failed to update checksum in {target}: {exc.strerror or exc}")
        return PairResult(name, target, destination, state)

    def _resolve_existing(self, name: str, source: Path, target: Path, destination: Path) -> PairState:
        if hash_file(source, self.algorithm) == hash_file(destination, self.algorithm):
            self.reporter.success(f"{name} is identical in {target}")
            return PairState.IDENTICAL

        self.reporter.warn(f"{name} differs in {target}")
        if not self.mode.auto and not self.confirm(f"Overwrite {destination} with repo version? (y/n): "):
            self.reporter.info(f"Skipped {destination}")
            return PairState.SKIPPED_BY_USER

        self._backup(destination)
        if self.mode.dry_run:
            self.reporter.info(f"[DRY-RUN] Would overwrite {destination}")
            return PairState.WOULD_OVERWRITE

        copy_file(source, destination)
        self.reporter.success(f"Overwritten {destination}" if self.mode.auto else f"Updated {destination}")
        return PairState.CHANGED

    def _resolve_missing(self, name: str, source: Path, target: Path, destination: Path) -> PairState:
        self.reporter.warn(f"{name} missing in {target}")
        if not self.mode.auto and not self.confirm(f"Copy {name} to {target}? (y/n): "):
            self.reporter.info(f"Skipped {name}")
            return PairState.SKIPPED_BY_USER

        if self.mode.dry_run:
            self.reporter.info(f"[DRY-RUN] Would copy {name} to {target}")
            return PairState.WOULD_COPY

        copy_file(source, destination)
        self.reporter.success(f"Copied {name} to {target}")
        return PairState.COPIED

    def _backup(self, destination: Path) -> None:
        if self.mode.dry_run:
            self.reporter.info(f"[DRY-RUN] Would create backup: {backup_path(destination)}")
            return
        backup = backup_file(destination)
        self.reporter.info(f"Backup created: {backup}")

    def _record_target_checksum(self, target: Path, destination: Path, state: PairState) -> None:
        recorded = {PairState.COPIED, PairState.CHANGED, PairState.WOULD_COPY, PairState.WOULD_OVERWRITE}
        if self.config.settings.record_identical:
            recorded.add(PairState.IDENTICAL)
        if state not in recorded:
            return

        if self.mode.dry_run:
            self.reporter.info(f"[DRY-RUN] Would update checksum in {target}")
            return

        append_target_checksum(target, self.config.settings.manifest_name, destination, self.algorithm)
        logger.debug("recorded checksum of %s in %s", destination, target)
