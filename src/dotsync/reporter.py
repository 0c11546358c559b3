"""Console and run-log reporting for dotsync."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .config import LogCategories
from .models import RunOutcome

_STYLES = {
    "info": ("INFO", "blue"),
    "warn": ("WARN", "yellow"),
    "error": ("ERROR", "red"),
    "ok": ("OK", "green"),
}


class RunReporter:
    """Prints categorized status lines and mirrors them to the run log.

    The run log is truncated by :meth:`start` and receives every line, whatever
    the console categories are.
    """

    def __init__(
        self,
        log_path: Path,
        *,
        console: Console | None = None,
        categories: LogCategories | None = None,
    ) -> None:
        self.log_path = log_path
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.categories = categories or LogCategories()
        self._logger = logging.getLogger("dotsync.run")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._handler: logging.FileHandler | None = None

    def start(self) -> None:
        self.close()
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(self.log_path, mode="w", encoding="utf-8")
        handler.setFormatter(logging.Formatter("[%(tag)s] %(message)s"))
        self._logger.addHandler(handler)
        self._handler = handler

    def close(self) -> None:
        if self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None

    def __enter__(self) -> "RunReporter":
        self.start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warn(self, message: str) -> None:
        self._emit("warn", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def success(self, message: str) -> None:
        self._emit("ok", message)

    def summary(self, outcome: RunOutcome) -> None:
        self.console.print()
        self.console.print("[blue]Summary:[/blue]")
        self.console.print(f"[green]Changed:[/green] {_joined(outcome.changed)}")
        self.console.print(f"[green]Copied:[/green] {_joined(outcome.copied)}")
        self.console.print(f"[yellow]Skipped:[/yellow] {_joined(outcome.skipped)}")
        self.success("Operation completed.")

    def _emit(self, category: str, message: str) -> None:
        tag, color = _STYLES[category]
        if self.categories.enabled(category):
            self.console.print(f"[{color}]\\[{tag}][/{color}] {escape(message)}")
        if self._handler is not None:
            self._logger.info(message, extra={"tag": tag})


def _joined(paths: list[str]) -> str:
    return escape("".join(f"\n{path}" for path in paths))
