"""Command-line interface for dotsync."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from .config import DEFAULT_CONFIG_FILENAME, Config, load_config, render_default_config
from .errors import ChecksumToolError, ConfigError, DotsyncError
from .manager import SyncManager, is_affirmative
from .models import RunMode, RunOutcome
from .reporter import RunReporter

app = typer.Typer(
    help="Sync tracked dotfiles from a repository into home directories, with checksums and backups.",
    add_completion=False,
)
console = Console(highlight=False, soft_wrap=True)


def _load_config(config: Path | None) -> Config:
    return load_config(config)


def _terminal_confirm(prompt: str) -> bool:
    try:
        answer = console.input(escape(prompt))
    except EOFError:
        return False
    return is_affirmative(answer)


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, ChecksumToolError):
        console.print(f"[red]\\[ERROR][/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        message = str(exc)
        console.print(f"[red]{escape(message)}[/red]")
        if "does not exist" in message:
            console.print("[yellow]Use 'dotsync --init-config --config <path>' to create a configuration file.[/yellow]")
        raise typer.Exit(code=1)
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Check write access to the repository and log file.")
        raise typer.Exit(code=1)
    if isinstance(exc, DotsyncError):
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)
    raise exc


def _write_starter_config(config: Path | None, force: bool) -> None:
    config_path = config or Path(DEFAULT_CONFIG_FILENAME)
    if config_path.is_dir():
        config_path = config_path / DEFAULT_CONFIG_FILENAME
    if config_path.exists() and not force:
        console.print(f"[red]Configuration '{config_path}' already exists. Use --force to overwrite.[/red]")
        raise typer.Exit(code=1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(render_default_config())
    console.print(f"[green]Created '{config_path}'.[/green]")


def run_sync(config_obj: Config, mode: RunMode) -> RunOutcome:
    """Run one synchronization and print its summary."""

    reporter = RunReporter(config_obj.settings.log_file, console=console, categories=config_obj.categories)
    manager = SyncManager(config_obj, reporter, mode=mode, confirm=_terminal_confirm)
    reporter.info(f"Logging to {config_obj.settings.log_file}")
    with reporter:
        outcome = manager.run()
        reporter.summary(outcome)
    return outcome


@app.command()
def sync(
    auto: bool = typer.Option(False, "--auto", help="Run in full automation mode (no prompts)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show actions without making changes."),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to dotsync.toml"),
    init_config: bool = typer.Option(
        False,
        "--init-config",
        help="Write a starter configuration file and exit",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config with --init-config"),
) -> None:
    """Copy tracked files from the repository into each target directory.

    Creates or refreshes the repository checksum file, compares every tracked
    file with its copy in each existing target, backs up differing copies to
    ``.bak`` before overwriting them and logs every action to the run log.
    """

    if init_config:
        _write_starter_config(config, force)
        return

    try:
        run_sync(_load_config(config), RunMode(auto=auto, dry_run=dry_run))
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
