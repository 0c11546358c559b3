from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import pytest
from rich.console import Console

from dotsync.config import DEFAULT_CONFIG_FILENAME, Config, load_config
from dotsync.reporter import RunReporter


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.delenv("DOTSYNC_CATEGORIES", raising=False)
    return home


@dataclass
class Workspace:
    repo: Path
    home: Path
    windows: Path
    config_path: Path

    def config(self) -> Config:
        return load_config(self.config_path)

    def reporter(self, config: Config) -> RunReporter:
        console = Console(file=io.StringIO(), highlight=False, soft_wrap=True)
        return RunReporter(config.settings.log_file, console=console, categories=config.categories)


def write_config(directory: Path, repo: Path, targets: list[Path], files: list[str]) -> Path:
    config_path = directory / DEFAULT_CONFIG_FILENAME
    target_lines = ", ".join(f'"{target}"' for target in targets)
    file_lines = ", ".join(f'"{name}"' for name in files)
    config_path.write_text(
        f"""
[settings]
repo_dir = "{repo}"

[sync]
files = [{file_lines}]
targets = [{target_lines}]
"""
    )
    return config_path


@pytest.fixture
def workspace(tmp_path: Path, fake_home: Path) -> Workspace:
    repo = tmp_path / "repo"
    repo.mkdir()
    windows = tmp_path / "windows"
    config_path = write_config(tmp_path, repo, [fake_home, windows], [".aliases", ".bashrc"])
    return Workspace(repo=repo, home=fake_home, windows=windows, config_path=config_path)


@pytest.fixture
def config_writer():
    return write_config
