from __future__ import annotations

import tomllib
from pathlib import Path
from textwrap import dedent

import pytest

from dotsync.config import (
    DEFAULT_CONFIG_FILENAME,
    ConfigError,
    LogCategories,
    load_config,
    render_default_config,
)


def _write_config(tmp_path: Path, body: str) -> Path:
    config_path = tmp_path / DEFAULT_CONFIG_FILENAME
    config_path.write_text(dedent(body))
    return config_path


def test_load_config_happy_path(tmp_path: Path, fake_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERNAME", "alice")
    config_path = _write_config(
        tmp_path,
        """
        [settings]
        repo_dir = "./repo"
        log_file = "logs/run.log"

        [sync]
        files = [".aliases", ".bashrc", ".profile"]
        targets = ["~", "/c/users/$USERNAME"]
        """,
    )

    config = load_config(config_path)
    repo = (tmp_path / "repo").resolve(strict=False)

    assert config.config_path == config_path.resolve(strict=False)
    assert config.settings.repo_dir == repo
    assert config.settings.log_file == repo / "logs" / "run.log"
    assert config.settings.manifest_path == repo / "checksums.txt"
    assert config.sync.files == (".aliases", ".bashrc", ".profile")
    assert config.sync.targets == (fake_home.resolve(), Path("/c/users/alice"))


def test_load_config_defaults_without_file(tmp_path: Path, fake_home: Path) -> None:
    config = load_config(cwd=tmp_path)

    assert config.config_path is None
    assert config.settings.repo_dir == tmp_path.resolve()
    assert config.settings.log_file == tmp_path.resolve() / "sync.log"
    assert config.settings.algorithm == "sha256"
    assert config.settings.record_identical is True
    assert config.sync.files == (".aliases", ".bashrc")
    assert config.sync.targets[0] == fake_home.resolve()


def test_load_config_picks_up_file_in_working_directory(tmp_path: Path, fake_home: Path) -> None:
    _write_config(
        tmp_path,
        """
        [sync]
        files = [".vimrc"]
        """,
    )

    config = load_config(cwd=tmp_path)

    assert config.sync.files == (".vimrc",)


def test_missing_explicit_config(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "nope.toml")


def test_config_directory_without_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Expected to find"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "files",
    ['[]', '["nested/.bashrc"]', '["/etc/passwd"]', '[".."]', '[".bashrc", ".bashrc"]'],
)
def test_invalid_tracked_files(tmp_path: Path, files: str) -> None:
    config_path = _write_config(
        tmp_path,
        f"""
        [sync]
        files = {files}
        """,
    )

    with pytest.raises(ConfigError):
        load_config(config_path)


def test_empty_targets_rejected(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        """
        [sync]
        targets = []
        """,
    )

    with pytest.raises(ConfigError, match="target"):
        load_config(config_path)


def test_invalid_toml(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, "[settings\n")

    with pytest.raises(ConfigError, match="not valid TOML"):
        load_config(config_path)


def test_log_categories_from_env() -> None:
    assert LogCategories.from_env({}) == LogCategories()

    categories = LogCategories.from_env({"DOTSYNC_CATEGORIES": "warn, error"})
    assert categories.enabled("warn")
    assert categories.enabled("error")
    assert not categories.enabled("info")
    assert not categories.enabled("ok")

    assert LogCategories.from_env({"DOTSYNC_CATEGORIES": "all"}) == LogCategories()

    with pytest.raises(ConfigError):
        LogCategories.from_env({"DOTSYNC_CATEGORIES": "loud"})


def test_render_default_config_round_trips(tmp_path: Path, fake_home: Path) -> None:
    text = render_default_config()
    data = tomllib.loads(text)

    assert data["sync"]["files"] == [".aliases", ".bashrc"]
    assert data["settings"]["manifest_name"] == "checksums.txt"

    config_path = _write_config(tmp_path, text)
    config = load_config(config_path)
    assert config.settings.repo_dir == tmp_path.resolve()
