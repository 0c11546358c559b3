"""TOML configuration loading for dotsync."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import tomli_w
from pydantic import BaseModel, ConfigDict, Field

from .errors import ConfigError

DEFAULT_CONFIG_FILENAME = "dotsync.toml"
DEFAULT_TRACKED_FILES: tuple[str, ...] = (".aliases", ".bashrc")
DEFAULT_TARGETS: tuple[str, ...] = ("~", "/c/users/$USERNAME")
CATEGORIES_ENV_VAR = "DOTSYNC_CATEGORIES"
CATEGORY_NAMES: tuple[str, ...] = ("info", "warn", "error", "ok")

__all__ = [
    "CATEGORIES_ENV_VAR",
    "Config",
    "ConfigError",
    "DEFAULT_CONFIG_FILENAME",
    "LogCategories",
    "Settings",
    "SyncConfig",
    "load_config",
    "render_default_config",
]


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


class Settings(BaseModel):
    """Global configuration options."""

    model_config = ConfigDict(frozen=True)

    repo_dir: Path
    manifest_name: str = "checksums.txt"
    log_file: Path
    algorithm: str = "sha256"
    record_identical: bool = True

    @property
    def manifest_path(self) -> Path:
        return self.repo_dir / self.manifest_name

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, base_dir: Path) -> "Settings":
        repo_dir = _expand_path(raw.get("repo_dir", "."), base_dir=base_dir)
        log_file = _expand_path(raw.get("log_file", "sync.log"), base_dir=repo_dir)

        manifest_name = str(raw.get("manifest_name", "checksums.txt"))
        if not manifest_name or Path(manifest_name).name != manifest_name:
            raise ConfigError(f"manifest_name '{manifest_name}' must be a bare file name")

        record_identical = raw.get("record_identical", True)
        if not isinstance(record_identical, bool):
            raise ConfigError("record_identical must be a boolean")

        return cls(
            repo_dir=repo_dir,
            manifest_name=manifest_name,
            log_file=log_file,
            algorithm=str(raw.get("algorithm", "sha256")),
            record_identical=record_identical,
        )


class SyncConfig(BaseModel):
    """Tracked files and the ordered target directories they are synced into."""

    model_config = ConfigDict(frozen=True)

    files: tuple[str, ...]
    targets: tuple[Path, ...]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, base_dir: Path) -> "SyncConfig":
        files_raw = raw.get("files", DEFAULT_TRACKED_FILES)
        if not files_raw:
            raise ConfigError("Configuration must track at least one file")

        files: list[str] = []
        for entry in files_raw:
            name = str(entry)
            candidate = Path(name)
            if candidate.is_absolute() or len(candidate.parts) != 1 or name in (".", ".."):
                raise ConfigError(f"Tracked file '{name}' must be a bare file name")
            if name in files:
                raise ConfigError(f"Tracked file '{name}' is listed more than once")
            files.append(name)

        targets_raw = raw.get("targets", DEFAULT_TARGETS)
        if not targets_raw:
            raise ConfigError("Configuration must define at least one target directory")
        targets = tuple(_expand_path(target, base_dir=base_dir) for target in targets_raw)

        return cls(files=tuple(files), targets=targets)

    def source_path(self, repo_dir: Path, name: str) -> Path:
        return repo_dir / name


class LogCategories(BaseModel):
    """Console categories that are enabled for interactive output."""

    model_config = ConfigDict(frozen=True)

    info: bool = True
    warn: bool = True
    error: bool = True
    ok: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LogCategories":
        environ = os.environ if environ is None else environ
        raw = environ.get(CATEGORIES_ENV_VAR)
        if raw is None or not raw.strip():
            return cls()

        requested = {part.strip().lower() for part in raw.split(",") if part.strip()}
        if "all" in requested:
            return cls()
        unknown = requested - set(CATEGORY_NAMES)
        if unknown:
            raise ConfigError(
                f"Unknown categories in {CATEGORIES_ENV_VAR}: {', '.join(sorted(unknown))}"
            )
        return cls(**{name: name in requested for name in CATEGORY_NAMES})

    def enabled(self, category: str) -> bool:
        return bool(getattr(self, category, True))


class Config(BaseModel):
    """Fully parsed configuration."""

    model_config = ConfigDict(frozen=True)

    config_path: Path | None = None
    settings: Settings
    sync: SyncConfig
    categories: LogCategories = Field(default_factory=LogCategories)


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        path: Optional path to the TOML file or its directory. When omitted,
            ``dotsync.toml`` in the working directory is used if present, and
            built-in defaults rooted at the working directory otherwise.
        cwd: Working directory override, mostly for tests.
    """

    cwd = (cwd or Path.cwd()).resolve(strict=False)
    config_path = _resolve_config_path(path, cwd)

    if config_path is None:
        data: dict[str, Any] = {}
        base_dir = cwd
    else:
        base_dir = config_path.parent
        try:
            with config_path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Configuration file '{config_path}' is not valid TOML: {exc}") from exc

    settings = Settings.from_raw(data.get("settings") or {}, base_dir=base_dir)
    sync = SyncConfig.from_raw(data.get("sync") or {}, base_dir=base_dir)
    categories = LogCategories.from_env()

    return Config(config_path=config_path, settings=settings, sync=sync, categories=categories)


def render_default_config() -> str:
    """Return the text of a starter ``dotsync.toml``."""

    data = {
        "settings": {
            "repo_dir": ".",
            "manifest_name": "checksums.txt",
            "log_file": "sync.log",
            "algorithm": "sha256",
            "record_identical": True,
        },
        "sync": {
            "files": list(DEFAULT_TRACKED_FILES),
            "targets": list(DEFAULT_TARGETS),
        },
    }
    return "# dotsync configuration\n\n" + tomli_w.dumps(data)


def _resolve_config_path(path: Path | None, cwd: Path) -> Path | None:
    if path is None:
        candidate = cwd / DEFAULT_CONFIG_FILENAME
        return candidate if candidate.is_file() else None

    path = Path(path)
    if not path.is_absolute():
        path = cwd / path
    if not path.exists():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigError(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)
