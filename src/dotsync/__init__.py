"""Core package for the dotsync project."""

from .cli import app, run
from .config import Config, LogCategories, Settings, SyncConfig, load_config
from .errors import ChecksumToolError, ConfigError, DotsyncError, ManifestError
from .manager import SyncManager
from .manifest import ChecksumManifest, ManifestManager
from .models import ChecksumEntry, PairResult, PairState, RunMode, RunOutcome
from .reporter import RunReporter

__all__ = [
    "Config",
    "LogCategories",
    "Settings",
    "SyncConfig",
    "load_config",
    "ChecksumToolError",
    "ConfigError",
    "DotsyncError",
    "ManifestError",
    "SyncManager",
    "ChecksumManifest",
    "ManifestManager",
    "ChecksumEntry",
    "PairResult",
    "PairState",
    "RunMode",
    "RunOutcome",
    "RunReporter",
    "app",
    "run",
]
