"""Exception hierarchy for dotsync."""

from __future__ import annotations


class DotsyncError(RuntimeError):
    """Raised when dotsync encounters an unrecoverable state."""


class ChecksumToolError(DotsyncError):
    """Raised when no usable content-hash implementation is available."""


class ManifestError(DotsyncError):
    """Raised when a checksum manifest cannot be built or parsed."""


class ConfigError(DotsyncError):
    """Raised when a configuration file cannot be parsed or validated."""
