from __future__ import annotations

from pathlib import Path


class ProvisionError(Exception):
    """Base exception for this project."""


class ConfigError(ProvisionError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class ProvisioningError(ProvisionError):
    """Raised by `ensure_ready()`.

    `retryable` tells the consumer whether a later call may succeed without
    changing the installation or the configuration.
    """

    retryable: bool = True

    def __init__(self, message: str, *, path: str | Path | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = str(path) if path is not None else None


class ConfigurationError(ProvisioningError):
    """Unsupported platform or unresolvable paths."""

    retryable = False


class SourceUnavailableError(ProvisioningError):
    """The packaged original asset is missing or unreadable."""


class CopyIncompleteError(ProvisioningError):
    """The copied file is empty."""


class CopySizeAnomalyError(ProvisioningError):
    """The copied file is smaller than the known size of the real asset."""

    def __init__(self, message: str, *, path: str | Path | None = None, size: int = 0, expected_min: int = 0):
        super().__init__(message, path=path)
        self.size = size
        self.expected_min = expected_min


class CorruptAfterCopyError(ProvisioningError):
    """The copied file failed the integrity check."""


class CorruptAfterRecopyError(ProvisioningError):
    """The file was still invalid after the single forced re-copy."""


class PersistenceError(ProvisioningError):
    """The version marker could not be written."""
