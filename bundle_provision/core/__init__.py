from __future__ import annotations

from .errors import (
    ConfigError,
    ConfigurationError,
    CopyIncompleteError,
    CopySizeAnomalyError,
    CorruptAfterCopyError,
    CorruptAfterRecopyError,
    PersistenceError,
    ProvisionError,
    ProvisioningError,
    SourceUnavailableError,
)
from .types import AssetDescriptor, ProvisioningState, SQLITE_SIGNATURE

__all__ = [
    "AssetDescriptor",
    "ConfigError",
    "ConfigurationError",
    "CopyIncompleteError",
    "CopySizeAnomalyError",
    "CorruptAfterCopyError",
    "CorruptAfterRecopyError",
    "PersistenceError",
    "ProvisionError",
    "ProvisioningError",
    "ProvisioningState",
    "SQLITE_SIGNATURE",
    "SourceUnavailableError",
]
