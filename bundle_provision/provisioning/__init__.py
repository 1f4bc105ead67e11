from __future__ import annotations

from .coordinator import ProvisioningCoordinator
from .integrity import IntegrityChecker, IntegrityReport, Verdict
from .locator import (
    BundleDirectoryLocator,
    PackagedAssetLocator,
    SourceLocator,
    build_locator,
    supported_platforms,
)
from .single_flight import SingleFlight
from .version_store import MARKER_NAME, VersionStore

__all__ = [
    "BundleDirectoryLocator",
    "IntegrityChecker",
    "IntegrityReport",
    "MARKER_NAME",
    "PackagedAssetLocator",
    "ProvisioningCoordinator",
    "SingleFlight",
    "SourceLocator",
    "Verdict",
    "VersionStore",
    "build_locator",
    "supported_platforms",
]
