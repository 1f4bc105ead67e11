from __future__ import annotations

import enum
from dataclasses import dataclass

SQLITE_SIGNATURE = b"SQLite format 3\x00"


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """What the bundled asset is expected to look like once installed."""

    name: str
    bundle_version: int
    min_valid_size_bytes: int = 512
    # Calibrated to the shipped dictionary (~6.7 MB); checked after a copy only.
    expected_min_size_bytes: int = 1024 * 1024
    signature: bytes = SQLITE_SIGNATURE


class ProvisioningState(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_FLIGHT = "in_flight"
    IDLE = "idle"
