from __future__ import annotations

import pytest

from bundle_provision.core.types import SQLITE_SIGNATURE, AssetDescriptor

ASSET_SIZE = 8192


@pytest.fixture
def descriptor() -> AssetDescriptor:
    return AssetDescriptor(
        name="ejdict.sqlite3",
        bundle_version=5,
        min_valid_size_bytes=512,
        expected_min_size_bytes=4096,
    )


@pytest.fixture
def asset_bytes() -> bytes:
    body = bytes(range(256)) * (ASSET_SIZE // 256)
    return SQLITE_SIGNATURE + body[len(SQLITE_SIGNATURE):]
