from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from bundle_provision.core.errors import PersistenceError
from bundle_provision.provisioning.version_store import MARKER_NAME, VersionStore


def test_missing_marker_reads_as_zero(tmp_path: Path) -> None:
    assert VersionStore(tmp_path).get_installed_version() == 0


def test_missing_directory_reads_as_zero(tmp_path: Path) -> None:
    assert VersionStore(tmp_path / "not-there").get_installed_version() == 0


@pytest.mark.parametrize("text", ["", "abc", "5.5", "-3", "\xff\xfe"])
def test_unparsable_marker_reads_as_zero(tmp_path: Path, text: str) -> None:
    (tmp_path / MARKER_NAME).write_bytes(text.encode("latin-1"))
    assert VersionStore(tmp_path).get_installed_version() == 0


def test_marker_tolerates_surrounding_whitespace(tmp_path: Path) -> None:
    (tmp_path / MARKER_NAME).write_text("4\n", encoding="ascii")
    assert VersionStore(tmp_path).get_installed_version() == 4


def test_set_writes_plain_decimal_text(tmp_path: Path) -> None:
    store = VersionStore(tmp_path)
    store.set_installed_version(4)
    store.set_installed_version(5)

    assert (tmp_path / MARKER_NAME).read_text(encoding="ascii") == "5"
    assert store.get_installed_version() == 5
    assert not (tmp_path / (MARKER_NAME + ".tmp")).exists()


def test_set_failure_raises_persistence_error(tmp_path: Path) -> None:
    store = VersionStore(tmp_path / "missing-dir")

    with pytest.raises(PersistenceError) as ei:
        store.set_installed_version(5)
    assert ei.value.path == str(store.marker_path)


def test_async_variants(tmp_path: Path) -> None:
    store = VersionStore(tmp_path)

    async def scenario() -> int:
        await store.aset_installed_version(7)
        return await store.aget_installed_version()

    assert asyncio.run(scenario()) == 7
