from __future__ import annotations

from pathlib import Path

from bundle_provision.core.types import AssetDescriptor
from bundle_provision.provisioning.integrity import IntegrityChecker, Verdict


def test_valid_file(tmp_path: Path, descriptor: AssetDescriptor, asset_bytes: bytes) -> None:
    p = tmp_path / "a.db"
    p.write_bytes(asset_bytes)

    checker = IntegrityChecker(descriptor)
    report = checker.inspect(p)
    assert report.ok
    assert report.size == len(asset_bytes)
    assert checker.is_valid(p) is True


def test_missing_file(tmp_path: Path, descriptor: AssetDescriptor) -> None:
    checker = IntegrityChecker(descriptor)
    assert checker.inspect(tmp_path / "a.db").verdict is Verdict.MISSING
    assert checker.is_valid(tmp_path / "a.db") is False


def test_below_size_floor(tmp_path: Path, descriptor: AssetDescriptor, asset_bytes: bytes) -> None:
    p = tmp_path / "a.db"
    p.write_bytes(asset_bytes[: descriptor.min_valid_size_bytes - 1])

    assert IntegrityChecker(descriptor).inspect(p).verdict is Verdict.TOO_SMALL


def test_empty_file(tmp_path: Path, descriptor: AssetDescriptor) -> None:
    p = tmp_path / "a.db"
    p.write_bytes(b"")

    assert IntegrityChecker(descriptor).is_valid(p) is False


def test_foreign_header(tmp_path: Path, descriptor: AssetDescriptor, asset_bytes: bytes) -> None:
    p = tmp_path / "a.db"
    p.write_bytes(b"PK\x03\x04" + asset_bytes[4:])

    report = IntegrityChecker(descriptor).inspect(p)
    assert report.verdict is Verdict.BAD_SIGNATURE
    assert report.header.startswith(b"PK")


def test_directory_is_not_valid(tmp_path: Path, descriptor: AssetDescriptor) -> None:
    p = tmp_path / "a.db"
    p.mkdir()

    assert IntegrityChecker(descriptor).is_valid(p) is False


def test_probe_readable(tmp_path: Path, descriptor: AssetDescriptor, asset_bytes: bytes) -> None:
    checker = IntegrityChecker(descriptor)
    p = tmp_path / "a.db"
    p.write_bytes(asset_bytes)
    assert checker.probe_readable(p) is True

    tiny = tmp_path / "tiny.db"
    tiny.write_bytes(b"abc")
    assert checker.probe_readable(tiny) is True

    empty = tmp_path / "empty.db"
    empty.write_bytes(b"")
    assert checker.probe_readable(empty) is False
    assert checker.probe_readable(tmp_path / "missing.db") is False
