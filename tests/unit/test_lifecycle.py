from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from bundle_provision.provisioning.version_store import MARKER_NAME
from bundle_provision.runtime.lifecycle import EXIT_CONFIG, EXIT_OK, EXIT_PROVISIONING, main


def _write_config(tmp_path: Path, *, platform: str, bundle_root: Path | None) -> Path:
    cfg = tmp_path / "app.yaml"
    lines = [
        "app_id: com.example",
        f"platform: {platform}",
        "asset:",
        "  name: ejdict.sqlite3",
        "  bundle_version: 5",
        "  expected_min_size_bytes: 1024",
        "paths:",
        f"  library_dir: {tmp_path / 'Library'}",
        f"  private_data_root: {tmp_path / 'data'}",
    ]
    if bundle_root is not None:
        lines.append(f"  bundle_root: {bundle_root}")
    cfg.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return cfg


def _bundle(tmp_path: Path) -> Path:
    bundle = tmp_path / "bundle"
    bundle.mkdir()
    conn = sqlite3.connect(bundle / "ejdict.sqlite3")
    try:
        conn.execute("CREATE TABLE items (item_id INTEGER PRIMARY KEY, word TEXT)")
        conn.commit()
    finally:
        conn.close()
    return bundle


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # load_dotenv looks for ./.env
    monkeypatch.chdir(tmp_path)


def test_provision_command_installs_dictionary(tmp_path: Path) -> None:
    cfg = _write_config(tmp_path, platform="darwin", bundle_root=_bundle(tmp_path))

    assert main(["--config", str(cfg), "provision"]) == EXIT_OK

    dest_dir = tmp_path / "Library" / "LocalDatabase"
    assert (dest_dir / "ejdict.sqlite3").exists()
    assert (dest_dir / MARKER_NAME).read_text(encoding="ascii") == "5"


def test_provision_is_the_default_command(tmp_path: Path) -> None:
    cfg = _write_config(tmp_path, platform="ios", bundle_root=_bundle(tmp_path))

    assert main(["--config", str(cfg)]) == EXIT_OK


def test_print_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = _write_config(tmp_path, platform="android", bundle_root=None)

    assert main(["--config", str(cfg), "print-config"]) == EXIT_OK

    out = json.loads(capsys.readouterr().out)
    assert out["app_id"] == "com.example"
    assert out["platform"] == "android"
    assert out["asset"]["signature"] == "SQLite format 3\x00"


def test_unsupported_platform_exit_code(tmp_path: Path) -> None:
    cfg = _write_config(tmp_path, platform="win32", bundle_root=None)

    assert main(["--config", str(cfg), "provision"]) == EXIT_PROVISIONING


def test_missing_source_exit_code(tmp_path: Path) -> None:
    cfg = _write_config(tmp_path, platform="darwin", bundle_root=tmp_path / "empty-bundle")

    assert main(["--config", str(cfg), "provision"]) == EXIT_PROVISIONING
    assert not (tmp_path / "Library" / "LocalDatabase" / "ejdict.sqlite3").exists()


def test_missing_config_exit_code(tmp_path: Path) -> None:
    assert main(["--config", str(tmp_path / "nope.yaml")]) == EXIT_CONFIG
