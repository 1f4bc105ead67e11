from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from bundle_provision.core.errors import ConfigError
from bundle_provision.core.types import SQLITE_SIGNATURE, AssetDescriptor

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def detect_platform() -> str:
    """Return the platform identifier used by the source locator table.

    CPython reports "android" and "ios" natively from 3.13 on; older Android
    builds report "linux" but expose `sys.getandroidapilevel`.
    """

    if sys.platform == "linux" and hasattr(sys, "getandroidapilevel"):
        return "android"
    return sys.platform


@dataclass(frozen=True)
class AssetConfig:
    name: str = "ejdict.sqlite3"
    bundle_version: int = 1
    min_valid_size_bytes: int = 512
    expected_min_size_bytes: int = 1024 * 1024
    signature: bytes = SQLITE_SIGNATURE

    def descriptor(self) -> AssetDescriptor:
        return AssetDescriptor(
            name=self.name,
            bundle_version=self.bundle_version,
            min_valid_size_bytes=self.min_valid_size_bytes,
            expected_min_size_bytes=self.expected_min_size_bytes,
            signature=self.signature,
        )


@dataclass(frozen=True)
class PathsConfig:
    # ios/darwin: <library_dir>/LocalDatabase
    library_dir: Path = field(default_factory=lambda: Path.home() / "Library")
    # android/linux: <private_data_root>/<app_id>/files
    private_data_root: Path = Path("/data/data")
    # Read-only application bundle root (ios/darwin source).
    bundle_root: Path | None = None
    # Importable package holding the packaged asset (android/linux source).
    asset_package: str = "bundle_provision.assets"


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    app_id: str
    platform: str
    asset: AssetConfig = field(default_factory=AssetConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError("must be a mapping", path=key)
    return value


def _int(section: Mapping[str, Any], key: str, default: int, *, path: str, minimum: int = 0) -> int:
    value = section.get(key, default)
    if isinstance(value, bool):
        raise ConfigError("must be an integer", path=f"{path}.{key}")
    try:
        out = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError("must be an integer", path=f"{path}.{key}") from e
    if out < minimum:
        raise ConfigError(f"must be >= {minimum}", path=f"{path}.{key}")
    return out


def _path(value: Any, *, path: str) -> Path:
    if not isinstance(value, (str, Path)) or not str(value).strip():
        raise ConfigError("must be a non-empty path string", path=path)
    return Path(str(value)).expanduser().resolve()


def _signature(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str) or not value:
        raise ConfigError("must be a non-empty string", path="asset.signature")
    try:
        # YAML "\0" escapes arrive as real NUL characters.
        return value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise ConfigError("must only contain latin-1 characters", path="asset.signature") from e


def build_app_config(raw: Mapping[str, Any]) -> AppConfig:
    """Validate an expanded config mapping and build the typed config tree."""

    app_id = raw.get("app_id")
    if not isinstance(app_id, str) or not app_id.strip():
        raise ConfigError("must be a non-empty string", path="app_id")

    platform = raw.get("platform") or "auto"
    if not isinstance(platform, str):
        raise ConfigError("must be a string", path="platform")
    platform = platform.strip().lower()
    if platform == "auto":
        platform = detect_platform()

    asset_raw = _section(raw, "asset")
    name = asset_raw.get("name", AssetConfig.name)
    if not isinstance(name, str) or not name.strip() or "/" in name or "\\" in name:
        raise ConfigError("must be a plain file name", path="asset.name")

    asset = AssetConfig(
        name=name,
        bundle_version=_int(asset_raw, "bundle_version", AssetConfig.bundle_version, path="asset", minimum=1),
        min_valid_size_bytes=_int(asset_raw, "min_valid_size_bytes", AssetConfig.min_valid_size_bytes, path="asset"),
        expected_min_size_bytes=_int(
            asset_raw, "expected_min_size_bytes", AssetConfig.expected_min_size_bytes, path="asset"
        ),
        signature=_signature(asset_raw.get("signature", SQLITE_SIGNATURE)),
    )

    paths_raw = _section(raw, "paths")
    defaults = PathsConfig()
    asset_package = paths_raw.get("asset_package", defaults.asset_package)
    if not isinstance(asset_package, str) or not asset_package.strip():
        raise ConfigError("must be a dotted package name", path="paths.asset_package")

    paths = PathsConfig(
        library_dir=(
            _path(paths_raw["library_dir"], path="paths.library_dir")
            if paths_raw.get("library_dir") is not None
            else defaults.library_dir
        ),
        private_data_root=(
            _path(paths_raw["private_data_root"], path="paths.private_data_root")
            if paths_raw.get("private_data_root") is not None
            else defaults.private_data_root
        ),
        bundle_root=(
            _path(paths_raw["bundle_root"], path="paths.bundle_root")
            if paths_raw.get("bundle_root") is not None
            else None
        ),
        asset_package=asset_package,
    )

    logging_raw = _section(raw, "logging")
    level = str(logging_raw.get("level", LoggingConfig.level)).upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"must be one of {', '.join(_LOG_LEVELS)}", path="logging.level")

    return AppConfig(
        app_id=app_id.strip(),
        platform=platform,
        asset=asset,
        paths=paths,
        logging=LoggingConfig(level=level),
    )
