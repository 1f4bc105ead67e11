"""Where the bundled asset comes from and where it is installed.

Exactly two strategies exist and the platform picks one statically:

- packaged asset: the file is a resource inside an importable package and is
  only reachable through `importlib.resources`, installed under the app's
  private data area (`<private_data_root>/<app_id>/files`);
- bundle directory: the file sits under a read-only application bundle root,
  installed under the library directory (`<library_dir>/LocalDatabase`).
"""

from __future__ import annotations

import os
import shutil
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import BinaryIO, Protocol

from bundle_provision.config.model import AppConfig
from bundle_provision.core.errors import ConfigurationError, CopyIncompleteError, SourceUnavailableError

LIBRARY_SUBDIR = "LocalDatabase"
PRIVATE_DATA_SUBDIR = "files"

_COPY_CHUNK = 1024 * 1024


class SourceLocator(Protocol):
    def resolve_destination_dir(self) -> Path: ...

    def describe_source(self) -> str: ...

    def source_exists(self) -> bool: ...

    def fetch_source_into(self, dest_path: Path) -> int: ...


def _stream_into(src: BinaryIO, dest_path: Path) -> int:
    """Copy `src` into a file that must not exist yet; return bytes written."""

    try:
        dst = open(dest_path, "xb")
    except FileExistsError as e:
        raise CopyIncompleteError("destination was not cleared before copy", path=dest_path) from e
    except OSError as e:
        raise CopyIncompleteError(f"cannot create destination: {e}", path=dest_path) from e

    with dst:
        try:
            shutil.copyfileobj(src, dst, _COPY_CHUNK)
            dst.flush()
            os.fsync(dst.fileno())
        except OSError as e:
            raise CopyIncompleteError(f"copy interrupted: {e}", path=dest_path) from e
        return dst.tell()


class PackagedAssetLocator:
    def __init__(self, *, app_id: str, private_data_root: Path, package: str, asset_name: str) -> None:
        self._app_id = app_id
        self._private_data_root = Path(private_data_root)
        self._package = package
        self._asset_name = asset_name

    def resolve_destination_dir(self) -> Path:
        return self._private_data_root / self._app_id / PRIVATE_DATA_SUBDIR

    def describe_source(self) -> str:
        return f"package:{self._package}/{self._asset_name}"

    def resolve_source(self) -> Traversable:
        try:
            return resources.files(self._package).joinpath(self._asset_name)
        except (ModuleNotFoundError, TypeError) as e:
            raise SourceUnavailableError(
                f"asset package {self._package!r} is not importable: {e}"
            ) from e

    def source_exists(self) -> bool:
        try:
            return self.resolve_source().is_file()
        except SourceUnavailableError:
            return False

    def fetch_source_into(self, dest_path: Path) -> int:
        handle = self.resolve_source()
        try:
            src = handle.open("rb")
        except OSError as e:
            raise SourceUnavailableError(f"packaged asset is unreadable: {e}", path=self.describe_source()) from e
        with src:
            return _stream_into(src, dest_path)


class BundleDirectoryLocator:
    def __init__(self, *, library_dir: Path, bundle_root: Path, asset_name: str) -> None:
        self._library_dir = Path(library_dir)
        self._bundle_root = Path(bundle_root)
        self._asset_name = asset_name

    def resolve_destination_dir(self) -> Path:
        return self._library_dir / LIBRARY_SUBDIR

    def describe_source(self) -> str:
        return str(self.resolve_source())

    def resolve_source(self) -> Path:
        return self._bundle_root / self._asset_name

    def source_exists(self) -> bool:
        return self.resolve_source().is_file()

    def fetch_source_into(self, dest_path: Path) -> int:
        source = self.resolve_source()
        try:
            src = open(source, "rb")
        except OSError as e:
            raise SourceUnavailableError(f"bundled asset is unreadable: {e}", path=source) from e
        with src:
            return _stream_into(src, dest_path)


def _packaged(config: AppConfig) -> SourceLocator:
    return PackagedAssetLocator(
        app_id=config.app_id,
        private_data_root=config.paths.private_data_root,
        package=config.paths.asset_package,
        asset_name=config.asset.name,
    )


def _bundled(config: AppConfig) -> SourceLocator:
    if config.paths.bundle_root is None:
        raise ConfigurationError(
            f"paths.bundle_root is required on platform {config.platform!r}"
        )
    return BundleDirectoryLocator(
        library_dir=config.paths.library_dir,
        bundle_root=config.paths.bundle_root,
        asset_name=config.asset.name,
    )


_PLATFORMS = {
    "android": _packaged,
    "linux": _packaged,
    "ios": _bundled,
    "darwin": _bundled,
}


def supported_platforms() -> list[str]:
    return sorted(_PLATFORMS)


def build_locator(config: AppConfig) -> SourceLocator:
    """Select the locator variant for `config.platform`."""

    factory = _PLATFORMS.get(config.platform)
    if factory is None:
        raise ConfigurationError(
            f"unsupported platform {config.platform!r} (supported: {', '.join(supported_platforms())})"
        )
    return factory(config)
