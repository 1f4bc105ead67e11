"""Installed-version marker kept next to the provisioned asset."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from bundle_provision.core.errors import PersistenceError

MARKER_NAME = ".version"


class VersionStore:
    """Reads and writes `<destination_dir>/.version`.

    The marker holds the bundle version as plain decimal text. A missing or
    unreadable marker means "never installed".
    """

    def __init__(self, destination_dir: Path) -> None:
        self._destination_dir = Path(destination_dir)

    @property
    def marker_path(self) -> Path:
        return self._destination_dir / MARKER_NAME

    def get_installed_version(self) -> int:
        try:
            text = self.marker_path.read_text(encoding="ascii")
        except (OSError, UnicodeDecodeError):
            return 0
        try:
            version = int(text.strip())
        except ValueError:
            return 0
        return version if version > 0 else 0

    def set_installed_version(self, version: int) -> None:
        path = self.marker_path
        tmp = path.with_name(path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="ascii") as fh:
                fh.write(str(int(version)))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, path)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            raise PersistenceError(f"could not write version marker: {e}", path=path) from e

    async def aget_installed_version(self) -> int:
        return await asyncio.to_thread(self.get_installed_version)

    async def aset_installed_version(self, version: int) -> None:
        await asyncio.to_thread(self.set_installed_version, version)
