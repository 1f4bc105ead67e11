"""Read-only access to the provisioned dictionary database.

Only the opening handshake lives here: queries over the dictionary belong
to the application.
"""

from __future__ import annotations

import asyncio
import sqlite3
from pathlib import Path

from bundle_provision.core.errors import ProvisionError
from bundle_provision.observability.logging import get_logger
from bundle_provision.provisioning.coordinator import ProvisioningCoordinator


class EmptyDatabaseError(ProvisionError):
    """The provisioned file opened but holds no tables."""

    def __init__(self, path: Path):
        super().__init__(f"{path}: database contains no tables")
        self.path = str(path)


class DictionaryDatabase:
    def __init__(self, coordinator: ProvisioningCoordinator) -> None:
        self._coordinator = coordinator
        self._conn: sqlite3.Connection | None = None
        self._open_lock = asyncio.Lock()
        self._log = get_logger("bundle_provision.storage")

    @property
    def path(self) -> Path:
        return self._coordinator.destination_path

    async def open(self) -> sqlite3.Connection:
        async with self._open_lock:
            if self._conn is not None:
                return self._conn

            await self._coordinator.ensure_ready()
            conn = await asyncio.to_thread(self._connect)
            self._conn = conn
            return conn

    def _connect(self) -> sqlite3.Connection:
        uri = f"{self.path.resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        try:
            for seq, name, file in conn.execute("PRAGMA database_list").fetchall():
                self._log.debug("database_attached", seq=seq, schema=name, file=file)

            tables = self._tables(conn)
            if not tables:
                raise EmptyDatabaseError(self.path)
            self._log.info("database_opened", path=str(self.path), tables=tables)
        except BaseException:
            conn.close()
            raise
        return conn

    @staticmethod
    def _tables(conn: sqlite3.Connection) -> list[str]:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name").fetchall()
        return [row[0] for row in rows]

    def list_tables(self) -> list[str]:
        if self._conn is None:
            return []
        return self._tables(self._conn)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
