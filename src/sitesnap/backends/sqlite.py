"""
SQLite storage backend using aiosqlite.

Suitable for development, tests and single-instance deployments. A new
connection is opened for every call, so ":memory:" gives each call its
own empty database; use a file path for anything persistent.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping
from typing import Any

from sitesnap.backends.dialects import SQLITE, SnapshotDialect
from sitesnap.backends.errors import is_storage_unavailable
from sitesnap.backends.marshaling import UUIDMarshaling, configure_uuid_marshaling
from sitesnap.exceptions import StorageUnavailableError

# Optional dependency handling
try:
    import aiosqlite

    SQLITE_AVAILABLE = True
except ImportError:
    SQLITE_AVAILABLE = False
    aiosqlite = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


class SQLiteNotAvailableError(ImportError):
    """Raised when aiosqlite is not installed."""

    def __init__(self) -> None:
        super().__init__(
            "aiosqlite is required for SQLiteBackend. Install it with: pip install sitesnap[sqlite]"
        )


class SQLiteBackend:
    """
    StorageBackend over an SQLite database file.

    Example:
        >>> from sitesnap.backends import SQLiteBackend
        >>>
        >>> backend = SQLiteBackend("snapshots.db")
        >>> await backend.create_schema()
    """

    def __init__(
        self,
        database_path: str,
        *,
        marshaling: UUIDMarshaling | None = None,
        busy_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the SQLite backend.

        Args:
            database_path: Path to the SQLite database file.
            marshaling: UUID marshaling; defaults to site_id and owner columns
            busy_timeout: Seconds to wait for a competing writer's lock

        Raises:
            SQLiteNotAvailableError: If aiosqlite is not installed.
        """
        if not SQLITE_AVAILABLE:
            raise SQLiteNotAvailableError()

        self._database_path = database_path
        self._marshaling = marshaling or configure_uuid_marshaling()
        self._busy_timeout = busy_timeout
        logger.debug("SQLiteBackend initialized with %s", database_path)

    @property
    def dialect(self) -> SnapshotDialect:
        return SQLITE

    @property
    def database_path(self) -> str:
        return self._database_path

    @property
    def marshaling(self) -> UUIDMarshaling:
        return self._marshaling

    async def execute_query(self, sql: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        try:
            async with aiosqlite.connect(self._database_path, timeout=self._busy_timeout) as conn:
                conn.row_factory = aiosqlite.Row
                async with conn.execute(sql, self._marshaling.bind(params)) as cursor:
                    rows = [dict(row) for row in await cursor.fetchall()]
        except (sqlite3.Error, OSError) as e:
            if is_storage_unavailable(e):
                raise StorageUnavailableError("query", e) from e
            raise

        return [self._marshaling.load(row) for row in rows]

    async def execute_insert(self, sql: str, params: Mapping[str, Any]) -> int:
        try:
            async with aiosqlite.connect(self._database_path, timeout=self._busy_timeout) as conn:
                cursor = await conn.execute(sql, self._marshaling.bind(params))
                await conn.commit()
                inserted: int = cursor.rowcount
        except (sqlite3.Error, OSError) as e:
            if is_storage_unavailable(e):
                raise StorageUnavailableError("insert", e) from e
            raise

        return inserted

    async def create_schema(self) -> None:
        try:
            async with aiosqlite.connect(self._database_path, timeout=self._busy_timeout) as conn:
                await conn.executescript(SQLITE.schema())
                await conn.commit()
        except (sqlite3.Error, OSError) as e:
            if is_storage_unavailable(e):
                raise StorageUnavailableError("create_schema", e) from e
            raise
        logger.info("Ensured snapshots schema exists in %s", self._database_path)

    async def dispose(self) -> None:
        """Nothing to release: every call opens and closes its own connection."""

    def __repr__(self) -> str:
        return f"SQLiteBackend(database_path={self._database_path!r})"


__all__ = [
    "SQLITE_AVAILABLE",
    "SQLiteBackend",
    "SQLiteNotAvailableError",
]
