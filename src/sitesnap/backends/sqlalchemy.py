"""
SQLAlchemy storage backend.

Runs snapshot statements through a SQLAlchemy ``AsyncEngine``. The
engine's dialect name selects the statement dialect, so the same backend
serves PostgreSQL (asyncpg/psycopg), MySQL (aiomysql/asyncmy) and SQLite
(aiosqlite).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from sitesnap.backends._connection import storage_connection
from sitesnap.backends.dialects import SnapshotDialect, get_dialect
from sitesnap.backends.marshaling import UUIDMarshaling, configure_uuid_marshaling
from sitesnap.migrations import split_statements

logger = logging.getLogger(__name__)


class SQLAlchemyBackend:
    """
    StorageBackend over a SQLAlchemy async engine or connection.

    Example:
        >>> from sqlalchemy.ext.asyncio import create_async_engine
        >>> from sitesnap.backends import SQLAlchemyBackend, configure_uuid_marshaling
        >>>
        >>> engine = create_async_engine("postgresql+asyncpg://...")
        >>> backend = SQLAlchemyBackend(engine, marshaling=configure_uuid_marshaling())
        >>> await backend.create_schema()

    Note:
        When given an ``AsyncConnection`` the backend joins the caller's
        transaction and never commits it. On PostgreSQL each insert runs
        under a SAVEPOINT, so a version conflict does not abort the
        caller's transaction.
    """

    def __init__(
        self,
        conn: AsyncEngine | AsyncConnection,
        *,
        marshaling: UUIDMarshaling | None = None,
        dialect: SnapshotDialect | None = None,
        owns_engine: bool = False,
    ) -> None:
        """
        Initialize the backend.

        Args:
            conn: Engine (connection per call) or connection (caller-managed)
            marshaling: UUID marshaling; defaults to site_id and owner columns
            dialect: Statement dialect; resolved from the engine if omitted
            owns_engine: dispose() disposes the engine. Set when the backend
                         created it (see create_snapshot_store).

        Raises:
            ValueError: If the engine's dialect is not supported
        """
        self._conn = conn
        self._owns_engine = owns_engine and isinstance(conn, AsyncEngine)
        self._marshaling = marshaling or configure_uuid_marshaling()
        self._dialect = dialect or get_dialect(conn.dialect.name)
        logger.debug("SQLAlchemyBackend initialized for %s", self._dialect.name)

    @property
    def dialect(self) -> SnapshotDialect:
        return self._dialect

    @property
    def marshaling(self) -> UUIDMarshaling:
        return self._marshaling

    async def execute_query(self, sql: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        async with storage_connection(self._conn, "query") as conn:
            result = await conn.execute(text(sql), self._marshaling.bind(params))
            rows = [dict(row) for row in result.mappings()]

        return [self._marshaling.load(row) for row in rows]

    async def execute_insert(self, sql: str, params: Mapping[str, Any]) -> int:
        async with storage_connection(
            self._conn,
            "insert",
            write=True,
            savepoint=self._dialect.conflict_aborts_transaction,
        ) as conn:
            result = await conn.execute(text(sql), self._marshaling.bind(params))
            return int(result.rowcount)

    async def create_schema(self) -> None:
        async with storage_connection(self._conn, "create_schema", write=True) as conn:
            for statement in split_statements(self._dialect.schema()):
                await conn.execute(text(statement))
        logger.info("Ensured snapshots schema exists (%s)", self._dialect.name)

    async def dispose(self) -> None:
        """Release pooled connections if this backend owns its engine."""
        if self._owns_engine:
            await self._conn.dispose()  # type: ignore[union-attr]
            logger.debug("Disposed engine for %s", self._dialect.name)

    def __repr__(self) -> str:
        return f"SQLAlchemyBackend(dialect={self._dialect.name!r})"


__all__ = ["SQLAlchemyBackend"]
