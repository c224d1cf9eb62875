"""
Relational snapshot store implementation.

Orchestrates a StorageBackend and a Codec. The backend's uniqueness
constraint on ``(site_id, version)`` is the only concurrency control:
the store never locks, never retries and never updates a row.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from sitesnap.backends.errors import ConflictPredicate
from sitesnap.backends.interface import StorageBackend
from sitesnap.backends.marshaling import uuid_from_bytes
from sitesnap.exceptions import (
    CodecError,
    DeserializationError,
    SerializationError,
    UnexpectedRowCountError,
)
from sitesnap.observability import SnapshotSpans, Tracer, create_tracer
from sitesnap.serialization import Codec, JSONCodec
from sitesnap.snapshots.interface import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)


class RelationalSnapshotStore(SnapshotStore):
    """
    SnapshotStore over a relational StorageBackend.

    Features:
    - Write-once inserts; a primary key violation is reported as False
    - Strict ``version < at_version`` point-in-time lookups
    - Pluggable codec (JSON by default)
    - Injectable conflict predicate (the backend dialect's by default)
    - Optional OpenTelemetry tracing

    Example:
        >>> from sqlalchemy.ext.asyncio import create_async_engine
        >>> from sitesnap.backends import SQLAlchemyBackend
        >>> from sitesnap.snapshots import RelationalSnapshotStore
        >>>
        >>> engine = create_async_engine("postgresql+asyncpg://...")
        >>> store = RelationalSnapshotStore(SQLAlchemyBackend(engine))
        >>> won = await store.persist_snapshot(snapshot)
        >>> latest = await store.find_latest_snapshot(snapshot.site_id)
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        codec: Codec | None = None,
        is_conflict: ConflictPredicate | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the relational snapshot store.

        Args:
            backend: Storage backend executing the statements
            codec: Codec for the snapshot state (default JSONCodec)
            is_conflict: Predicate recognizing a (site_id, version)
                         uniqueness violation. Defaults to the backend
                         dialect's predicate.
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on enable_tracing setting.
            enable_tracing: Whether to enable OpenTelemetry tracing (default True).
                          Ignored if tracer is explicitly provided.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._backend = backend
        self._dialect = backend.dialect
        self._spans = SnapshotSpans(self._tracer, self._dialect.name)
        self._codec: Codec = codec or JSONCodec()
        self._is_conflict = is_conflict or self._dialect.is_conflict
        logger.debug("RelationalSnapshotStore initialized (%s)", self._dialect.name)

    async def find_latest_snapshot(
        self,
        site_id: UUID,
        at_version: int | None = None,
    ) -> Snapshot | None:
        with self._spans.find_latest(site_id, at_version) as outcome:
            params: dict[str, Any] = {"site_id": site_id}
            if at_version is not None:
                params["at_version"] = at_version

            try:
                rows = await self._backend.execute_query(
                    self._dialect.select_latest_sql(bounded=at_version is not None),
                    params,
                )
            except CodecError as e:
                raise DeserializationError(site_id, at_version, e) from e

            if not rows:
                outcome.found(None)
                logger.debug(
                    "No snapshot found for site %s%s",
                    site_id,
                    f" before version {at_version}" if at_version is not None else "",
                )
                return None

            snapshot = self._to_snapshot(site_id, at_version, rows[0])

            outcome.found(snapshot.version)
            logger.debug(
                "Retrieved snapshot for site %s at version %d",
                site_id,
                snapshot.version,
            )
            return snapshot

    def _to_snapshot(
        self,
        site_id: UUID,
        at_version: int | None,
        row: dict[str, Any],
    ) -> Snapshot:
        try:
            owner = uuid_from_bytes(row["owner"])
            state = self._codec.decode(row["blob"])
        except CodecError as e:
            raise DeserializationError(site_id, at_version, e) from e

        return Snapshot(
            site_id=site_id,
            version=int(row["version"]),
            owner=owner,
            blob=state,
            deleted=bool(row["deleted"]),
        )

    async def persist_snapshot(self, snapshot: Snapshot) -> bool:
        with self._spans.persist(snapshot) as outcome:
            try:
                blob = self._codec.encode(snapshot.blob)
            except CodecError as e:
                raise SerializationError(snapshot.site_id, snapshot.version, e) from e

            try:
                inserted = await self._backend.execute_insert(
                    self._dialect.insert_sql,
                    {
                        "site_id": snapshot.site_id,
                        "version": snapshot.version,
                        "owner": snapshot.owner,
                        "blob": blob,
                        "deleted": snapshot.deleted,
                    },
                )
            except Exception as e:
                if not self._is_conflict(e):
                    raise
                outcome.persisted(False)
                logger.info(
                    "Snapshot for site %s at version %d already exists",
                    snapshot.site_id,
                    snapshot.version,
                )
                return False

            # Conflicts arrive as errors; any other count leaves the outcome unknown
            if inserted != 1:
                raise UnexpectedRowCountError(snapshot.site_id, snapshot.version, inserted)

            outcome.persisted(True)
            logger.debug(
                "Persisted snapshot for site %s at version %d",
                snapshot.site_id,
                snapshot.version,
            )
            return True

    async def dispose(self) -> None:
        """Release the backend's pooled connections, if it owns any."""
        await self._backend.dispose()

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def codec(self) -> Codec:
        return self._codec

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"RelationalSnapshotStore(dialect={self._dialect.name!r}, "
            f"tracing={'enabled' if self._enable_tracing else 'disabled'})"
        )


__all__ = ["RelationalSnapshotStore"]
