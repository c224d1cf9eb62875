"""
In-memory snapshot store implementation.

Stores encoded snapshots in a dictionary and uses a conditional put
(insert only if the key is absent) in place of a uniqueness constraint.
All data is lost when the process ends.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from uuid import UUID

from sitesnap.exceptions import CodecError, DeserializationError, SerializationError
from sitesnap.observability import SnapshotSpans, Tracer, create_tracer
from sitesnap.serialization import Codec, JSONCodec
from sitesnap.snapshots.interface import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _StoredSnapshot:
    owner: UUID
    blob: bytes
    deleted: bool


class InMemorySnapshotStore(SnapshotStore):
    """
    In-memory implementation of SnapshotStore for testing and development.

    Snapshots are kept encoded, exactly as a database would hold them, so
    codec failures surface the same way they do with a real backend and a
    caller mutating a returned state cannot change what is stored.

    Features:
    - Conditional put keyed by (site_id, version)
    - Same codec and tracing hooks as RelationalSnapshotStore
    - clear() method for test cleanup

    Limitations:
    - Data is not persisted (lost on process restart)
    - Single-process only (no shared state)

    Example:
        >>> store = InMemorySnapshotStore()
        >>> await store.persist_snapshot(snapshot)
        True
        >>> await store.persist_snapshot(snapshot)
        False
    """

    def __init__(
        self,
        *,
        codec: Codec | None = None,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        """
        Initialize the in-memory snapshot store.

        Args:
            codec: Codec for the snapshot state (default JSONCodec)
            tracer: Optional custom Tracer instance. If not provided, one is
                   created based on enable_tracing setting.
            enable_tracing: Whether to enable OpenTelemetry tracing (default True).
                          Ignored if tracer is explicitly provided.
        """
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._enable_tracing = self._tracer.enabled
        self._spans = SnapshotSpans(self._tracer, "memory", sql=False)
        self._codec: Codec = codec or JSONCodec()
        self._snapshots: dict[tuple[UUID, int], _StoredSnapshot] = {}
        # Callers may reach the store from several threads (sync adapter)
        self._lock = threading.Lock()
        logger.debug("InMemorySnapshotStore initialized")

    async def find_latest_snapshot(
        self,
        site_id: UUID,
        at_version: int | None = None,
    ) -> Snapshot | None:
        with self._spans.find_latest(site_id, at_version) as outcome:
            with self._lock:
                versions = [
                    version
                    for (stored_site_id, version) in self._snapshots
                    if stored_site_id == site_id and (at_version is None or version < at_version)
                ]
                if not versions:
                    stored = None
                else:
                    version = max(versions)
                    stored = self._snapshots[(site_id, version)]

            if stored is None:
                outcome.found(None)
                logger.debug("No snapshot found for site %s", site_id)
                return None

            try:
                state = self._codec.decode(stored.blob)
            except CodecError as e:
                raise DeserializationError(site_id, at_version, e) from e

            outcome.found(version)
            logger.debug("Retrieved snapshot for site %s at v%d", site_id, version)
            return Snapshot(
                site_id=site_id,
                version=version,
                owner=stored.owner,
                blob=state,
                deleted=stored.deleted,
            )

    async def persist_snapshot(self, snapshot: Snapshot) -> bool:
        with self._spans.persist(snapshot) as outcome:
            try:
                blob = self._codec.encode(snapshot.blob)
            except CodecError as e:
                raise SerializationError(snapshot.site_id, snapshot.version, e) from e

            key = (snapshot.site_id, snapshot.version)
            with self._lock:
                persisted = key not in self._snapshots
                if persisted:
                    self._snapshots[key] = _StoredSnapshot(
                        owner=snapshot.owner,
                        blob=blob,
                        deleted=snapshot.deleted,
                    )

            outcome.persisted(persisted)
            if persisted:
                logger.debug(
                    "Created snapshot for site %s at v%d",
                    snapshot.site_id,
                    snapshot.version,
                )
            else:
                logger.info(
                    "Snapshot for site %s at v%d already exists",
                    snapshot.site_id,
                    snapshot.version,
                )
            return persisted

    async def clear(self) -> None:
        """
        Clear all snapshots from the store.

        Useful for test cleanup between test cases.
        """
        with self._lock:
            count = len(self._snapshots)
            self._snapshots.clear()
        logger.debug("Cleared %d snapshots from InMemorySnapshotStore", count)

    @property
    def snapshot_count(self) -> int:
        """Number of snapshots currently stored, across all sites."""
        return len(self._snapshots)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"InMemorySnapshotStore(snapshots={len(self._snapshots)})"


__all__ = ["InMemorySnapshotStore"]
