"""
Snapshot store interface and core data structures.

A snapshot is the materialized state of a site at one version of its
event history. Readers restore from the newest snapshot at or before the
point they care about and replay only the events after it.

This module provides:
- Snapshot: Immutable data structure representing captured site state
- SnapshotStore: Abstract base class for snapshot storage implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any
from uuid import UUID


@dataclass(frozen=True)
class Snapshot:
    """
    Represents a point-in-time capture of a site's state.

    Attributes:
        site_id: Unique identifier of the site (aggregate)
        version: Event-log position this snapshot was taken at.
                 Assigned by the event store; never negative.
        owner: Identifier of the actor or session that produced it.
               Provenance only; not used for access control.
        blob: The site's materialized state. Encoded by the store's codec
              on write and decoded on read; never interpreted here.
        deleted: Tombstone flag. True means the site was deleted as of
                 this version, which is different from having no snapshot.

    Example:
        >>> snapshot = Snapshot(
        ...     site_id=UUID("550e8400-e29b-41d4-a716-446655440000"),
        ...     version=12,
        ...     owner=UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8"),
        ...     blob={"title": "Home", "pages": ["index"]},
        ... )
        >>> print(snapshot)
        Snapshot(550e8400-e29b-41d4-a716-446655440000, v12)
    """

    site_id: UUID
    version: int
    owner: UUID
    blob: Any
    deleted: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.site_id, UUID):
            raise TypeError(f"site_id must be a UUID, got {type(self.site_id).__name__}")
        if not isinstance(self.owner, UUID):
            raise TypeError(f"owner must be a UUID, got {type(self.owner).__name__}")
        if isinstance(self.version, bool) or not isinstance(self.version, int):
            raise TypeError(f"version must be an int, got {type(self.version).__name__}")
        if self.version < 0:
            raise ValueError(f"version must be non-negative, got {self.version}")

    def __str__(self) -> str:
        """Human-readable string representation."""
        suffix = ", deleted" if self.deleted else ""
        return f"Snapshot({self.site_id}, v{self.version}{suffix})"

    def __repr__(self) -> str:
        """Detailed representation for debugging (omits the state itself)."""
        return (
            f"Snapshot("
            f"site_id={self.site_id!r}, "
            f"version={self.version}, "
            f"owner={self.owner!r}, "
            f"deleted={self.deleted}, "
            f"blob_type={type(self.blob).__name__})"
        )


class SnapshotStore(ABC):
    """
    Abstract base class for snapshot storage.

    Design principles:
    - At most one snapshot per (site_id, version), enforced by storage
    - Write once: there is no update or delete operation
    - Missing snapshots are a normal outcome (None), not an error
    - Losing a write race is a normal outcome (False), not an error
    - Safe for concurrent callers; no in-process locking in the store

    See Also:
        - RelationalSnapshotStore: SQL storage through a StorageBackend
        - InMemorySnapshotStore: Conditional-put storage for tests
    """

    @abstractmethod
    async def find_latest_snapshot(
        self,
        site_id: UUID,
        at_version: int | None = None,
    ) -> Snapshot | None:
        """
        Get the newest snapshot of a site, optionally before a version.

        Args:
            site_id: Unique identifier of the site
            at_version: Exclusive upper bound. When given, only snapshots
                        with ``version < at_version`` are considered.

        Returns:
            The snapshot with the greatest qualifying version and its
            state decoded, or None if there is none.

        Raises:
            DeserializationError: If the stored state cannot be decoded
            StorageUnavailableError: If the backend cannot be reached

        Example:
            >>> # Snapshots exist at versions 3, 7 and 12
            >>> (await store.find_latest_snapshot(site_id, at_version=10)).version
            7
            >>> await store.find_latest_snapshot(site_id, at_version=3)
            None
        """
        pass

    @abstractmethod
    async def persist_snapshot(self, snapshot: Snapshot) -> bool:
        """
        Store a snapshot unless one already exists at its version.

        Args:
            snapshot: Fully populated snapshot

        Returns:
            True if this call stored the snapshot. False if another writer
            already stored a snapshot for the same (site_id, version); the
            existing row is left untouched.

        Raises:
            SerializationError: If the state cannot be encoded
            StorageUnavailableError: If the backend cannot be reached
            UnexpectedRowCountError: If the backend reports a row count
                other than 1 without raising

        Example:
            >>> if not await store.persist_snapshot(snapshot):
            ...     logger.info("Version %d already snapshotted", snapshot.version)
        """
        pass

    async def dispose(self) -> None:
        """
        Release resources held by the store.

        The default does nothing. Stores that own a connection pool
        override it; callers of create_snapshot_store should always
        await it on shutdown.
        """
