"""
Snapshot storage for site state caching.

A snapshot captures a site's materialized state at one version of its
event history. Instead of replaying every event, readers restore the
newest snapshot at or before the version they need and replay only the
events after it.

Key Components:
    Snapshot: Immutable data structure representing captured site state.
    SnapshotStore: Abstract interface (find_latest_snapshot, persist_snapshot).
    RelationalSnapshotStore: SQL storage through a StorageBackend.
    InMemorySnapshotStore: Conditional-put storage for tests and development.

Example:
    Storing and reading snapshots::

        from uuid import uuid4
        from sitesnap.snapshots import InMemorySnapshotStore, Snapshot

        store = InMemorySnapshotStore()
        site_id = uuid4()

        for version in (3, 7, 12):
            await store.persist_snapshot(
                Snapshot(site_id=site_id, version=version, owner=uuid4(), blob={"v": version})
            )

        (await store.find_latest_snapshot(site_id)).version                 # 12
        (await store.find_latest_snapshot(site_id, at_version=10)).version  # 7
        await store.find_latest_snapshot(site_id, at_version=3)             # None

    Racing writers::

        won = await store.persist_snapshot(snapshot)
        if not won:
            # Another writer already holds this version
            ...
"""

from sitesnap.snapshots.in_memory import InMemorySnapshotStore
from sitesnap.snapshots.interface import Snapshot, SnapshotStore
from sitesnap.snapshots.relational import RelationalSnapshotStore

__all__ = [
    # Core types
    "Snapshot",
    "SnapshotStore",
    # Implementations
    "InMemorySnapshotStore",
    "RelationalSnapshotStore",
]
