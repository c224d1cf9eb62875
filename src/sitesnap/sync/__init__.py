"""
Synchronous adapters for blocking callers.

Example:
    >>> from sitesnap.sync import SyncSnapshotStoreAdapter
    >>> sync_store = SyncSnapshotStoreAdapter(store)
    >>> latest = sync_store.find_latest_snapshot_sync(site_id)
"""

from sitesnap.sync.adapter import SyncSnapshotStoreAdapter

__all__ = ["SyncSnapshotStoreAdapter"]
