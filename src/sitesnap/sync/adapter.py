"""
Synchronous adapter for async SnapshotStore implementations.

This module provides SyncSnapshotStoreAdapter, which wraps any async
SnapshotStore and exposes blocking versions of its operations.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar
from uuid import UUID

from sitesnap.snapshots.interface import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncSnapshotStoreAdapter:
    """
    Synchronous adapter for async SnapshotStore implementations.

    For use in synchronous contexts like Celery tasks, Django management
    commands or RQ workers.

    Handles two event loop scenarios:
    1. No running event loop -> uses asyncio.run()
    2. Event loop running in this thread -> runs the call on a worker
       thread with its own event loop, so the caller's loop is never
       blocked on itself

    Example:
        >>> from sitesnap.snapshots import RelationalSnapshotStore
        >>> from sitesnap.sync import SyncSnapshotStoreAdapter
        >>>
        >>> sync_store = SyncSnapshotStoreAdapter(store, timeout=30.0)
        >>>
        >>> @celery.task
        >>> def snapshot_site(site_id: str, version: int, state: dict) -> bool:
        ...     return sync_store.persist_snapshot_sync(
        ...         Snapshot(site_id=UUID(site_id), version=version, owner=WORKER_ID, blob=state)
        ...     )

    Warning:
        Calling this adapter from inside a running event loop logs a
        warning. Await the async store directly in async code.
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the sync adapter.

        Args:
            snapshot_store: The async SnapshotStore to wrap
            timeout: Default timeout in seconds for all operations (default: 30.0)

        Raises:
            TypeError: If snapshot_store is not a SnapshotStore
        """
        if not isinstance(snapshot_store, SnapshotStore):
            raise TypeError(
                f"snapshot_store must be a SnapshotStore instance, "
                f"got {type(snapshot_store).__name__}"
            )
        self._store = snapshot_store
        self._timeout = timeout

    def _run_sync(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """
        Execute coroutine synchronously, handling both event loop scenarios.

        Raises:
            TimeoutError: If operation exceeds timeout
            Exception: Any exception raised by the coroutine
        """
        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop - the common case for sync contexts
            try:
                return asyncio.run(asyncio.wait_for(coro, timeout=effective_timeout))
            except TimeoutError as e:
                raise TimeoutError(f"Sync operation timed out after {effective_timeout}s") from e

        logger.warning(
            "SyncSnapshotStoreAdapter called from running event loop. "
            "Consider awaiting the SnapshotStore directly."
        )
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="sitesnap_sync") as executor:
            future = executor.submit(
                asyncio.run, asyncio.wait_for(coro, timeout=effective_timeout)
            )
            try:
                return future.result()
            except TimeoutError as e:
                raise TimeoutError(
                    f"Sync operation timed out after {effective_timeout}s "
                    "(called from running event loop)"
                ) from e

    def find_latest_snapshot_sync(
        self,
        site_id: UUID,
        at_version: int | None = None,
        *,
        timeout: float | None = None,
    ) -> Snapshot | None:
        """
        Synchronously get the newest snapshot of a site.

        Args:
            site_id: Unique identifier of the site
            at_version: Exclusive upper bound on the snapshot version
            timeout: Override default timeout for this operation

        Returns:
            The matching snapshot, or None

        Raises:
            DeserializationError: If the stored state cannot be decoded
            StorageUnavailableError: If the backend cannot be reached
            TimeoutError: If operation exceeds timeout
        """
        return self._run_sync(
            self._store.find_latest_snapshot(site_id, at_version),
            timeout=timeout,
        )

    def persist_snapshot_sync(
        self,
        snapshot: Snapshot,
        *,
        timeout: float | None = None,
    ) -> bool:
        """
        Synchronously store a snapshot unless its version is taken.

        Args:
            snapshot: Fully populated snapshot
            timeout: Override default timeout for this operation

        Returns:
            True if stored, False on a version conflict

        Raises:
            SerializationError: If the state cannot be encoded
            StorageUnavailableError: If the backend cannot be reached
            TimeoutError: If operation exceeds timeout
        """
        return self._run_sync(
            self._store.persist_snapshot(snapshot),
            timeout=timeout,
        )

    @property
    def wrapped_store(self) -> SnapshotStore:
        """The underlying async SnapshotStore."""
        return self._store

    @property
    def timeout(self) -> float:
        """Default timeout in seconds."""
        return self._timeout

    def __repr__(self) -> str:
        return (
            f"SyncSnapshotStoreAdapter("
            f"store={type(self._store).__name__}, "
            f"timeout={self._timeout})"
        )
