"""
Unit tests for RelationalSnapshotStore.

These tests use a mocked StorageBackend to verify the store's statement
selection, row mapping and error classification without a database.
Real-database behaviour is covered by the backend tests.
"""

from __future__ import annotations

import json
import sqlite3
from unittest.mock import AsyncMock, MagicMock

import pytest

from sitesnap.backends import MYSQL, POSTGRESQL, SQLITE, StorageBackend
from sitesnap.exceptions import (
    DeserializationError,
    MarshalingError,
    SerializationError,
    StorageUnavailableError,
    UnexpectedRowCountError,
)
from sitesnap.snapshots import RelationalSnapshotStore, Snapshot

# ============================================================================
# Fixtures
# ============================================================================


class FakeIntegrityError(Exception):
    """Stands in for a driver's unique violation."""


def make_backend(dialect=POSTGRESQL, rows=None, rowcount=1) -> MagicMock:
    """Create a mocked backend returning the given rows."""
    backend = MagicMock(spec=StorageBackend)
    backend.dialect = dialect
    backend.execute_query = AsyncMock(return_value=rows or [])
    backend.execute_insert = AsyncMock(return_value=rowcount)
    backend.create_schema = AsyncMock()
    backend.dispose = AsyncMock()
    return backend


def stored_row(version: int, owner, state, deleted: bool = False) -> dict:
    """Create a row as a backend returns it (owner still binary)."""
    return {
        "version": version,
        "owner": owner.bytes,
        "blob": json.dumps(state).encode("utf-8"),
        "deleted": int(deleted),
    }


# ============================================================================
# find_latest_snapshot
# ============================================================================


class TestFindLatestSnapshot:
    """Tests for the read path."""

    async def test_unbounded_query(self, site_id):
        """Test that no bound means no version predicate."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        await store.find_latest_snapshot(site_id)

        sql, params = backend.execute_query.call_args.args
        assert sql == POSTGRESQL.select_latest_sql(bounded=False)
        assert "at_version" not in sql
        assert params == {"site_id": site_id}

    async def test_bounded_query_is_strict(self, site_id):
        """Test that the bound is passed as an exclusive predicate."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        await store.find_latest_snapshot(site_id, at_version=10)

        sql, params = backend.execute_query.call_args.args
        assert "version < :at_version" in sql
        assert "ORDER BY version DESC LIMIT 1" in sql
        assert params == {"site_id": site_id, "at_version": 10}

    async def test_bound_zero_is_still_bounded(self, site_id):
        """Test that at_version=0 is treated as a bound, not as absent."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        await store.find_latest_snapshot(site_id, at_version=0)

        sql, params = backend.execute_query.call_args.args
        assert "version < :at_version" in sql
        assert params["at_version"] == 0

    async def test_no_rows_returns_none(self, site_id):
        """Test that absence is reported as None."""
        store = RelationalSnapshotStore(make_backend(rows=[]), enable_tracing=False)

        assert await store.find_latest_snapshot(site_id) is None

    async def test_row_mapping(self, site_id, owner):
        """Test that a row is mapped to a fully populated snapshot."""
        backend = make_backend(rows=[stored_row(7, owner, {"title": "Home"}, deleted=True)])
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        snapshot = await store.find_latest_snapshot(site_id)

        assert snapshot == Snapshot(
            site_id=site_id,
            version=7,
            owner=owner,
            blob={"title": "Home"},
            deleted=True,
        )

    async def test_owner_already_loaded_by_backend(self, site_id, owner):
        """Test that a backend which already returns UUIDs is accepted."""
        row = stored_row(2, owner, {})
        row["owner"] = owner
        store = RelationalSnapshotStore(make_backend(rows=[row]), enable_tracing=False)

        snapshot = await store.find_latest_snapshot(site_id)

        assert snapshot.owner == owner

    async def test_corrupt_blob_raises_deserialization_error(self, site_id, owner):
        """Test that undecodable state is an error, not a miss."""
        row = stored_row(3, owner, {})
        row["blob"] = b"\xff{not json"
        store = RelationalSnapshotStore(make_backend(rows=[row]), enable_tracing=False)

        with pytest.raises(DeserializationError) as exc_info:
            await store.find_latest_snapshot(site_id, at_version=5)

        assert exc_info.value.site_id == site_id
        assert exc_info.value.at_version == 5
        assert exc_info.value.original_error is not None

    async def test_malformed_owner_raises_deserialization_error(self, site_id, owner):
        """Test that a stored owner of the wrong length is an error."""
        row = stored_row(3, owner, {})
        row["owner"] = b"\x00" * 15
        store = RelationalSnapshotStore(make_backend(rows=[row]), enable_tracing=False)

        with pytest.raises(DeserializationError) as exc_info:
            await store.find_latest_snapshot(site_id)

        assert isinstance(exc_info.value.original_error, MarshalingError)

    async def test_marshaling_error_from_backend(self, site_id):
        """Test that a backend-side marshaling failure is a DeserializationError."""
        backend = make_backend()
        backend.execute_query.side_effect = MarshalingError("bad identifier")
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        with pytest.raises(DeserializationError):
            await store.find_latest_snapshot(site_id)

    async def test_storage_unavailable_propagates(self, site_id):
        """Test that connectivity failures are not turned into None."""
        backend = make_backend()
        backend.execute_query.side_effect = StorageUnavailableError("query", OSError("down"))
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        with pytest.raises(StorageUnavailableError):
            await store.find_latest_snapshot(site_id)


# ============================================================================
# persist_snapshot
# ============================================================================


class TestPersistSnapshot:
    """Tests for the write path."""

    async def test_insert_statement_and_params(self, snapshot_factory):
        """Test that one row is inserted with the encoded state."""
        backend = make_backend(dialect=MYSQL)
        store = RelationalSnapshotStore(backend, enable_tracing=False)
        snapshot = snapshot_factory(version=4, blob={"pages": ["index"]}, deleted=True)

        assert await store.persist_snapshot(snapshot) is True

        sql, params = backend.execute_insert.call_args.args
        assert sql == MYSQL.insert_sql
        assert "`blob`" in sql
        assert params == {
            "site_id": snapshot.site_id,
            "version": 4,
            "owner": snapshot.owner,
            "blob": b'{"pages":["index"]}',
            "deleted": True,
        }

    async def test_no_read_before_write(self, snapshot_factory):
        """Test that persisting never queries first."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        await store.persist_snapshot(snapshot_factory(version=1))

        backend.execute_query.assert_not_awaited()

    async def test_conflict_returns_false(self, snapshot_factory):
        """Test that an error the predicate recognizes is reported as False."""
        backend = make_backend()
        backend.execute_insert.side_effect = FakeIntegrityError("duplicate")
        store = RelationalSnapshotStore(
            backend,
            is_conflict=lambda e: isinstance(e, FakeIntegrityError),
            enable_tracing=False,
        )

        assert await store.persist_snapshot(snapshot_factory(version=1)) is False

    async def test_unrelated_error_propagates(self, snapshot_factory):
        """Test that errors the predicate does not recognize are raised."""
        backend = make_backend()
        backend.execute_insert.side_effect = RuntimeError("no such table: snapshots")
        store = RelationalSnapshotStore(
            backend,
            is_conflict=lambda e: isinstance(e, FakeIntegrityError),
            enable_tracing=False,
        )

        with pytest.raises(RuntimeError, match="no such table"):
            await store.persist_snapshot(snapshot_factory(version=1))

    async def test_storage_unavailable_is_never_false(self, snapshot_factory):
        """Test that a lost connection is not mistaken for a lost race."""
        backend = make_backend()
        backend.execute_insert.side_effect = StorageUnavailableError("insert", OSError("reset"))
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        with pytest.raises(StorageUnavailableError):
            await store.persist_snapshot(snapshot_factory(version=1))

    async def test_default_predicate_comes_from_dialect(self, snapshot_factory):
        """Test that the dialect's predicate is used when none is given."""
        backend = make_backend(dialect=SQLITE)
        backend.execute_insert.side_effect = sqlite3.IntegrityError(
            "UNIQUE constraint failed: snapshots.site_id, snapshots.version"
        )
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        assert await store.persist_snapshot(snapshot_factory(version=1)) is False

    async def test_unencodable_state_raises_before_insert(self, snapshot_factory):
        """Test that codec failures abort before touching storage."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)
        snapshot = snapshot_factory(version=6, blob={"when": float("nan")})

        with pytest.raises(SerializationError) as exc_info:
            await store.persist_snapshot(snapshot)

        assert exc_info.value.version == 6
        backend.execute_insert.assert_not_awaited()

    @pytest.mark.parametrize("rowcount", [0, -1, 2])
    async def test_unexpected_rowcount_raises(self, snapshot_factory, rowcount):
        """Test that a row count other than 1 is never reported as a conflict."""
        store = RelationalSnapshotStore(make_backend(rowcount=rowcount), enable_tracing=False)
        snapshot = snapshot_factory(version=1)

        with pytest.raises(UnexpectedRowCountError) as exc_info:
            await store.persist_snapshot(snapshot)

        assert exc_info.value.site_id == snapshot.site_id
        assert exc_info.value.version == 1
        assert exc_info.value.rows_affected == rowcount


class TestRelationalSnapshotStoreProperties:
    """Tests for accessors and representation."""

    async def test_dispose_delegates_to_backend(self):
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        await store.dispose()

        backend.dispose.assert_awaited_once_with()

    def test_properties(self):
        """Test that the backend and codec are exposed."""
        backend = make_backend()
        store = RelationalSnapshotStore(backend, enable_tracing=False)

        assert store.backend is backend
        assert repr(store.codec) == "JSONCodec()"

    def test_repr(self):
        """Test the debug representation."""
        store = RelationalSnapshotStore(make_backend(dialect=SQLITE), enable_tracing=False)

        assert repr(store) == "RelationalSnapshotStore(dialect='sqlite', tracing=disabled)"

