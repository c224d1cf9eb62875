"""
Shared pytest fixtures for the sitesnap library tests.

This module provides:
- Sample data fixtures (site_id, owner, snapshot_factory)
- Store fixtures (in_memory_store)
- SQLite fixtures (sqlite_database_path, sqlite_backend, sqlite_snapshot_store)
- Availability flags and skip markers for optional dependencies
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any
from uuid import UUID, uuid4

import pytest
import pytest_asyncio

from sitesnap.snapshots import InMemorySnapshotStore, RelationalSnapshotStore, Snapshot

# ============================================================================
# SQLite Availability Check
# ============================================================================

AIOSQLITE_AVAILABLE = False
try:
    import aiosqlite  # noqa: F401

    AIOSQLITE_AVAILABLE = True
except ImportError:
    pass


# ============================================================================
# OpenTelemetry Availability Check
# ============================================================================

OTEL_SDK_AVAILABLE = False
try:
    from opentelemetry.sdk.trace import TracerProvider  # noqa: F401
    from opentelemetry.sdk.trace.export.in_memory_span_exporter import (  # noqa: F401
        InMemorySpanExporter,
    )

    OTEL_SDK_AVAILABLE = True
except ImportError:
    pass


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for tests."""
    config.addinivalue_line("markers", "sqlite: marks tests that require SQLite (aiosqlite)")


# ============================================================================
# Skip Conditions
# ============================================================================

skip_if_no_aiosqlite = pytest.mark.skipif(not AIOSQLITE_AVAILABLE, reason="aiosqlite not installed")

skip_if_no_otel_sdk = pytest.mark.skipif(
    not OTEL_SDK_AVAILABLE, reason="opentelemetry-sdk not installed"
)


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def site_id() -> UUID:
    """
    Provide a random site ID.

    Returns:
        A new random UUID for use as a site identifier.
    """
    return uuid4()


@pytest.fixture
def owner() -> UUID:
    """
    Provide a random owner ID.

    Returns:
        A new random UUID identifying the writer of a snapshot.
    """
    return uuid4()


@pytest.fixture
def snapshot_factory(site_id: UUID, owner: UUID) -> Callable[..., Snapshot]:
    """
    Provide a factory for snapshots of the ``site_id`` fixture.

    Usage:
        def test_something(snapshot_factory):
            snapshot = snapshot_factory(version=3, blob={"title": "Home"})
    """

    def create(
        version: int = 1,
        blob: Any = None,
        deleted: bool = False,
        **overrides: Any,
    ) -> Snapshot:
        fields: dict[str, Any] = {
            "site_id": site_id,
            "version": version,
            "owner": owner,
            "blob": {"title": "Home", "version": version} if blob is None else blob,
            "deleted": deleted,
        }
        fields.update(overrides)
        return Snapshot(**fields)

    return create


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def in_memory_store() -> InMemorySnapshotStore:
    """
    Provide a fresh in-memory snapshot store with tracing disabled.
    """
    return InMemorySnapshotStore(enable_tracing=False)


# =============================================================================
# SQLite Fixtures
# =============================================================================


@pytest.fixture
def sqlite_database_path(tmp_path: Path) -> str:
    """
    Provide a path to a fresh SQLite database file.

    A file is used rather than ":memory:" because the backend opens a new
    connection per call.
    """
    return str(tmp_path / "snapshots.db")


@pytest_asyncio.fixture
async def sqlite_backend(sqlite_database_path: str) -> AsyncGenerator[Any, None]:
    """
    Provide an SQLiteBackend with the snapshots schema created.

    Skips the test if aiosqlite is not installed.
    """
    if not AIOSQLITE_AVAILABLE:
        pytest.skip("aiosqlite not installed")

    from sitesnap.backends.sqlite import SQLiteBackend

    backend = SQLiteBackend(sqlite_database_path)
    await backend.create_schema()
    yield backend


@pytest.fixture
def sqlite_snapshot_store(sqlite_backend: Any) -> RelationalSnapshotStore:
    """
    Provide a RelationalSnapshotStore over the SQLite backend.
    """
    return RelationalSnapshotStore(sqlite_backend, enable_tracing=False)
