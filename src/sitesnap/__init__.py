"""
sitesnap - Point-in-time snapshot storage for event-sourced sites.

This library provides:
- Write-once snapshot persistence keyed by (site_id, version)
- Point-in-time lookup of the newest snapshot before a version
- Relational storage through SQLAlchemy (PostgreSQL, MySQL, SQLite) or aiosqlite
- In-memory storage for tests and development
- Pluggable state codecs (JSON, Pydantic)
- A synchronous adapter and a conformance test suite
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("sitesnap")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

from sitesnap.backends import (
    SQLITE_AVAILABLE,
    SQLAlchemyBackend,
    SQLiteBackend,
    StorageBackend,
    UUIDMarshaling,
    configure_uuid_marshaling,
)
from sitesnap.config import SnapshotStoreConfig, create_snapshot_store
from sitesnap.exceptions import (
    CodecError,
    DeserializationError,
    MarshalingError,
    SerializationError,
    SnapshotStoreError,
    StorageUnavailableError,
    UnexpectedRowCountError,
)
from sitesnap.migrations import get_schema
from sitesnap.observability import OTEL_AVAILABLE
from sitesnap.serialization import Codec, JSONCodec, PydanticCodec
from sitesnap.snapshots import (
    InMemorySnapshotStore,
    RelationalSnapshotStore,
    Snapshot,
    SnapshotStore,
)
from sitesnap.sync import SyncSnapshotStoreAdapter

__all__ = [
    "__version__",
    # Core
    "Snapshot",
    "SnapshotStore",
    "InMemorySnapshotStore",
    "RelationalSnapshotStore",
    # Backends
    "StorageBackend",
    "SQLAlchemyBackend",
    "SQLiteBackend",
    "SQLITE_AVAILABLE",
    "UUIDMarshaling",
    "configure_uuid_marshaling",
    # Codecs
    "Codec",
    "JSONCodec",
    "PydanticCodec",
    # Configuration
    "SnapshotStoreConfig",
    "create_snapshot_store",
    "get_schema",
    # Sync
    "SyncSnapshotStoreAdapter",
    # Exceptions
    "SnapshotStoreError",
    "CodecError",
    "MarshalingError",
    "SerializationError",
    "DeserializationError",
    "StorageUnavailableError",
    "UnexpectedRowCountError",
    # Observability
    "OTEL_AVAILABLE",
]
