"""
Storage backends for the relational snapshot store.

Key Components:
    StorageBackend: Protocol consumed by RelationalSnapshotStore.
    SnapshotDialect: Statement text and conflict predicate per engine.
    UUIDMarshaling: UUID <-> 16-byte conversion, configured once at startup.

Backend Implementations:
    SQLAlchemyBackend: Any SQLAlchemy AsyncEngine (PostgreSQL, MySQL, SQLite).
    SQLiteBackend: aiosqlite directly (requires aiosqlite).

Error Classification:
    is_postgresql_conflict, is_mysql_conflict, is_sqlite_conflict:
        Recognize a snapshots primary key violation and nothing else.
    is_storage_unavailable:
        Recognize connectivity and transport failures.
"""

from sitesnap.backends.dialects import MYSQL, POSTGRESQL, SQLITE, SnapshotDialect, get_dialect
from sitesnap.backends.errors import (
    SNAPSHOTS_PRIMARY_KEY,
    ConflictPredicate,
    is_mysql_conflict,
    is_postgresql_conflict,
    is_sqlite_conflict,
    is_storage_unavailable,
)
from sitesnap.backends.interface import StorageBackend
from sitesnap.backends.marshaling import (
    UUIDMarshaling,
    configure_uuid_marshaling,
    uuid_from_bytes,
    uuid_to_bytes,
)
from sitesnap.backends.sqlalchemy import SQLAlchemyBackend

# SQLite is optional (requires aiosqlite)
try:
    from sitesnap.backends.sqlite import (
        SQLITE_AVAILABLE,
        SQLiteBackend,
        SQLiteNotAvailableError,
    )
except ImportError:
    SQLITE_AVAILABLE = False
    SQLiteBackend = None  # type: ignore
    SQLiteNotAvailableError = None  # type: ignore

__all__ = [
    # Protocol
    "StorageBackend",
    # Implementations
    "SQLAlchemyBackend",
    "SQLiteBackend",
    "SQLITE_AVAILABLE",
    "SQLiteNotAvailableError",
    # Dialects
    "SnapshotDialect",
    "POSTGRESQL",
    "MYSQL",
    "SQLITE",
    "get_dialect",
    # Marshaling
    "UUIDMarshaling",
    "configure_uuid_marshaling",
    "uuid_from_bytes",
    "uuid_to_bytes",
    # Error classification
    "ConflictPredicate",
    "SNAPSHOTS_PRIMARY_KEY",
    "is_postgresql_conflict",
    "is_mysql_conflict",
    "is_sqlite_conflict",
    "is_storage_unavailable",
]
