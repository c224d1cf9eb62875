"""
Storage backend capability consumed by the relational snapshot store.

A backend executes parameterized statements against one relational
engine. It owns connection acquisition and UUID marshaling; it knows
nothing about snapshots beyond the schema it can create.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from sitesnap.backends.dialects import SnapshotDialect


@runtime_checkable
class StorageBackend(Protocol):
    """
    Protocol for storage backends.

    Contract:
    - Statements use named ``:param`` placeholders.
    - A connection is acquired and released per call.
    - ``execute_insert`` raises the driver's own error on a constraint
      violation; it never reports one as 0 rows affected.
    - Connectivity and transport failures are raised as
      ``StorageUnavailableError``; every other error propagates unmodified.

    Implementations:
    - SQLAlchemyBackend: Any SQLAlchemy AsyncEngine
    - SQLiteBackend: aiosqlite directly
    """

    @property
    def dialect(self) -> SnapshotDialect:
        """Dialect describing the engine's statements and conflicts."""
        ...

    async def execute_query(self, sql: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Run a parameterized read and return all rows as mappings."""
        ...

    async def execute_insert(self, sql: str, params: Mapping[str, Any]) -> int:
        """Run a parameterized write in its own transaction; return rows affected."""
        ...

    async def create_schema(self) -> None:
        """Create the snapshots table if it does not exist."""
        ...

    async def dispose(self) -> None:
        """Release resources the backend owns (pooled connections)."""
        ...


__all__ = ["StorageBackend"]
