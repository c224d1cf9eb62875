"""
Statement dialects for the snapshots table.

A dialect bundles what differs between relational engines: identifier
quoting (``blob`` needs quoting on MySQL), the DDL template and the
default conflict predicate. Porting the store to another engine means
adding a dialect here, nothing else.
"""

from __future__ import annotations

from dataclasses import dataclass

from sitesnap.backends.errors import (
    ConflictPredicate,
    is_mysql_conflict,
    is_postgresql_conflict,
    is_sqlite_conflict,
)
from sitesnap.migrations import BackendName, get_schema


@dataclass(frozen=True)
class SnapshotDialect:
    """
    Statement text and conflict detection for one engine.

    Attributes:
        name: Backend name, matching the schema templates
        quote_char: Character used to quote identifiers
        is_conflict: Predicate recognizing a snapshots primary key violation
        conflict_aborts_transaction: A failed insert poisons the enclosing
            transaction (PostgreSQL), so inserts on a caller-owned
            connection must run under a SAVEPOINT
    """

    name: BackendName
    quote_char: str
    is_conflict: ConflictPredicate
    conflict_aborts_transaction: bool = False

    def quote(self, identifier: str) -> str:
        return f"{self.quote_char}{identifier}{self.quote_char}"

    def select_latest_sql(self, bounded: bool) -> str:
        """
        Query for the newest snapshot of a site.

        Args:
            bounded: Add the exclusive ``version < :at_version`` bound

        Returns:
            SQL with ``:site_id`` (and ``:at_version``) parameters
        """
        sql = (
            f"SELECT version, owner, {self.quote('blob')}, deleted "
            f"FROM snapshots WHERE site_id = :site_id"
        )
        if bounded:
            sql += " AND version < :at_version"
        return sql + " ORDER BY version DESC LIMIT 1"

    @property
    def insert_sql(self) -> str:
        """Single-row insert keyed by ``(site_id, version)``."""
        return (
            f"INSERT INTO snapshots (site_id, version, owner, {self.quote('blob')}, deleted) "
            f"VALUES (:site_id, :version, :owner, :blob, :deleted)"
        )

    def schema(self) -> str:
        """DDL for the snapshots table on this engine."""
        return get_schema(self.name)


POSTGRESQL = SnapshotDialect(
    name="postgresql",
    quote_char='"',
    is_conflict=is_postgresql_conflict,
    conflict_aborts_transaction=True,
)
MYSQL = SnapshotDialect(name="mysql", quote_char="`", is_conflict=is_mysql_conflict)
SQLITE = SnapshotDialect(name="sqlite", quote_char='"', is_conflict=is_sqlite_conflict)

_DIALECTS: dict[str, SnapshotDialect] = {
    "postgresql": POSTGRESQL,
    "mysql": MYSQL,
    "mariadb": MYSQL,
    "sqlite": SQLITE,
}


def get_dialect(name: str) -> SnapshotDialect:
    """
    Resolve a dialect by SQLAlchemy dialect name.

    Raises:
        ValueError: If the engine is not supported
    """
    try:
        return _DIALECTS[name]
    except KeyError:
        raise ValueError(
            f"Unsupported snapshot dialect '{name}'. Supported: {sorted(_DIALECTS)}"
        ) from None


__all__ = [
    "SnapshotDialect",
    "POSTGRESQL",
    "MYSQL",
    "SQLITE",
    "get_dialect",
]
