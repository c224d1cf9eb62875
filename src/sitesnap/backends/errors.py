"""
Classification of backend errors.

The snapshot write path depends on telling a benign version conflict
(another writer already stored this ``(site_id, version)``) apart from
every other storage failure. A false positive here silently drops a
write, so each predicate matches only the snapshots primary key and
returns False for anything it cannot positively identify.

Predicates walk the exception chain, so they work on raw driver errors
(asyncpg, psycopg, aiomysql, sqlite3) as well as on SQLAlchemy's
``DBAPIError`` wrappers.
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Callable, Iterator

from sqlalchemy import exc as sa_exc

from sitesnap.exceptions import StorageUnavailableError

ConflictPredicate = Callable[[BaseException], bool]
"""Signature of an ``is_conflict(error) -> bool`` predicate."""

SNAPSHOTS_PRIMARY_KEY = "snapshots_pkey"

_PG_UNIQUE_VIOLATION = "23505"
_MYSQL_DUPLICATE_ENTRY = 1062
_MYSQL_PRIMARY_KEY = re.compile(r"for key '(?:snapshots\.)?PRIMARY'")
_SQLITE_PRIMARY_KEY_MESSAGE = "unique constraint failed: snapshots.site_id, snapshots.version"
_SQLITE_CONSTRAINT_NAMES = frozenset({"SQLITE_CONSTRAINT_PRIMARYKEY", "SQLITE_CONSTRAINT_UNIQUE"})
_SQLITE_TRANSIENT_MESSAGES = (
    "database is locked",
    "database table is locked",
    "database is busy",
    "unable to open database file",
    "disk i/o error",
)

_MAX_CHAIN_DEPTH = 8


def _error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield the error, the wrapped DBAPI error and their causes."""
    seen: set[int] = set()
    pending: list[BaseException | None] = [error]
    while pending and len(seen) < _MAX_CHAIN_DEPTH:
        current = pending.pop(0)
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, sa_exc.DBAPIError):
            pending.append(current.orig)
        pending.append(current.__cause__)


def _pg_sqlstate(error: BaseException) -> str | None:
    return getattr(error, "sqlstate", None) or getattr(error, "pgcode", None)


def _pg_constraint_name(error: BaseException) -> str | None:
    diag = getattr(error, "diag", None)
    name = getattr(diag, "constraint_name", None) or getattr(error, "constraint_name", None)
    if name is None and f'"{SNAPSHOTS_PRIMARY_KEY}"' in str(error):
        return SNAPSHOTS_PRIMARY_KEY
    return name


def is_postgresql_conflict(error: BaseException) -> bool:
    """
    True if the error is a unique violation on ``snapshots_pkey``.

    Requires SQLSTATE 23505. The constraint name comes from the driver's
    diagnostics (psycopg ``diag.constraint_name``, asyncpg
    ``constraint_name``) or, failing that, from the server message.
    """
    for candidate in _error_chain(error):
        if _pg_sqlstate(candidate) != _PG_UNIQUE_VIOLATION:
            continue
        if _pg_constraint_name(candidate) == SNAPSHOTS_PRIMARY_KEY:
            return True
    return False


def is_mysql_conflict(error: BaseException) -> bool:
    """True if the error is MySQL error 1062 on the snapshots primary key."""
    for candidate in _error_chain(error):
        args = getattr(candidate, "args", ())
        if len(args) < 2 or args[0] != _MYSQL_DUPLICATE_ENTRY:
            continue
        if _MYSQL_PRIMARY_KEY.search(str(args[1])):
            return True
    return False


def is_sqlite_conflict(error: BaseException) -> bool:
    """
    True if the error is a primary key violation on the snapshots table.

    Uses ``sqlite_errorname`` when the interpreter provides it and always
    checks the constraint message, which names the table and both key
    columns.
    """
    for candidate in _error_chain(error):
        if not isinstance(candidate, sqlite3.IntegrityError):
            continue
        error_name = getattr(candidate, "sqlite_errorname", None)
        if error_name is not None and error_name not in _SQLITE_CONSTRAINT_NAMES:
            continue
        if _SQLITE_PRIMARY_KEY_MESSAGE in str(candidate).lower():
            return True
    return False


def _is_transient_sqlite_error(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return any(fragment in message for fragment in _SQLITE_TRANSIENT_MESSAGES)


def is_storage_unavailable(error: BaseException) -> bool:
    """
    True if the error means the backend could not be reached or used.

    Covers invalidated connections, pool timeouts, driver interface
    errors, operating-system level I/O errors, and locked or unopenable
    SQLite databases. A SQLite ``OperationalError`` such as "no such
    table" is a programming error, not an outage, and is not matched.
    """
    if isinstance(error, StorageUnavailableError):
        return True
    if isinstance(error, (sa_exc.DisconnectionError, sa_exc.TimeoutError)):
        return True
    if isinstance(error, sa_exc.DBAPIError):
        if error.connection_invalidated:
            return True
        if isinstance(error.orig, sqlite3.OperationalError):
            return _is_transient_sqlite_error(error.orig)
        return isinstance(error, (sa_exc.OperationalError, sa_exc.InterfaceError))
    if isinstance(error, sqlite3.OperationalError):
        return _is_transient_sqlite_error(error)
    if isinstance(error, sqlite3.InterfaceError):
        return True
    return isinstance(error, OSError)


__all__ = [
    "ConflictPredicate",
    "SNAPSHOTS_PRIMARY_KEY",
    "is_postgresql_conflict",
    "is_mysql_conflict",
    "is_sqlite_conflict",
    "is_storage_unavailable",
]
