"""
Connection scope for SQLAlchemy backends.

Accepts either an ``AsyncEngine`` (a connection is acquired and released
for each call) or an ``AsyncConnection`` owned by the caller, and turns
transport failures raised inside the scope into ``StorageUnavailableError``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from sitesnap.backends.errors import is_storage_unavailable
from sitesnap.exceptions import StorageUnavailableError


@asynccontextmanager
async def storage_connection(
    conn: AsyncConnection | AsyncEngine,
    operation: str,
    *,
    write: bool = False,
    savepoint: bool = False,
) -> AsyncIterator[AsyncConnection]:
    """
    Yield a connection for one backend operation.

    Args:
        conn: Engine or caller-managed connection
        operation: Name reported in StorageUnavailableError ("query", "insert", ...)
        write: Run inside ``engine.begin()`` so the statement commits on exit.
               Ignored when conn is already a connection.
        savepoint: On a caller-managed connection, run inside
                   ``begin_nested()`` so an error inside the scope rolls
                   back to the SAVEPOINT and leaves the caller's
                   transaction usable. Ignored for engines.

    Raises:
        StorageUnavailableError: For connectivity and pool failures.
            Any other driver error, constraint violations included,
            propagates unchanged.
    """
    try:
        if isinstance(conn, AsyncEngine):
            scope = conn.begin() if write else conn.connect()
            async with scope as connection:
                yield connection
        elif savepoint:
            async with conn.begin_nested():
                yield conn
        else:
            yield conn
    except (sa_exc.SQLAlchemyError, OSError) as e:
        if is_storage_unavailable(e):
            raise StorageUnavailableError(operation, e) from e
        raise
