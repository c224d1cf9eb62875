"""
Database schema support for the sitesnap library.

This module provides the SQL DDL for the ``snapshots`` table on every
supported relational backend.

Supported backends:
    - postgresql (default)
    - mysql
    - sqlite

Usage:
    from sitesnap.migrations import get_schema, split_statements

    # PostgreSQL (default)
    ddl = get_schema()

    # SQLite
    ddl = get_schema("sqlite")

    # Execute statement by statement (drivers such as asyncpg reject
    # multi-statement prepared queries)
    async with engine.begin() as conn:
        for statement in split_statements(get_schema()):
            await conn.execute(text(statement))

The snapshot backends also expose ``create_schema()``, which does exactly
this for their own dialect.
"""

from pathlib import Path
from typing import Literal, get_args

# Supported database backends
BackendName = Literal["postgresql", "mysql", "sqlite"]

# Paths
_PACKAGE_DIR = Path(__file__).parent
_TEMPLATES_DIR = _PACKAGE_DIR / "templates"


def _get_backend_templates_dir(backend: str) -> Path:
    """
    Get the templates directory for a specific backend.

    PostgreSQL templates live at the top of the templates directory;
    every other backend has its own subdirectory.
    """
    if backend == "postgresql":
        return _TEMPLATES_DIR
    return _TEMPLATES_DIR / backend


def list_backends() -> list[str]:
    """
    List the backends a snapshots schema is available for.

    Returns:
        Backend names, e.g. ["postgresql", "mysql", "sqlite"]
    """
    return list(get_args(BackendName))


def get_template_path(backend: BackendName = "postgresql") -> Path:
    """
    Get the path to the snapshots DDL template for a backend.

    Args:
        backend: The database backend. Defaults to postgresql.

    Returns:
        Path to the SQL template file

    Raises:
        ValueError: If the backend is not supported
        FileNotFoundError: If the template file is missing from the install
    """
    if backend not in list_backends():
        raise ValueError(
            f"Schema is not available for backend '{backend}'. "
            f"Available backends: {list_backends()}"
        )
    path = _get_backend_templates_dir(backend) / "snapshots.sql"
    if not path.exists():
        raise FileNotFoundError(f"Schema template not found: {path}")
    return path


def get_schema(backend: BackendName = "postgresql") -> str:
    """
    Load the snapshots DDL for a backend.

    Args:
        backend: The database backend. One of:
            - "postgresql": BYTEA identifiers, named primary key
              ``snapshots_pkey`` and a descending version index (default)
            - "mysql": BINARY(16) identifiers, descending primary key
            - "sqlite": BLOB identifiers, descending primary key,
              WITHOUT ROWID

    Returns:
        SQL schema definition as a string

    Example:
        >>> from sitesnap.migrations import get_schema
        >>> ddl = get_schema("sqlite")
        >>> "CREATE TABLE IF NOT EXISTS snapshots" in ddl
        True
    """
    return get_template_path(backend).read_text()


def split_statements(sql: str) -> list[str]:
    """
    Split a DDL script into individual statements.

    Full-line ``--`` comments are dropped. The templates shipped with this
    package contain no semicolons inside literals, so a plain split is
    sufficient.

    Args:
        sql: SQL script

    Returns:
        Non-empty statements without their trailing semicolons
    """
    lines = [line for line in sql.splitlines() if not line.lstrip().startswith("--")]
    statements = "\n".join(lines).split(";")
    return [statement.strip() for statement in statements if statement.strip()]


__all__ = [
    "BackendName",
    "get_schema",
    "get_template_path",
    "list_backends",
    "split_statements",
]
