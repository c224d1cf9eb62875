"""
Library exceptions for the sitesnap package.

Two outcomes of the snapshot store are deliberately *not* exceptions:

- A missing snapshot is returned as ``None`` from ``find_latest_snapshot``.
- A version conflict is returned as ``False`` from ``persist_snapshot``.

Everything below is a genuine failure and is always surfaced to the caller.
"""

from __future__ import annotations

from uuid import UUID


class SnapshotStoreError(Exception):
    """Base exception for the sitesnap library."""

    pass


class CodecError(SnapshotStoreError, ValueError):
    """Raised by a codec when a value cannot be encoded or decoded."""

    pass


class MarshalingError(CodecError):
    """Raised when a stored identifier is not a valid 16-byte UUID."""

    pass


class SerializationError(SnapshotStoreError):
    """
    Raised when a snapshot's state cannot be encoded by the codec.

    Nothing is written to storage when this is raised.

    Attributes:
        site_id: Site whose snapshot failed to encode
        version: Version of the snapshot
        original_error: The underlying codec error
    """

    def __init__(
        self,
        site_id: UUID,
        version: int,
        original_error: Exception | None = None,
    ) -> None:
        self.site_id = site_id
        self.version = version
        self.original_error = original_error

        message = f"Failed to serialize snapshot for site {site_id} at version {version}"
        if original_error:
            message += f": {original_error}"
        self.message = message

        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"SerializationError("
            f"site_id={self.site_id!r}, "
            f"version={self.version}, "
            f"original_error={self.original_error!r})"
        )


class DeserializationError(SnapshotStoreError):
    """
    Raised when a stored snapshot cannot be decoded.

    This means corrupt data or a codec/schema mismatch. It is distinct
    from "no snapshot found", which is reported as ``None``.

    Attributes:
        site_id: Site whose snapshot failed to decode
        at_version: Upper bound used for the lookup, if any
        original_error: The underlying codec error
    """

    def __init__(
        self,
        site_id: UUID,
        at_version: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.site_id = site_id
        self.at_version = at_version
        self.original_error = original_error

        message = f"Failed to deserialize snapshot for site {site_id}"
        if at_version is not None:
            message += f" (before version {at_version})"
        if original_error:
            message += f": {original_error}"
        self.message = message

        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"DeserializationError("
            f"site_id={self.site_id!r}, "
            f"at_version={self.at_version!r}, "
            f"original_error={self.original_error!r})"
        )


class StorageUnavailableError(SnapshotStoreError):
    """
    Raised when the storage backend cannot be reached.

    Covers lost connections, pool exhaustion and locked or unreachable
    database files. No retry is attempted by this library; the retry
    policy belongs to the caller.

    Attributes:
        operation: Backend operation that failed (e.g. "query", "insert")
        original_error: The driver-level error
    """

    def __init__(self, operation: str, original_error: BaseException | None = None) -> None:
        self.operation = operation
        self.original_error = original_error

        message = f"Storage unavailable during {operation}"
        if original_error:
            message += f": {original_error}"
        self.message = message

        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"StorageUnavailableError("
            f"operation={self.operation!r}, "
            f"original_error={self.original_error!r})"
        )


class UnexpectedRowCountError(SnapshotStoreError):
    """
    Raised when an insert completes without error but does not report one row.

    The store cannot tell whether the snapshot was written, so it reports
    neither success nor a version conflict.

    Attributes:
        site_id: Site of the snapshot being written
        version: Version of the snapshot
        rows_affected: Row count reported by the backend
    """

    def __init__(self, site_id: UUID, version: int, rows_affected: int) -> None:
        self.site_id = site_id
        self.version = version
        self.rows_affected = rows_affected
        self.message = (
            f"Insert of snapshot for site {site_id} at version {version} "
            f"reported {rows_affected} rows affected, expected 1"
        )

        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"UnexpectedRowCountError("
            f"site_id={self.site_id!r}, "
            f"version={self.version}, "
            f"rows_affected={self.rows_affected})"
        )


__all__ = [
    "SnapshotStoreError",
    "CodecError",
    "MarshalingError",
    "SerializationError",
    "DeserializationError",
    "StorageUnavailableError",
    "UnexpectedRowCountError",
]
