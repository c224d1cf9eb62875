"""
UUID marshaling between Python and 16-byte binary columns.

Site and owner identifiers are stored as fixed 16-byte binary values on
every backend. A ``UUIDMarshaling`` is built once at startup (see
``configure_uuid_marshaling``) and handed to a backend, which applies it
to statement parameters on the way in and to result rows on the way out.
There is no process-wide registration.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sitesnap.exceptions import MarshalingError

DEFAULT_UUID_COLUMNS = frozenset({"site_id", "owner"})


def uuid_to_bytes(value: UUID) -> bytes:
    """Encode a UUID as its 16-byte big-endian representation."""
    if not isinstance(value, UUID):
        raise TypeError(f"Expected UUID, got {type(value).__name__}")
    return value.bytes


def uuid_from_bytes(value: Any) -> UUID:
    """
    Decode a stored identifier.

    Accepts ``bytes``/``bytearray``/``memoryview`` of exactly 16 bytes.
    A ``UUID`` is passed through unchanged, for drivers that already map
    the column type.

    Raises:
        MarshalingError: If the value is not a 16-byte binary identifier
    """
    if isinstance(value, UUID):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) == 16:
            return UUID(bytes=raw)
        raise MarshalingError(f"Stored identifier has {len(raw)} bytes, expected 16")
    raise MarshalingError(f"Stored identifier has unsupported type {type(value).__name__}")


@dataclass(frozen=True)
class UUIDMarshaling:
    """
    Marshaling rules for UUID columns.

    Attributes:
        columns: Names of parameters and result columns holding UUIDs

    Example:
        >>> marshaling = configure_uuid_marshaling()
        >>> marshaling.bind({"site_id": site_id, "version": 3})
        {'site_id': b'...', 'version': 3}
    """

    columns: frozenset[str] = DEFAULT_UUID_COLUMNS

    def bind(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Convert UUID parameters to 16-byte values."""
        return {
            name: uuid_to_bytes(value) if name in self.columns else value
            for name, value in params.items()
        }

    def load(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """
        Convert UUID result columns from their stored form.

        Raises:
            MarshalingError: If a stored identifier is malformed
        """
        return {
            name: uuid_from_bytes(value) if name in self.columns else value
            for name, value in row.items()
        }


def configure_uuid_marshaling(columns: Iterable[str] | None = None) -> UUIDMarshaling:
    """
    Build the UUID marshaling for a backend.

    Call once while bootstrapping and pass the result to the backend
    constructor.

    Args:
        columns: UUID column names. Defaults to ``site_id`` and ``owner``.

    Returns:
        Immutable marshaling configuration
    """
    if columns is None:
        return UUIDMarshaling()
    return UUIDMarshaling(columns=frozenset(columns))


__all__ = [
    "DEFAULT_UUID_COLUMNS",
    "UUIDMarshaling",
    "configure_uuid_marshaling",
    "uuid_from_bytes",
    "uuid_to_bytes",
]
