"""
Standard span attributes for sitesnap.

These constants keep span attributes consistent between the snapshot
store implementations. Database attributes follow the OpenTelemetry
semantic conventions.

Example:
    >>> from sitesnap.observability.attributes import ATTR_SITE_ID, ATTR_VERSION
    >>>
    >>> with tracer.span(
    ...     "sitesnap.snapshot.persist",
    ...     {ATTR_SITE_ID: str(site_id), ATTR_VERSION: 12},
    ... ):
    ...     pass
"""

# =============================================================================
# Snapshot Attributes
# =============================================================================

ATTR_SITE_ID = "sitesnap.site.id"
"""Identifier of the site (aggregate) being snapshotted (UUID string)."""

ATTR_VERSION = "sitesnap.version"
"""Version of the snapshot being written or returned (integer)."""

ATTR_AT_VERSION = "sitesnap.at_version"
"""Exclusive upper bound of a point-in-time lookup (integer)."""

ATTR_DELETED = "sitesnap.snapshot.deleted"
"""Whether the snapshot is a tombstone (boolean)."""

ATTR_PERSISTED = "sitesnap.snapshot.persisted"
"""Whether a write won the race for its version (boolean)."""

ATTR_FOUND = "sitesnap.snapshot.found"
"""Whether a lookup returned a snapshot (boolean)."""

# =============================================================================
# Database Attributes (OpenTelemetry semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier (e.g. 'postgresql', 'sqlite')."""

ATTR_DB_OPERATION = "db.operation"
"""Database operation name (e.g. 'SELECT', 'INSERT')."""


__all__ = [
    "ATTR_SITE_ID",
    "ATTR_VERSION",
    "ATTR_AT_VERSION",
    "ATTR_DELETED",
    "ATTR_PERSISTED",
    "ATTR_FOUND",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
]
