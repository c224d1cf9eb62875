"""
Snapshot store spans.

Both stores emit the same two spans. ``SnapshotSpans`` builds their
names and attributes in one place and records the outcome of each
operation on the open span.

Example:
    >>> spans = SnapshotSpans(create_tracer(__name__), db_system="postgresql")
    >>> with spans.persist(snapshot) as outcome:
    ...     persisted = await insert(snapshot)
    ...     outcome.persisted(persisted)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sitesnap.observability.attributes import (
    ATTR_AT_VERSION,
    ATTR_DB_OPERATION,
    ATTR_DB_SYSTEM,
    ATTR_DELETED,
    ATTR_FOUND,
    ATTR_PERSISTED,
    ATTR_SITE_ID,
    ATTR_VERSION,
)
from sitesnap.observability.tracer import Tracer

if TYPE_CHECKING:
    from sitesnap.snapshots.interface import Snapshot

SPAN_FIND_LATEST = "sitesnap.snapshot.find_latest"
SPAN_PERSIST = "sitesnap.snapshot.persist"


class SpanOutcome:
    """Records the result of an operation on its span, if there is one."""

    def __init__(self, span: Any) -> None:
        self._span = span

    def found(self, version: int | None) -> None:
        """Record a lookup result; None means nothing matched."""
        if self._span is None:
            return
        self._span.set_attribute(ATTR_FOUND, version is not None)
        if version is not None:
            self._span.set_attribute(ATTR_VERSION, version)

    def persisted(self, persisted: bool) -> None:
        if self._span is not None:
            self._span.set_attribute(ATTR_PERSISTED, persisted)


class SnapshotSpans:
    """
    Span factory for one snapshot store.

    Args:
        tracer: Tracer the spans are opened on
        db_system: Value of ``db.system`` ("postgresql", "sqlite", "memory", ...)
        sql: Add ``db.operation`` (SELECT/INSERT) to every span
    """

    def __init__(self, tracer: Tracer, db_system: str, *, sql: bool = True) -> None:
        self._tracer = tracer
        self._db_system = db_system
        self._sql = sql

    @property
    def tracer(self) -> Tracer:
        return self._tracer

    @property
    def enabled(self) -> bool:
        return self._tracer.enabled

    def _attributes(self, site_id: UUID, operation: str) -> dict[str, Any]:
        attributes: dict[str, Any] = {
            ATTR_SITE_ID: str(site_id),
            ATTR_DB_SYSTEM: self._db_system,
        }
        if self._sql:
            attributes[ATTR_DB_OPERATION] = operation
        return attributes

    @contextmanager
    def find_latest(self, site_id: UUID, at_version: int | None) -> Iterator[SpanOutcome]:
        attributes = self._attributes(site_id, "SELECT")
        if at_version is not None:
            attributes[ATTR_AT_VERSION] = at_version
        with self._tracer.span(SPAN_FIND_LATEST, attributes) as span:
            yield SpanOutcome(span)

    @contextmanager
    def persist(self, snapshot: Snapshot) -> Iterator[SpanOutcome]:
        attributes = self._attributes(snapshot.site_id, "INSERT")
        attributes[ATTR_VERSION] = snapshot.version
        attributes[ATTR_DELETED] = snapshot.deleted
        with self._tracer.span(SPAN_PERSIST, attributes) as span:
            yield SpanOutcome(span)


__all__ = [
    "SPAN_FIND_LATEST",
    "SPAN_PERSIST",
    "SnapshotSpans",
    "SpanOutcome",
]
