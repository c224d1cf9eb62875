"""
Observability utilities for sitesnap.

Provides the tracers, the snapshot span factory and the span attribute
names. OpenTelemetry is optional; without it every tracer created
through ``create_tracer`` is a no-op.

Example:
    >>> from sitesnap.observability import SnapshotSpans, create_tracer
    >>>
    >>> spans = SnapshotSpans(create_tracer(__name__), db_system="sqlite")
"""

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
from sitesnap.observability.spans import (
    SPAN_FIND_LATEST,
    SPAN_PERSIST,
    SnapshotSpans,
    SpanOutcome,
)
from sitesnap.observability.tracer import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    RecordedSpan,
    Tracer,
    create_tracer,
)

__all__ = [
    "OTEL_AVAILABLE",
    # Tracers
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "RecordedSpan",
    "create_tracer",
    # Snapshot spans
    "SPAN_FIND_LATEST",
    "SPAN_PERSIST",
    "SnapshotSpans",
    "SpanOutcome",
    # Attributes
    "ATTR_SITE_ID",
    "ATTR_VERSION",
    "ATTR_AT_VERSION",
    "ATTR_DELETED",
    "ATTR_PERSISTED",
    "ATTR_FOUND",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_OPERATION",
]
