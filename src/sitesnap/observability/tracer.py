"""
Tracers for the snapshot stores.

A store is handed a tracer at construction time. Three implementations
satisfy the ``Tracer`` protocol:

- ``NullTracer`` when tracing is off or OpenTelemetry is not installed
- ``OpenTelemetryTracer`` over ``opentelemetry.trace``
- ``MockTracer`` which keeps every span, including attributes set after
  the span was opened, for assertions in tests
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

try:
    from opentelemetry import trace

    OTEL_AVAILABLE = True
except ImportError:
    OTEL_AVAILABLE = False
    trace = None  # type: ignore[assignment]


@runtime_checkable
class Tracer(Protocol):
    """Anything that can open a span and say whether spans are real."""

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        """
        Open a span.

        The context manager yields an object with ``set_attribute(key, value)``,
        or None when nothing is recorded.
        """
        ...

    @property
    def enabled(self) -> bool: ...


class NullTracer:
    """Tracer that records nothing."""

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[None]:
        return contextlib.nullcontext()

    @property
    def enabled(self) -> bool:
        return False


class OpenTelemetryTracer:
    """
    Tracer backed by the OpenTelemetry API.

    Args:
        tracer_name: Instrumentation scope, normally the module ``__name__``
        tracer_provider: Provider to use instead of the globally registered one

    Raises:
        ImportError: If opentelemetry-api is not installed
    """

    def __init__(self, tracer_name: str, tracer_provider: Any = None) -> None:
        if not OTEL_AVAILABLE:
            raise ImportError(
                "opentelemetry-api is required for OpenTelemetryTracer. "
                "Install it with: pip install sitesnap[telemetry]"
            )
        self._tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)

    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> AbstractContextManager[Any]:
        return self._tracer.start_as_current_span(name, attributes=attributes or {})

    @property
    def enabled(self) -> bool:
        return True


@dataclass
class RecordedSpan:
    """A span captured by MockTracer."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


class MockTracer:
    """
    Tracer for tests.

    Example:
        >>> tracer = MockTracer()
        >>> store = InMemorySnapshotStore(tracer=tracer)
        >>> await store.persist_snapshot(snapshot)
        >>> tracer.get("sitesnap.snapshot.persist").attributes["sitesnap.snapshot.persisted"]
        True
    """

    def __init__(self) -> None:
        self.spans: list[RecordedSpan] = []

    @contextlib.contextmanager
    def span(
        self,
        name: str,
        attributes: dict[str, Any] | None = None,
    ) -> Iterator[RecordedSpan]:
        recorded = RecordedSpan(name, dict(attributes or {}))
        self.spans.append(recorded)
        yield recorded

    @property
    def enabled(self) -> bool:
        return True

    @property
    def span_names(self) -> list[str]:
        return [span.name for span in self.spans]

    def get(self, name: str) -> RecordedSpan:
        """
        Return the first recorded span with the given name.

        Raises:
            LookupError: If no such span was recorded
        """
        for span in self.spans:
            if span.name == name:
                return span
        raise LookupError(f"No span named {name!r}; recorded: {self.span_names}")

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    """
    Pick the tracer for a store.

    Returns an OpenTelemetryTracer only when tracing is enabled and
    opentelemetry-api is importable.
    """
    if enable_tracing and OTEL_AVAILABLE:
        return OpenTelemetryTracer(name)
    return NullTracer()


__all__ = [
    "OTEL_AVAILABLE",
    "MockTracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "RecordedSpan",
    "Tracer",
    "create_tracer",
]
