"""
Span factories injected into the ledger, the store, the bus and the
migration service.

Each component takes an optional ``tracer`` and otherwise builds one with
``create_tracer(__name__, enable_tracing)``. The OpenTelemetry API does
nothing until an application installs an SDK, so the default tracer is
safe to leave on.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from opentelemetry import trace
from opentelemetry.trace import Span

SpanAttributes = dict[str, Any]


@runtime_checkable
class Tracer(Protocol):
    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span | None]:
        """Open a span named ``name``; the context value is the span, or None when untraced."""
        ...

    @property
    def enabled(self) -> bool: ...


class NullTracer:
    """Used when ``enable_tracing=False``."""

    enabled = False

    @contextlib.contextmanager
    def span(self, name: str, attributes: SpanAttributes | None = None) -> Iterator[None]:
        yield None


class OpenTelemetryTracer:
    enabled = True

    def __init__(self, tracer_name: str) -> None:
        self._otel = trace.get_tracer(tracer_name)

    def span(
        self,
        name: str,
        attributes: SpanAttributes | None = None,
    ) -> AbstractContextManager[Span | None]:
        return self._otel.start_as_current_span(name, attributes=attributes or {})


class MockTracer:
    """
    Records every span opened through it.

    >>> tracer = MockTracer()
    >>> with tracer.span("tokenmigration.ledger.commit", {"tokenmigration.event.count": 3}):
    ...     pass
    >>> tracer.span_names
    ['tokenmigration.ledger.commit']
    """

    enabled = True

    def __init__(self) -> None:
        self.spans: list[tuple[str, SpanAttributes | None]] = []

    @contextlib.contextmanager
    def span(self, name: str, attributes: SpanAttributes | None = None) -> Iterator[None]:
        self.spans.append((name, attributes))
        yield None

    @property
    def span_names(self) -> list[str]:
        return [name for name, _ in self.spans]

    def attributes_of(self, name: str) -> list[SpanAttributes | None]:
        """Attributes of every span called ``name``, in the order they were opened."""
        return [attributes for span_name, attributes in self.spans if span_name == name]

    def clear(self) -> None:
        self.spans.clear()


def create_tracer(name: str, enable_tracing: bool = True) -> Tracer:
    return OpenTelemetryTracer(name) if enable_tracing else NullTracer()


__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
]
