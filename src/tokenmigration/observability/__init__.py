"""
Observability utilities for tokenmigration.

Composition-based tracing plus the standard attribute names used by every
traced component.

Example:
    >>> from tokenmigration.observability import create_tracer, ATTR_CONTRACT_ADDRESS
    >>> tracer = create_tracer(__name__, enable_tracing=True)
    >>> with tracer.span("tokenmigration.ledger.load", {ATTR_CONTRACT_ADDRESS: address}):
    ...     pass
"""

from tokenmigration.observability.attributes import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_CONTRACT_TYPE,
    ATTR_DB_NAME,
    ATTR_DB_SYSTEM,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_ID,
    ATTR_EVENT_TYPE,
    ATTR_FROM_VERSION,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
    ATTR_MIGRATION_STEP,
    ATTR_ORIGIN,
    ATTR_POSITION,
    ATTR_STREAM_COUNT,
    ATTR_TRANSACTION_ID,
    ATTR_VERSION,
)
from tokenmigration.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)

__all__ = [
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    "ATTR_CONTRACT_ADDRESS",
    "ATTR_CONTRACT_TYPE",
    "ATTR_DB_NAME",
    "ATTR_DB_SYSTEM",
    "ATTR_EVENT_COUNT",
    "ATTR_EVENT_ID",
    "ATTR_EVENT_TYPE",
    "ATTR_FROM_VERSION",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_SUCCESS",
    "ATTR_MIGRATION_STEP",
    "ATTR_ORIGIN",
    "ATTR_POSITION",
    "ATTR_STREAM_COUNT",
    "ATTR_TRANSACTION_ID",
    "ATTR_VERSION",
]
