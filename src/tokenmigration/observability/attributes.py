"""
Standard span attributes for tokenmigration.

Attribute constants shared by every traced component so spans from the
stores, the bus and the ledger can be correlated. Database and messaging
keys follow OpenTelemetry semantic conventions.

Example:
    >>> with tracer.span(
    ...     "tokenmigration.ledger.commit",
    ...     {ATTR_TRANSACTION_ID: str(tx.transaction_id), ATTR_EVENT_COUNT: 12},
    ... ):
    ...     pass
"""

# =============================================================================
# Contract Attributes
# =============================================================================

ATTR_CONTRACT_ADDRESS = "tokenmigration.contract.address"
"""Address of the contract (hex string)."""

ATTR_CONTRACT_TYPE = "tokenmigration.contract.type"
"""Type name of the contract (e.g., 'SuccessorToken')."""

# =============================================================================
# Event Attributes
# =============================================================================

ATTR_EVENT_ID = "tokenmigration.event.id"
"""Unique identifier for the event (UUID string)."""

ATTR_EVENT_TYPE = "tokenmigration.event.type"
"""Type name of the event (e.g., 'Transfer')."""

ATTR_EVENT_COUNT = "tokenmigration.event.count"
"""Number of events in an operation (integer)."""

ATTR_STREAM_COUNT = "tokenmigration.stream.count"
"""Number of contract streams touched by a commit (integer)."""

# =============================================================================
# Version Attributes
# =============================================================================

ATTR_VERSION = "tokenmigration.version"
"""Current version of a contract stream (integer)."""

ATTR_FROM_VERSION = "tokenmigration.from_version"
"""Starting version for event retrieval (integer)."""

ATTR_POSITION = "tokenmigration.position"
"""Global position in the event store (integer)."""

# =============================================================================
# Transaction Attributes
# =============================================================================

ATTR_TRANSACTION_ID = "tokenmigration.transaction.id"
"""Identifier of a ledger transaction (UUID string)."""

ATTR_ORIGIN = "tokenmigration.transaction.origin"
"""Account that opened the transaction (hex string)."""

ATTR_MIGRATION_STEP = "tokenmigration.migration.step"
"""Name of the migration step being executed."""

# =============================================================================
# Handler Attributes
# =============================================================================

ATTR_HANDLER_NAME = "tokenmigration.handler.name"
"""Name of the event handler (class or function name)."""

ATTR_HANDLER_COUNT = "tokenmigration.handler.count"
"""Number of handlers for an event (integer)."""

ATTR_HANDLER_SUCCESS = "tokenmigration.handler.success"
"""Whether handler execution succeeded (boolean)."""

# =============================================================================
# Database Attributes (OTEL semantic conventions)
# =============================================================================

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier (e.g., 'sqlite')."""

ATTR_DB_NAME = "db.name"
"""Database name or path."""

__all__ = [
    "ATTR_CONTRACT_ADDRESS",
    "ATTR_CONTRACT_TYPE",
    "ATTR_EVENT_ID",
    "ATTR_EVENT_TYPE",
    "ATTR_EVENT_COUNT",
    "ATTR_STREAM_COUNT",
    "ATTR_VERSION",
    "ATTR_FROM_VERSION",
    "ATTR_POSITION",
    "ATTR_TRANSACTION_ID",
    "ATTR_ORIGIN",
    "ATTR_MIGRATION_STEP",
    "ATTR_HANDLER_NAME",
    "ATTR_HANDLER_COUNT",
    "ATTR_HANDLER_SUCCESS",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_NAME",
]
