"""
Event store implementations.

- InMemoryEventStore: dictionaries behind an asyncio lock
- SQLiteEventStore: aiosqlite, one database transaction per commit
"""

from tokenmigration.stores.in_memory import InMemoryEventStore
from tokenmigration.stores.interface import (
    CommitBatch,
    CommitResult,
    EventPublisher,
    EventStore,
    EventStream,
    ReadOptions,
    StoredEvent,
    StreamExpectation,
)
from tokenmigration.stores.sqlite import SQLiteEventStore

__all__ = [
    "CommitBatch",
    "CommitResult",
    "EventPublisher",
    "EventStore",
    "EventStream",
    "InMemoryEventStore",
    "ReadOptions",
    "SQLiteEventStore",
    "StoredEvent",
    "StreamExpectation",
]
