"""
Event store interface and core data structures.

The event store is the ledger's source of truth. Unlike a per-aggregate
store, it commits whole transactions: a ``CommitBatch`` carries the events
of every contract a transaction touched, and either all of them are
appended or none are.

This module provides:
- EventStream: The events of one contract
- StoredEvent: Wrapper for persisted events with position metadata
- StreamExpectation: Optimistic-concurrency expectation for one contract
- CommitBatch: The unit of atomic persistence
- CommitResult: Result of a commit
- ReadOptions: Configuration for reading the global log
- EventStore: Abstract base class for event store implementations
- EventPublisher: Protocol for publishing committed events
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol
from uuid import UUID

from tokenmigration.events.base import LedgerEvent


@dataclass(frozen=True)
class StoredEvent:
    """
    A persisted event with stream and global position metadata.

    Attributes:
        event: The underlying ledger event
        stream_position: Position within the contract's stream (1-based)
        global_position: Position across all events in the store (1-based)
        stored_at: When the event was persisted
    """

    event: LedgerEvent
    stream_position: int
    global_position: int
    stored_at: datetime

    @property
    def event_type(self) -> str:
        return self.event.event_type

    @property
    def contract_address(self) -> str:
        return self.event.contract_address

    def __str__(self) -> str:
        return (
            f"StoredEvent({self.event_type}, "
            f"stream_pos={self.stream_position}, "
            f"global_pos={self.global_position})"
        )


@dataclass(frozen=True)
class ReadOptions:
    """
    Options for reading the global event log.

    Attributes:
        from_position: Only events with a global position greater than this
        limit: Maximum number of events to retrieve (None for no limit)
        contract_address: Only events of this contract
        transaction_id: Only events committed by this transaction
    """

    from_position: int = 0
    limit: int | None = None
    contract_address: str | None = None
    transaction_id: UUID | None = None

    def __post_init__(self) -> None:
        if self.from_position < 0:
            raise ValueError("from_position must be >= 0")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")


@dataclass(frozen=True)
class EventStream:
    """
    The events of a single contract in stream order.

    Attributes:
        address: Contract address
        contract_type: Type name of the contract (empty if the stream does not exist)
        events: Events in chronological order
        version: Stream version after all events
    """

    address: str
    contract_type: str
    events: list[LedgerEvent] = field(default_factory=list)
    version: int = 0

    @property
    def is_empty(self) -> bool:
        return len(self.events) == 0

    @property
    def latest_event(self) -> LedgerEvent | None:
        return self.events[-1] if self.events else None

    @classmethod
    def empty(cls, address: str) -> "EventStream":
        return cls(address=address, contract_type="", events=[], version=0)


@dataclass(frozen=True)
class StreamExpectation:
    """
    Version a contract stream must have for a commit to apply.

    ``expected_version == 0`` means the stream must not exist yet.
    """

    address: str
    contract_type: str
    expected_version: int

    def __post_init__(self) -> None:
        if self.expected_version < 0:
            raise ValueError("expected_version must be >= 0")


@dataclass(frozen=True)
class CommitBatch:
    """
    All events of one ledger transaction, in the order they were raised.

    Every event's contract must have exactly one expectation, and each
    stream's events must carry consecutive sequences starting right after
    the expected version.
    """

    transaction_id: UUID
    events: tuple[LedgerEvent, ...]
    expectations: tuple[StreamExpectation, ...]

    def __post_init__(self) -> None:
        expected = {e.address: e.expected_version for e in self.expectations}
        if len(expected) != len(self.expectations):
            raise ValueError("Duplicate stream expectation in commit batch")

        next_sequence = {address: version + 1 for address, version in expected.items()}
        for event in self.events:
            if event.contract_address not in next_sequence:
                raise ValueError(
                    f"Event {event.event_id} targets {event.contract_address}, "
                    "which has no stream expectation"
                )
            if event.sequence != next_sequence[event.contract_address]:
                raise ValueError(
                    f"Event {event.event_id} has sequence {event.sequence}, "
                    f"expected {next_sequence[event.contract_address]}"
                )
            next_sequence[event.contract_address] += 1

    @property
    def is_empty(self) -> bool:
        return not self.events

    @property
    def stream_count(self) -> int:
        return len(self.expectations)


@dataclass(frozen=True)
class CommitResult:
    """
    Result of committing a batch.

    Attributes:
        transaction_id: Transaction whose events were committed
        event_count: Number of events appended
        global_position: Global position of the last appended event
        versions: New version of each touched stream
    """

    transaction_id: UUID
    event_count: int
    global_position: int
    versions: dict[str, int] = field(default_factory=dict)


class EventStore(ABC):
    """
    Abstract base class for event stores.

    Implementations must make ``commit`` atomic: after a failed commit the
    store is exactly as it was before the call.
    """

    @abstractmethod
    async def commit(self, batch: CommitBatch) -> CommitResult:
        """
        Atomically append all events of a batch.

        Raises:
            OptimisticLockError: If any stream is not at its expected version
            EventStoreError: If the stream's contract type does not match
        """
        pass

    @abstractmethod
    async def get_events(self, address: str, from_version: int = 0) -> EventStream:
        """Get the events of one contract after ``from_version``."""
        pass

    @abstractmethod
    async def get_stream_version(self, address: str) -> int:
        """Current version of a contract stream (0 if it does not exist)."""
        pass

    @abstractmethod
    async def get_contract_type(self, address: str) -> str | None:
        """Contract type stored at an address, or None if nothing is deployed."""
        pass

    @abstractmethod
    def read_all(self, options: ReadOptions | None = None) -> AsyncIterator[StoredEvent]:
        """Iterate the global log in commit order."""
        ...

    @abstractmethod
    async def get_global_position(self) -> int:
        """Global position of the most recently committed event (0 if empty)."""
        pass

    async def exists(self, address: str) -> bool:
        return await self.get_stream_version(address) > 0


class EventPublisher(Protocol):
    """Protocol for publishing committed events to subscribers."""

    async def publish(self, events: list[LedgerEvent]) -> None: ...


__all__ = [
    "StoredEvent",
    "ReadOptions",
    "EventStream",
    "StreamExpectation",
    "CommitBatch",
    "CommitResult",
    "EventStore",
    "EventPublisher",
]
