"""
In-memory event store implementation.

Useful for testing, simulations and development. All events are lost
when the process terminates.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from datetime import UTC, datetime

from tokenmigration.events.base import LedgerEvent
from tokenmigration.exceptions import EventStoreError, OptimisticLockError
from tokenmigration.observability import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_EVENT_COUNT,
    ATTR_FROM_VERSION,
    ATTR_POSITION,
    ATTR_STREAM_COUNT,
    ATTR_TRANSACTION_ID,
    Tracer,
    create_tracer,
)
from tokenmigration.stores.interface import (
    CommitBatch,
    CommitResult,
    EventStore,
    EventStream,
    ReadOptions,
    StoredEvent,
)

logger = logging.getLogger(__name__)


class InMemoryEventStore(EventStore):
    """
    In-memory implementation of the event store.

    A commit validates every stream expectation before it writes anything,
    under a single lock, so a rejected batch leaves no trace.

    Example:
        >>> store = InMemoryEventStore()
        >>> result = await store.commit(batch)
        >>> assert result.event_count == len(batch.events)

    Attributes:
        _streams: Events per contract address
        _contract_types: Contract type per address
        _global_events: All stored events in commit order
    """

    def __init__(
        self,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._streams: dict[str, list[LedgerEvent]] = defaultdict(list)
        self._contract_types: dict[str, str] = {}
        self._global_events: list[StoredEvent] = []
        self._lock = asyncio.Lock()

    async def commit(self, batch: CommitBatch) -> CommitResult:
        """
        Atomically append all events of a batch.

        Raises:
            OptimisticLockError: If any stream is not at its expected version
            EventStoreError: If an existing stream holds a different contract type
        """
        if batch.is_empty:
            return CommitResult(
                transaction_id=batch.transaction_id,
                event_count=0,
                global_position=len(self._global_events),
            )

        with self._tracer.span(
            "tokenmigration.inmemory_store.commit",
            {
                ATTR_TRANSACTION_ID: str(batch.transaction_id),
                ATTR_EVENT_COUNT: len(batch.events),
                ATTR_STREAM_COUNT: batch.stream_count,
            },
        ):
            async with self._lock:
                return self._do_commit(batch)

    def _do_commit(self, batch: CommitBatch) -> CommitResult:
        # Validate everything first; nothing below this loop can fail
        for expectation in batch.expectations:
            current_version = len(self._streams.get(expectation.address, []))
            if current_version != expectation.expected_version:
                raise OptimisticLockError(
                    expectation.address, expectation.expected_version, current_version
                )
            stored_type = self._contract_types.get(expectation.address)
            if stored_type is not None and stored_type != expectation.contract_type:
                raise EventStoreError(
                    f"Stream {expectation.address} holds {stored_type}, "
                    f"not {expectation.contract_type}"
                )

        now = datetime.now(UTC)
        for expectation in batch.expectations:
            self._contract_types.setdefault(expectation.address, expectation.contract_type)
        for event in batch.events:
            stream = self._streams[event.contract_address]
            stream.append(event)
            self._global_events.append(
                StoredEvent(
                    event=event,
                    stream_position=len(stream),
                    global_position=len(self._global_events) + 1,
                    stored_at=now,
                )
            )

        logger.debug(
            "Committed %d events across %d streams for transaction %s",
            len(batch.events),
            batch.stream_count,
            batch.transaction_id,
        )
        return CommitResult(
            transaction_id=batch.transaction_id,
            event_count=len(batch.events),
            global_position=len(self._global_events),
            versions={e.address: len(self._streams[e.address]) for e in batch.expectations},
        )

    async def get_events(self, address: str, from_version: int = 0) -> EventStream:
        with self._tracer.span(
            "tokenmigration.inmemory_store.get_events",
            {ATTR_CONTRACT_ADDRESS: address, ATTR_FROM_VERSION: from_version},
        ):
            async with self._lock:
                events = list(self._streams.get(address, []))
                return EventStream(
                    address=address,
                    contract_type=self._contract_types.get(address, ""),
                    events=events[from_version:],
                    version=len(events),
                )

    async def get_stream_version(self, address: str) -> int:
        async with self._lock:
            return len(self._streams.get(address, []))

    async def get_contract_type(self, address: str) -> str | None:
        async with self._lock:
            return self._contract_types.get(address)

    async def read_all(self, options: ReadOptions | None = None) -> AsyncIterator[StoredEvent]:
        """
        Iterate the global log in commit order.

        Takes a snapshot under the lock, then yields without holding it.
        """
        options = options or ReadOptions()
        with self._tracer.span(
            "tokenmigration.inmemory_store.read_all",
            {ATTR_POSITION: options.from_position},
        ):
            async with self._lock:
                snapshot = list(self._global_events[options.from_position :])

        yielded = 0
        for stored in snapshot:
            if options.limit is not None and yielded >= options.limit:
                return
            if (
                options.contract_address is not None
                and stored.contract_address != options.contract_address
            ):
                continue
            if (
                options.transaction_id is not None
                and stored.event.transaction_id != options.transaction_id
            ):
                continue
            yielded += 1
            yield stored

    async def get_global_position(self) -> int:
        async with self._lock:
            return len(self._global_events)

    async def get_event_count(self) -> int:
        return await self.get_global_position()

    async def clear(self) -> None:
        """Remove all events. Intended for tests."""
        async with self._lock:
            self._streams.clear()
            self._contract_types.clear()
            self._global_events.clear()
