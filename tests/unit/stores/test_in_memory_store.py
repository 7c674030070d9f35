"""In-memory store specifics."""

from uuid import uuid4

import pytest

from tokenmigration.events.ledger import NativeCredited
from tokenmigration.observability import MockTracer
from tokenmigration.stores.in_memory import InMemoryEventStore
from tokenmigration.stores.interface import CommitBatch, StreamExpectation
from tokenmigration.types import account_address, derive_contract_address

BOOK = derive_contract_address(account_address("deployer"), 0)


def credit_batch() -> CommitBatch:
    tx = uuid4()
    return CommitBatch(
        transaction_id=tx,
        events=(
            NativeCredited(
                contract_address=BOOK,
                contract_type="AccountBook",
                sequence=1,
                transaction_id=tx,
                account=account_address("alice"),
                amount=1,
            ),
        ),
        expectations=(StreamExpectation(BOOK, "AccountBook", 0),),
    )


class TestInMemoryEventStore:
    @pytest.mark.asyncio
    async def test_clear(self, in_memory_store: InMemoryEventStore) -> None:
        await in_memory_store.commit(credit_batch())
        assert await in_memory_store.get_event_count() == 1

        await in_memory_store.clear()

        assert await in_memory_store.get_event_count() == 0
        assert await in_memory_store.get_contract_type(BOOK) is None

    @pytest.mark.asyncio
    async def test_tracing(self) -> None:
        tracer = MockTracer()
        store = InMemoryEventStore(tracer=tracer)
        await store.commit(credit_batch())
        await store.get_events(BOOK)
        assert tracer.span_names == [
            "tokenmigration.inmemory_store.commit",
            "tokenmigration.inmemory_store.get_events",
        ]

    @pytest.mark.asyncio
    async def test_read_all_is_a_snapshot(self, in_memory_store: InMemoryEventStore) -> None:
        await in_memory_store.commit(credit_batch())
        reader = in_memory_store.read_all()
        first = await reader.__anext__()
        await in_memory_store.clear()
        assert first.global_position == 1
        with pytest.raises(StopAsyncIteration):
            await reader.__anext__()
