"""
Shared pytest fixtures for the tokenmigration tests.

- Stores: in_memory_store, sqlite_store
- Ledgers: ledger (bare in-memory ledger), harness (ledger with the pool
  factory, router and legacy token already deployed)
- Accounts: alice, bob
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from tokenmigration.bus.memory import InMemoryEventBus
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.stores.in_memory import InMemoryEventStore
from tokenmigration.stores.sqlite import SQLiteEventStore
from tokenmigration.testing import LedgerHarness, SteppingClock
from tokenmigration.types import Address, account_address


@pytest.fixture
def alice() -> Address:
    return account_address("alice")


@pytest.fixture
def bob() -> Address:
    return account_address("bob")


@pytest.fixture
def in_memory_store() -> InMemoryEventStore:
    return InMemoryEventStore(enable_tracing=False)


@pytest_asyncio.fixture
async def sqlite_store() -> AsyncGenerator[SQLiteEventStore, None]:
    store = SQLiteEventStore(":memory:", enable_tracing=False)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus(enable_tracing=False)


@pytest.fixture
def ledger(in_memory_store: InMemoryEventStore, event_bus: InMemoryEventBus) -> Ledger:
    return Ledger(
        in_memory_store,
        event_bus=event_bus,
        clock=SteppingClock(),
        enable_tracing=False,
    )


@pytest_asyncio.fixture
async def harness() -> LedgerHarness:
    return await LedgerHarness.create()
