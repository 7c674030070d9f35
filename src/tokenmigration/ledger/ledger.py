"""
The ledger: serialized, all-or-nothing transactions over an event store.

Every state change goes through ``Ledger.transaction``. The block either
exits normally, in which case every event raised inside it is committed in
one batch and then published, or it raises, in which case nothing is
written, nothing is published and the exception propagates unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, cast

from tokenmigration.bus.interface import EventBus
from tokenmigration.contracts.accounts import AccountBook
from tokenmigration.contracts.base import Contract
from tokenmigration.contracts.registry import ContractRegistry, default_contract_registry
from tokenmigration.exceptions import ContractNotFoundError, TransactionError
from tokenmigration.ledger.settings import LedgerSettings
from tokenmigration.ledger.transaction import C, Transaction, rehydrate
from tokenmigration.observability import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_EVENT_COUNT,
    ATTR_ORIGIN,
    ATTR_STREAM_COUNT,
    ATTR_TRANSACTION_ID,
    Tracer,
    create_tracer,
)
from tokenmigration.stores.interface import CommitResult, EventStore, ReadOptions, StoredEvent
from tokenmigration.types import (
    ACCOUNT_BOOK_ADDRESS,
    RESERVED_ADDRESSES,
    ZERO_ADDRESS,
    Address,
    to_address,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


class Ledger:
    """
    Single sequential ledger backed by an event store.

    Example:
        >>> ledger = Ledger(InMemoryEventStore(), event_bus=InMemoryEventBus())
        >>> async with ledger.transaction(owner) as tx:
        ...     token = await tx.deploy(owner, LegacyToken, name="Old", symbol="OLD")
        ...     await token.mint(tx.context(), holder, 1_000)
    """

    def __init__(
        self,
        store: EventStore,
        *,
        event_bus: EventBus | None = None,
        clock: Clock | None = None,
        registry: ContractRegistry = default_contract_registry,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._store = store
        self._event_bus = event_bus
        self._clock = clock or utc_now
        self._registry = registry
        self._tracer = tracer or create_tracer(__name__, enable_tracing)
        self._lock = asyncio.Lock()
        self._owner_task: asyncio.Task[Any] | None = None

    @classmethod
    async def from_settings(
        cls,
        settings: LedgerSettings,
        *,
        event_bus: EventBus | None = None,
        clock: Clock | None = None,
    ) -> Ledger:
        """Build the configured store (initializing its schema) and wrap it in a ledger."""
        store = settings.create_store()
        initialize = getattr(store, "initialize", None)
        if initialize is not None:
            await initialize()
        return cls(
            store,
            event_bus=event_bus,
            clock=clock,
            enable_tracing=settings.enable_tracing,
        )

    @property
    def store(self) -> EventStore:
        return self._store

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    def now(self) -> datetime:
        return self._clock()

    @asynccontextmanager
    async def transaction(self, origin: str) -> AsyncIterator[Transaction]:
        """
        Open a transaction on behalf of an externally owned account.

        Raises:
            TransactionError: If the origin is a reserved address or a
                transaction is already open in the current task
            ValueError: If the origin is not a valid address
        """
        origin_address = to_address(origin)
        if origin_address in RESERVED_ADDRESSES:
            raise TransactionError(f"Reserved address {origin_address} cannot open transactions")
        async with self._open(origin_address) as tx:
            yield tx

    @asynccontextmanager
    async def _open(self, origin: Address) -> AsyncIterator[Transaction]:
        current = asyncio.current_task()
        if current is not None and self._owner_task is current:
            raise TransactionError("Transactions cannot be nested")

        async with self._lock:
            self._owner_task = current
            tx = Transaction(self._store, origin, self.now(), registry=self._registry)
            try:
                with self._tracer.span(
                    "tokenmigration.ledger.transaction",
                    {
                        ATTR_TRANSACTION_ID: str(tx.transaction_id),
                        ATTR_ORIGIN: origin,
                    },
                ):
                    try:
                        yield tx
                        result = await self._commit(tx)
                    except BaseException as e:
                        tx.close()
                        logger.warning(
                            "Rolled back transaction %s opened by %s: %s",
                            tx.transaction_id,
                            origin,
                            e,
                            extra={
                                "transaction_id": str(tx.transaction_id),
                                "origin": origin,
                                "error": type(e).__name__,
                            },
                        )
                        raise
            finally:
                self._owner_task = None

        if self._event_bus is not None and result.event_count:
            await self._event_bus.publish(tx.events)

    async def _commit(self, tx: Transaction) -> CommitResult:
        batch = tx.build_batch()
        with self._tracer.span(
            "tokenmigration.ledger.commit",
            {
                ATTR_TRANSACTION_ID: str(tx.transaction_id),
                ATTR_EVENT_COUNT: len(batch.events),
                ATTR_STREAM_COUNT: batch.stream_count,
            },
        ):
            result = await self._store.commit(batch)
        tx.mark_committed(result)
        logger.info(
            "Committed transaction %s: %d events across %d contracts",
            tx.transaction_id,
            result.event_count,
            batch.stream_count,
            extra={
                "transaction_id": str(tx.transaction_id),
                "origin": tx.origin,
                "event_count": result.event_count,
                "global_position": result.global_position,
            },
        )
        return result

    # =========================================================================
    # Committed-state reads
    # =========================================================================

    async def load(self, address: str, expected: type[C] | None = None) -> C:
        """
        Rebuild a contract from committed events only.

        The returned instance is detached: calling commands on it has no
        effect on the ledger.

        Raises:
            ContractNotFoundError: If nothing (or something of another type) lives there
        """
        key = to_address(address)
        with self._tracer.span("tokenmigration.ledger.load", {ATTR_CONTRACT_ADDRESS: key}):
            contract = await rehydrate(self._store, key, self._registry)
        if expected is not None and not isinstance(contract, expected):
            raise ContractNotFoundError(key, expected.contract_type)
        return cast(C, contract)

    async def exists(self, address: str) -> bool:
        return await self._store.exists(to_address(address))

    async def native_balance(self, address: str) -> int:
        if not await self._store.exists(ACCOUNT_BOOK_ADDRESS):
            return 0
        book = await self.load(ACCOUNT_BOOK_ADDRESS, AccountBook)
        return book.balance_of(to_address(address))

    def read_all(self, options: ReadOptions | None = None) -> AsyncIterator[StoredEvent]:
        return self._store.read_all(options)

    async def get_global_position(self) -> int:
        return await self._store.get_global_position()

    # =========================================================================
    # Convenience writes
    # =========================================================================

    async def faucet(self, account: str, amount: int) -> None:
        """Create base currency for ``account`` (genesis and test funding)."""
        async with self._open(ZERO_ADDRESS) as tx:
            book = await tx.account_book()
            await book.credit(tx.context(), to_address(account), amount)

    async def transfer_native(self, source: str, destination: str, amount: int) -> None:
        async with self.transaction(source) as tx:
            await tx.transfer_native(tx.origin, to_address(destination), amount)

    async def deploy(
        self,
        deployer: str,
        contract_class: type[Contract[Any]],
        *,
        value: int = 0,
        **kwargs: Any,
    ) -> Address:
        """Deploy a contract in its own transaction and return its address."""
        async with self.transaction(deployer) as tx:
            contract = await tx.deploy(tx.origin, contract_class, value=value, **kwargs)
        return contract.address

    async def close(self) -> None:
        close = getattr(self._store, "close", None)
        if close is not None:
            await close()


__all__ = ["Clock", "Ledger", "utc_now"]
