"""
Ledger transactions: the unit of atomic execution.

A ``Transaction`` is an identity map of the contracts it has loaded plus an
ordered journal of every event those contracts raised. Contract calls
nested to any depth share the same transaction, so they see each other's
uncommitted effects. When the transaction is committed the journal becomes
one ``CommitBatch``; when it is abandoned the map and journal are simply
dropped and the store never sees them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, TypeVar, cast
from uuid import UUID, uuid4

from tokenmigration.contracts.accounts import AccountBook
from tokenmigration.contracts.base import Contract
from tokenmigration.contracts.registry import ContractRegistry, default_contract_registry
from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.ledger import ContractDeployed
from tokenmigration.exceptions import ContractNotFoundError, TransactionError
from tokenmigration.stores.interface import CommitBatch, CommitResult, EventStore, StreamExpectation
from tokenmigration.types import (
    ACCOUNT_BOOK_ADDRESS,
    ZERO_ADDRESS,
    Address,
    derive_contract_address,
)

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Contract[Any])


async def rehydrate(
    store: EventStore,
    address: Address,
    registry: ContractRegistry = default_contract_registry,
) -> Contract[Any]:
    """
    Rebuild the contract at ``address`` from its committed events.

    Raises:
        ContractNotFoundError: If nothing is deployed at the address
    """
    stream = await store.get_events(address)
    if stream.is_empty:
        raise ContractNotFoundError(address)
    try:
        contract_class = registry.get(stream.contract_type)
    except ContractNotFoundError:
        raise ContractNotFoundError(address, stream.contract_type) from None
    contract = contract_class(address)
    contract.load_from_history(stream.events)
    return contract


@dataclass(frozen=True)
class CallContext:
    """
    Who is calling, with how much base currency, inside which transaction.

    Attributes:
        transaction: The enclosing transaction
        caller: Immediate caller (an account or a contract)
        value: Base currency already moved from caller to callee for this call
    """

    transaction: Transaction
    caller: Address
    value: int = 0

    @property
    def timestamp(self) -> int:
        """Ledger time of the transaction in whole seconds."""
        return self.transaction.timestamp

    @property
    def occurred_at(self) -> datetime:
        return self.transaction.occurred_at

    @property
    def origin(self) -> Address:
        """Account that opened the transaction."""
        return self.transaction.origin

    @property
    def transaction_id(self) -> UUID:
        return self.transaction.transaction_id

    def record(self, event: LedgerEvent) -> None:
        self.transaction.record(event)

    def call_from(self, caller: Address) -> CallContext:
        """Context for a call made by ``caller`` (typically the current contract)."""
        return CallContext(self.transaction, caller)

    async def call_with_value(self, caller: Address, target: Address, value: int) -> CallContext:
        """Move ``value`` base currency from ``caller`` to ``target`` and return the call's context."""
        if value:
            await self.transaction.transfer_native(caller, target, value)
        return CallContext(self.transaction, caller, value)

    async def load(self, address: str, expected: type[C]) -> C:
        return await self.transaction.load(address, expected)

    async def deploy(self, contract_class: type[C], *, value: int = 0, **kwargs: Any) -> C:
        """Deploy a contract with the current caller as deployer."""
        return await self.transaction.deploy(self.caller, contract_class, value=value, **kwargs)

    async def account_book(self) -> AccountBook:
        return await self.transaction.account_book()


class Transaction:
    """
    Identity map and event journal for one atomic unit of work.

    Transactions are opened by ``Ledger.transaction``; they are not meant to
    be constructed directly outside tests.
    """

    def __init__(
        self,
        store: EventStore,
        origin: Address,
        occurred_at: datetime,
        *,
        registry: ContractRegistry = default_contract_registry,
        transaction_id: UUID | None = None,
    ) -> None:
        self._store = store
        self._origin = origin
        self._occurred_at = occurred_at
        self._registry = registry
        self._transaction_id = transaction_id or uuid4()
        self._contracts: dict[Address, Contract[Any]] = {}
        self._loaded_versions: dict[Address, int] = {}
        self._journal: list[LedgerEvent] = []
        self._closed = False
        self.commit_result: CommitResult | None = None

    @property
    def transaction_id(self) -> UUID:
        return self._transaction_id

    @property
    def origin(self) -> Address:
        return self._origin

    @property
    def occurred_at(self) -> datetime:
        return self._occurred_at

    @property
    def timestamp(self) -> int:
        return int(self._occurred_at.timestamp())

    @property
    def events(self) -> list[LedgerEvent]:
        """Events raised so far, in the order they were raised."""
        return list(self._journal)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def context(self, caller: Address | None = None, value: int = 0) -> CallContext:
        """Root call context; the caller defaults to the transaction origin."""
        self._ensure_open()
        return CallContext(self, caller or self._origin, value)

    def record(self, event: LedgerEvent) -> None:
        self._ensure_open()
        self._journal.append(event)

    async def load(self, address: str, expected: type[C] | None = None) -> C:
        """
        Load a contract into the transaction's identity map.

        Repeated loads of one address return the same instance, so every
        caller in the transaction sees the same uncommitted state.

        Raises:
            ContractNotFoundError: If nothing (or something of another type) lives there
        """
        self._ensure_open()
        key = Address(address)
        contract = self._contracts.get(key)
        if contract is None:
            contract = await rehydrate(self._store, key, self._registry)
            self._track(contract)
        if expected is not None and not isinstance(contract, expected):
            raise ContractNotFoundError(key, expected.contract_type)
        return cast(C, contract)

    async def exists(self, address: str) -> bool:
        key = Address(address)
        return key in self._contracts or await self._store.exists(key)

    async def account_book(self) -> AccountBook:
        """The system account book, created on first use of a fresh ledger."""
        if ACCOUNT_BOOK_ADDRESS in self._contracts:
            return cast(AccountBook, self._contracts[ACCOUNT_BOOK_ADDRESS])
        if await self._store.exists(ACCOUNT_BOOK_ADDRESS):
            return await self.load(ACCOUNT_BOOK_ADDRESS, AccountBook)

        book = AccountBook(ACCOUNT_BOOK_ADDRESS)
        self._track(book)
        book._raise(
            CallContext(self, ZERO_ADDRESS),
            ContractDeployed,
            deployer=ZERO_ADDRESS,
            code=AccountBook.contract_type,
        )
        logger.info("Created account book at %s", ACCOUNT_BOOK_ADDRESS)
        return book

    async def transfer_native(self, source: Address, destination: Address, amount: int) -> None:
        book = await self.account_book()
        await book.transfer(CallContext(self, source), destination, amount)

    async def deploy(
        self,
        deployer: Address,
        contract_class: type[C],
        *,
        value: int = 0,
        **kwargs: Any,
    ) -> C:
        """
        Create a contract at the address derived from the deployer's next nonce.

        The contract's first event is ``ContractDeployed``; ``value`` base
        currency is moved to it before its constructor hook runs.

        Raises:
            TransactionError: If the class is not registered or the address is taken
        """
        self._ensure_open()
        if contract_class.contract_type not in self._registry:
            raise TransactionError(
                f"Contract type {contract_class.contract_type} is not registered"
            )

        book = await self.account_book()
        address = derive_contract_address(deployer, book.nonce_of(deployer))
        if await self.exists(address):
            raise TransactionError(f"Address collision deploying {contract_class.contract_type}")
        await book.consume_nonce(CallContext(self, deployer), created=address)

        contract = contract_class(address)
        self._track(contract)
        ctx = CallContext(self, deployer)
        contract._raise(ctx, ContractDeployed, deployer=deployer, code=contract_class.contract_type)
        if value:
            ctx = await ctx.call_with_value(deployer, address, value)
        await contract._construct(ctx, **kwargs)

        logger.debug(
            "Deployed %s at %s",
            contract_class.contract_type,
            address,
            extra={
                "contract_type": contract_class.contract_type,
                "contract_address": address,
                "deployer": deployer,
                "transaction_id": str(self._transaction_id),
            },
        )
        return contract

    def build_batch(self) -> CommitBatch:
        """Collect the journal and per-stream expectations into one batch."""
        expectations = tuple(
            StreamExpectation(
                address=address,
                contract_type=contract.contract_type,
                expected_version=self._loaded_versions[address],
            )
            for address, contract in self._contracts.items()
            if contract.has_uncommitted_events
        )
        return CommitBatch(
            transaction_id=self._transaction_id,
            events=tuple(self._journal),
            expectations=expectations,
        )

    def mark_committed(self, result: CommitResult) -> None:
        for contract in self._contracts.values():
            contract.mark_events_as_committed()
        self.commit_result = result
        self._closed = True

    def close(self) -> None:
        self._closed = True

    def _track(self, contract: Contract[Any]) -> None:
        self._contracts[contract.address] = contract
        self._loaded_versions[contract.address] = contract.committed_version

    def _ensure_open(self) -> None:
        if self._closed:
            raise TransactionError(f"Transaction {self._transaction_id} is closed")

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self._transaction_id}, origin={self._origin}, "
            f"contracts={len(self._contracts)}, events={len(self._journal)})"
        )


__all__ = ["CallContext", "Transaction", "rehydrate"]
