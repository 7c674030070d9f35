"""
Pre-wired in-memory ledger for tests and local experiments.

``LedgerHarness`` boots a ledger on an in-memory store and bus, deploys the
shared infrastructure every migration needs (pool factory, router and a
legacy token) and offers shortcuts for funding accounts, deploying
orchestrators and running migrations.

Example:
    >>> harness = await LedgerHarness.create()
    >>> orchestrator = await harness.deploy_orchestrator(value=10)
    >>> report = await harness.migrate(orchestrator)
    >>> len(harness.published_events) > 0
    True
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from tokenmigration.bus.memory import InMemoryEventBus
from tokenmigration.contracts.pool import PoolFactory, PoolRouter
from tokenmigration.contracts.token import LegacyToken
from tokenmigration.events.base import LedgerEvent
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.migration.service import MigrationReport, MigrationService
from tokenmigration.projections.pools import PoolIndex
from tokenmigration.stores.interface import EventStore, StoredEvent
from tokenmigration.stores.in_memory import InMemoryEventStore
from tokenmigration.types import Address, account_address

GENESIS = datetime(2024, 1, 1, tzinfo=UTC)


class SteppingClock:
    """Deterministic clock; each reading is ``step`` later than the previous one."""

    def __init__(self, start: datetime = GENESIS, step: timedelta = timedelta(seconds=12)) -> None:
        self._now = start
        self._step = step

    def __call__(self) -> datetime:
        now = self._now
        self._now += self._step
        return now

    def advance(self, delta: timedelta) -> None:
        self._now += delta


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything committed up to a point; equal snapshots mean nothing was written."""

    global_position: int
    event_ids: tuple[str, ...]


class LedgerHarness:
    """
    In-memory ledger with the infrastructure a migration runs against.

    Accounts:
    - deployer: deploys the factory, router and legacy token
    - owner: deploys orchestrators and calls ``migrate()``
    - dao, agent: allocation recipients
    - treasury: faucet-funded account for sending base currency around
    """

    def __init__(self, *, store: EventStore | None = None) -> None:
        self.clock = SteppingClock()
        self.event_store = store or InMemoryEventStore(enable_tracing=False)
        self.event_bus = InMemoryEventBus(enable_tracing=False)
        self.ledger = Ledger(
            self.event_store,
            event_bus=self.event_bus,
            clock=self.clock,
            enable_tracing=False,
        )
        self.service = MigrationService(self.ledger, enable_tracing=False)
        self.pool_index = PoolIndex()
        self.published_events: list[LedgerEvent] = []

        self.deployer = account_address("deployer")
        self.owner = account_address("owner")
        self.dao = account_address("dao")
        self.agent = account_address("agent")
        self.treasury = account_address("treasury")

        self.factory: Address | None = None
        self.router: Address | None = None
        self.legacy_asset: Address | None = None

        self.event_bus.subscribe_to_all_events(self._record)
        self.event_bus.subscribe_all(self.pool_index)

    @classmethod
    async def create(cls, *, store: EventStore | None = None, treasury_funds: int = 10**21) -> LedgerHarness:
        harness = cls(store=store)
        await harness.setup(treasury_funds=treasury_funds)
        return harness

    async def _record(self, event: LedgerEvent) -> None:
        self.published_events.append(event)

    async def setup(self, *, treasury_funds: int = 10**21) -> None:
        """Deploy the factory, router and legacy token, and fund the treasury."""
        async with self.ledger.transaction(self.deployer) as tx:
            factory = await tx.deploy(self.deployer, PoolFactory)
            router = await tx.deploy(self.deployer, PoolRouter, factory=factory.address)
            legacy = await tx.deploy(
                self.deployer, LegacyToken, name="Legacy Token", symbol="OLD"
            )
        self.factory = factory.address
        self.router = router.address
        self.legacy_asset = legacy.address
        if treasury_funds:
            await self.ledger.faucet(self.treasury, treasury_funds)

    def config(self, **overrides: Any) -> MigrationConfig:
        """A valid migration config for this harness; keyword arguments override fields."""
        if self.router is None or self.legacy_asset is None:
            raise RuntimeError("LedgerHarness.setup() has not run")
        values: dict[str, Any] = {
            "legacy_asset": self.legacy_asset,
            "name": "Successor Token",
            "symbol": "NEW",
            "dao": self.dao,
            "agent": self.agent,
            "dao_amount": 400,
            "agent_amount": 100,
            "airdrop_amount": 50,
            "pool_amount": 450,
            "router": self.router,
            "owner": self.owner,
        }
        values.update(overrides)
        return MigrationConfig.from_mapping(values)

    async def fund(self, account: str, amount: int) -> None:
        """Send base currency from the treasury."""
        await self.ledger.transfer_native(self.treasury, account, amount)

    async def deploy_orchestrator(
        self,
        config: MigrationConfig | None = None,
        *,
        value: int = 0,
        deployer: Address | None = None,
    ) -> Address:
        """Deploy an orchestrator; ``value`` is taken from the deployer after topping it up from the treasury."""
        deployer = deployer or self.owner
        if value:
            await self.fund(deployer, value)
        return await self.service.deploy_orchestrator(
            deployer, config or self.config(), value=value
        )

    async def migrate(self, orchestrator: str, caller: Address | None = None) -> MigrationReport:
        return await self.service.run_migration(orchestrator, caller or self.owner)

    async def committed_events(self) -> list[StoredEvent]:
        return [stored async for stored in self.ledger.read_all()]

    async def snapshot(self) -> LedgerSnapshot:
        events = await self.committed_events()
        return LedgerSnapshot(
            global_position=await self.ledger.get_global_position(),
            event_ids=tuple(str(stored.event.event_id) for stored in events),
        )

    def clear_published(self) -> None:
        self.published_events.clear()


__all__ = ["GENESIS", "LedgerHarness", "LedgerSnapshot", "SteppingClock"]
