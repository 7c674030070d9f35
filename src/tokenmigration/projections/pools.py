"""
Off-ledger index of liquidity pools.

``PoolIndex`` consumes committed ``PairCreated`` events from pool factories
and ``PoolCreated`` notifications from migration orchestrators, and answers
"which pool trades these two assets" and "which orchestrator created it".
"""

import logging
from collections.abc import AsyncIterable
from dataclasses import dataclass

from tokenmigration.contracts.pool import pair_key
from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.ledger import PairCreated
from tokenmigration.migration.events import PoolCreated
from tokenmigration.stores.interface import StoredEvent
from tokenmigration.types import Address

logger = logging.getLogger(__name__)


@dataclass
class PoolRecord:
    pool: Address
    asset_a: Address
    asset_b: Address
    factory: Address
    index: int
    created_by: Address | None = None


class PoolIndex:
    """
    Example:
        >>> index = PoolIndex()
        >>> bus.subscribe_all(index)
        >>> index.find(successor_asset, NATIVE_ASSET).pool
    """

    def __init__(self) -> None:
        self._pools: dict[Address, PoolRecord] = {}
        self._by_pair: dict[str, Address] = {}
        self._pending_creators: dict[Address, Address] = {}
        self.events_processed = 0

    def subscribed_to(self) -> list[type[LedgerEvent]]:
        return [PairCreated, PoolCreated]

    async def handle(self, event: LedgerEvent) -> None:
        if isinstance(event, PairCreated):
            self._on_pair_created(event)
        elif isinstance(event, PoolCreated):
            self._on_pool_created(event)
        else:
            return
        self.events_processed += 1

    async def catch_up(self, events: AsyncIterable[StoredEvent]) -> int:
        """Replay stored events (e.g. ``ledger.read_all()``); returns events applied."""
        applied = 0
        wanted = tuple(self.subscribed_to())
        async for stored in events:
            if isinstance(stored.event, wanted):
                await self.handle(stored.event)
                applied += 1
        return applied

    def _on_pair_created(self, event: PairCreated) -> None:
        pool = Address(event.pair)
        record = PoolRecord(
            pool=pool,
            asset_a=Address(event.asset_a),
            asset_b=Address(event.asset_b),
            factory=event.contract_address,
            index=event.index,
            created_by=self._pending_creators.pop(pool, None),
        )
        self._pools[pool] = record
        self._by_pair[pair_key(event.asset_a, event.asset_b)] = pool
        logger.debug(
            "Indexed pool %s for %s/%s",
            pool,
            event.asset_a,
            event.asset_b,
            extra={"pool": pool, "factory": event.contract_address},
        )

    def _on_pool_created(self, event: PoolCreated) -> None:
        # Accepts either order relative to PairCreated
        pool = Address(event.pool)
        record = self._pools.get(pool)
        if record is None:
            self._pending_creators[pool] = event.contract_address
        else:
            record.created_by = event.contract_address

    def get(self, pool: str) -> PoolRecord | None:
        return self._pools.get(Address(pool))

    def find(self, asset_a: str, asset_b: str) -> PoolRecord | None:
        pool = self._by_pair.get(pair_key(asset_a, asset_b))
        return self._pools.get(pool) if pool else None

    def created_by(self, orchestrator: str) -> list[PoolRecord]:
        return [r for r in self._pools.values() if r.created_by == orchestrator]

    @property
    def pools(self) -> list[PoolRecord]:
        return sorted(self._pools.values(), key=lambda r: (r.factory, r.index))

    def reset(self) -> None:
        self._pools.clear()
        self._by_pair.clear()
        self._pending_creators.clear()
        self.events_processed = 0


__all__ = ["PoolIndex", "PoolRecord"]
