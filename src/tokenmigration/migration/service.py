"""
Off-ledger entry point for running a migration.

``MigrationService`` deploys orchestrators and drives ``migrate()`` inside
a single ledger transaction, turning the committed outcome into a
``MigrationReport``. Failures are logged and re-raised unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from tokenmigration.contracts.claim import ClaimDistributor
from tokenmigration.contracts.token import SuccessorToken
from tokenmigration.exceptions import LedgerError
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.migration.events import PoolCreated
from tokenmigration.migration.orchestrator import MigrationOrchestrator
from tokenmigration.observability import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_ORIGIN,
    ATTR_TRANSACTION_ID,
    Tracer,
    create_tracer,
)
from tokenmigration.types import Address, to_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """
    Committed outcome of a successful migration.

    Attributes:
        orchestrator: The orchestrator that ran
        transaction_id: Ledger transaction that committed the migration
        successor_asset: Address of the V2 asset
        claim_contract: Address of the claim distributor
        pool: Address of the successor/base-currency pool
        pool_created: False if the pool already existed
        total_supply: Minted supply of the successor asset
        airdrop_deposited: Successor asset held by the claim distributor
        token_liquidity: Successor asset added to the pool
        native_liquidity: Base currency added to the pool
        receipts_burned: Pool receipts sent to the sink
        event_count: Events committed by the transaction
    """

    orchestrator: Address
    transaction_id: UUID
    successor_asset: Address
    claim_contract: Address
    pool: Address
    pool_created: bool
    total_supply: int
    airdrop_deposited: int
    token_liquidity: int
    native_liquidity: int
    receipts_burned: int
    event_count: int


class MigrationService:
    """
    Example:
        >>> service = MigrationService(ledger)
        >>> orchestrator = await service.deploy_orchestrator(owner, config)
        >>> await ledger.transfer_native(treasury, orchestrator, 10)
        >>> report = await service.run_migration(orchestrator, owner)
        >>> report.total_supply
        1000
    """

    def __init__(
        self,
        ledger: Ledger,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._ledger = ledger
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def deploy_orchestrator(
        self,
        deployer: str,
        config: MigrationConfig,
        *,
        value: int = 0,
    ) -> Address:
        """Deploy an orchestrator, optionally pre-funded with ``value`` base currency."""
        with self._tracer.span(
            "tokenmigration.migration.deploy_orchestrator",
            {ATTR_ORIGIN: deployer},
        ):
            address = await self._ledger.deploy(
                deployer, MigrationOrchestrator, value=value, config=config
            )
        logger.info(
            "Deployed migration orchestrator %s for %s (%s)",
            address,
            config.name,
            config.symbol,
            extra={"orchestrator": address, "owner": config.owner, "prefunded": value},
        )
        return address

    async def get_orchestrator(self, orchestrator: str) -> MigrationOrchestrator:
        """Committed state of an orchestrator."""
        return await self._ledger.load(orchestrator, MigrationOrchestrator)

    async def run_migration(self, orchestrator: str, caller: str) -> MigrationReport:
        """
        Call ``migrate()`` as ``caller`` in one ledger transaction.

        Raises:
            LedgerError: Whatever the migration or the commit raised, unchanged
        """
        address = to_address(orchestrator)
        with self._tracer.span(
            "tokenmigration.migration.run",
            {ATTR_CONTRACT_ADDRESS: address, ATTR_ORIGIN: caller},
        ) as span:
            try:
                async with self._ledger.transaction(caller) as tx:
                    if span:
                        span.set_attribute(ATTR_TRANSACTION_ID, str(tx.transaction_id))
                    contract = await tx.load(address, MigrationOrchestrator)
                    locked = await contract.migrate(tx.context())

                    successor = await tx.load(contract.successor_asset, SuccessorToken)
                    claim = await tx.load(contract.claim_contract, ClaimDistributor)
                    pool_created = any(isinstance(e, PoolCreated) for e in tx.events)
                    report = MigrationReport(
                        orchestrator=address,
                        transaction_id=tx.transaction_id,
                        successor_asset=successor.address,
                        claim_contract=claim.address,
                        pool=locked.pool,
                        pool_created=pool_created,
                        total_supply=successor.total_supply,
                        airdrop_deposited=claim.deposited(successor.address),
                        token_liquidity=locked.token_amount,
                        native_liquidity=locked.native_amount,
                        receipts_burned=locked.burned.amount,
                        event_count=len(tx.events),
                    )
            except LedgerError as e:
                logger.error(
                    "Migration by orchestrator %s failed: %s",
                    address,
                    e,
                    extra={"orchestrator": address, "caller": caller, "error": type(e).__name__},
                )
                raise

        logger.info(
            "Migration by orchestrator %s committed in transaction %s",
            address,
            report.transaction_id,
            extra={
                "orchestrator": address,
                "transaction_id": str(report.transaction_id),
                "successor_asset": report.successor_asset,
                "pool": report.pool,
                "event_count": report.event_count,
            },
        )
        return report


__all__ = ["MigrationReport", "MigrationService"]
