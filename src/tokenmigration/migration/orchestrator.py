"""
The migration orchestrator contract.

``migrate()`` runs once. It claims the single-use right first, then deploys
the claim distributor, deploys and initializes the successor asset, funds
the distributor with the airdrop allocation, makes sure the pool exists and
locks the pool allocation plus the orchestrator's base currency in it.
Each step depends on the one before. A failure anywhere aborts the
enclosing ledger transaction, so none of it (the claimed right included)
is ever committed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.decorators import handles
from tokenmigration.exceptions import AlreadyMigrated, NotInitialized
from tokenmigration.migration.allocation import FixedAllocationLedger
from tokenmigration.migration.claims import ClaimFunding
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.migration.deployer import SuccessorAssetDeployer
from tokenmigration.migration.events import (
    AirdropFunded,
    ClaimContractDeployed,
    LiquidityLocked,
    MigrationCompleted,
    MigrationStarted,
    OrchestratorConfigured,
    PoolCreated,
    SuccessorAssetDeployed,
)
from tokenmigration.migration.liquidity import LiquidityPoolManager, LockedLiquidity
from tokenmigration.migration.state import MigrationPhase
from tokenmigration.types import NATIVE_ASSET, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


class OrchestratorState(BaseModel):
    config: MigrationConfig | None = None
    phase: MigrationPhase = MigrationPhase.PENDING
    successor_asset: str | None = None
    claim_contract: str | None = None
    pool: str | None = None


@register_contract
class MigrationOrchestrator(Contract[OrchestratorState]):
    """
    One-time V1 -> V2 migration.

    Base currency sent to the orchestrator at any time before ``migrate()``
    is what the liquidity step deposits.
    """

    def _get_initial_state(self) -> OrchestratorState:
        return OrchestratorState()

    async def _construct(self, ctx: CallContext, *, config: MigrationConfig) -> None:
        self._raise(ctx, OrchestratorConfigured, config=config)

    @property
    def config(self) -> MigrationConfig:
        if self._state.config is None:
            raise NotInitialized(self.address)
        return self._state.config

    @property
    def phase(self) -> MigrationPhase:
        return self._state.phase

    @property
    def has_migrated(self) -> bool:
        return self._state.phase is MigrationPhase.COMPLETED

    @property
    def successor_asset(self) -> Address | None:
        return Address(self._state.successor_asset) if self._state.successor_asset else None

    @property
    def claim_contract(self) -> Address | None:
        return Address(self._state.claim_contract) if self._state.claim_contract else None

    @property
    def pool(self) -> Address | None:
        return Address(self._state.pool) if self._state.pool else None

    @property
    def allocation(self) -> FixedAllocationLedger:
        return FixedAllocationLedger.from_config(self.config)

    @property
    def asset_deployer(self) -> SuccessorAssetDeployer:
        return SuccessorAssetDeployer(self.address)

    @property
    def claim_funding(self) -> ClaimFunding:
        return ClaimFunding(self.address)

    @property
    def liquidity_manager(self) -> LiquidityPoolManager:
        return LiquidityPoolManager(self.address, self.config.router)

    async def migrate(self, ctx: CallContext) -> LockedLiquidity:
        """
        Perform the migration.

        Raises:
            Unauthorized: If the caller is not the configured owner
            AlreadyMigrated: If the migration right was already claimed
            NoTokensToDeploy: If there is no pool allocation to deposit
            NoEthToDeploy: If the orchestrator holds no base currency
        """
        config = self.config
        self._only(ctx, config.owner)
        if self.has_migrated:
            raise AlreadyMigrated(self.address)

        # Claimed before any call leaves this contract
        self._raise(ctx, MigrationStarted, phase=MigrationPhase.COMPLETED.value)

        me = ctx.call_from(self.address)
        allocation = self.allocation

        claim = await self.claim_funding.deploy_distributor(me, config.legacy_asset)
        self._raise(
            ctx,
            ClaimContractDeployed,
            claim_contract=claim.address,
            legacy_asset=config.legacy_asset,
        )

        recipients, amounts = allocation.distribution(self.address)
        asset = await self.asset_deployer.deploy(
            me,
            config.name,
            config.symbol,
            config.dao,
            recipients,
            amounts,
            existing=self.successor_asset,
        )
        self._raise(ctx, SuccessorAssetDeployed, asset=asset.address, total_supply=asset.total_supply)

        await self.claim_funding.fund(me, claim.address, asset.address, allocation.airdrop_amount)
        self._raise(ctx, AirdropFunded, claim_contract=claim.address, amount=allocation.airdrop_amount)

        manager = self.liquidity_manager
        pool, created = await manager.ensure_pool(me, asset.address)
        if created:
            self._raise(ctx, PoolCreated, pool=pool, asset=asset.address, base_asset=NATIVE_ASSET)
        book = await ctx.account_book()
        locked = await manager.deposit_liquidity(
            me,
            asset.address,
            token_amount=allocation.pool_amount,
            native_amount=book.balance_of(self.address),
        )
        self._raise(
            ctx,
            LiquidityLocked,
            pool=locked.pool,
            token_amount=locked.token_amount,
            native_amount=locked.native_amount,
            receipts=locked.burned.amount,
            sink=locked.burned.sink,
        )
        self._raise(
            ctx,
            MigrationCompleted,
            successor_asset=asset.address,
            claim_contract=claim.address,
            pool=locked.pool,
        )

        logger.info(
            "Migration completed by orchestrator %s: asset %s, claims %s, pool %s",
            self.address,
            asset.address,
            claim.address,
            locked.pool,
            extra={
                "orchestrator": self.address,
                "successor_asset": asset.address,
                "claim_contract": claim.address,
                "pool": locked.pool,
                "transaction_id": str(ctx.transaction_id),
            },
        )
        return locked

    @handles(OrchestratorConfigured)
    def _on_configured(self, event: OrchestratorConfigured) -> None:
        self._state = self._state.model_copy(update={"config": event.config})

    @handles(MigrationStarted)
    def _on_migration_started(self, event: MigrationStarted) -> None:
        phase = self._state.phase.transition_to(MigrationPhase(event.phase))
        self._state = self._state.model_copy(update={"phase": phase})

    @handles(ClaimContractDeployed)
    def _on_claim_contract_deployed(self, event: ClaimContractDeployed) -> None:
        self._state = self._state.model_copy(update={"claim_contract": event.claim_contract})

    @handles(SuccessorAssetDeployed)
    def _on_successor_asset_deployed(self, event: SuccessorAssetDeployed) -> None:
        self._state = self._state.model_copy(update={"successor_asset": event.asset})

    @handles(AirdropFunded)
    def _on_airdrop_funded(self, event: AirdropFunded) -> None:
        pass

    @handles(PoolCreated)
    def _on_pool_created(self, event: PoolCreated) -> None:
        self._state = self._state.model_copy(update={"pool": event.pool})

    @handles(LiquidityLocked)
    def _on_liquidity_locked(self, event: LiquidityLocked) -> None:
        self._state = self._state.model_copy(update={"pool": event.pool})

    @handles(MigrationCompleted)
    def _on_migration_completed(self, event: MigrationCompleted) -> None:
        pass


__all__ = ["MigrationOrchestrator", "OrchestratorState"]
