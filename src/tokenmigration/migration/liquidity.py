"""
Pool side of the migration: make sure the pool exists, then lock liquidity.

The deposit's receipt is burned with the pair's typed ``burn_receipt``
operation, leaving the liquidity unwithdrawable by anyone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tokenmigration.contracts.pool import (
    BurnedReceipt,
    LiquidityPair,
    LiquidityReceipt,
    PoolFactory,
    PoolRouter,
)
from tokenmigration.contracts.token import FungibleToken
from tokenmigration.exceptions import NoEthToDeploy, NoTokensToDeploy
from tokenmigration.types import NATIVE_ASSET, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockedLiquidity:
    """What went into the pool and where its receipt ended up."""

    pool: Address
    token_amount: int
    native_amount: int
    receipt: LiquidityReceipt
    burned: BurnedReceipt


class LiquidityPoolManager:
    """
    Args:
        orchestrator: The orchestrator the deposit is made for
        router: Pool router used for deposits
    """

    def __init__(self, orchestrator: Address, router: Address) -> None:
        self._orchestrator = orchestrator
        self._router = router

    async def _factory(self, ctx: CallContext) -> PoolFactory:
        router = await ctx.load(self._router, PoolRouter)
        return await ctx.load(router.factory, PoolFactory)

    async def ensure_pool(
        self,
        ctx: CallContext,
        asset_a: Address,
        asset_b: Address = NATIVE_ASSET,
    ) -> tuple[Address, bool]:
        """
        Return the pool for two assets, creating it if absent.

        Returns:
            (pool address, whether this call created it)
        """
        factory = await self._factory(ctx)
        existing = factory.get_pair(asset_a, asset_b)
        if existing is not None:
            logger.debug("Pool %s already exists", existing, extra={"pool": existing})
            return existing, False
        return await factory.create_pair(ctx, asset_a, asset_b), True

    async def deposit_liquidity(
        self,
        ctx: CallContext,
        asset: Address,
        token_amount: int,
        native_amount: int,
    ) -> LockedLiquidity:
        """
        Deposit both amounts as paired liquidity and burn the receipt.

        No minimum amounts are enforced and the deadline is the current
        ledger time.

        Raises:
            NoTokensToDeploy: If ``token_amount`` is not positive
            NoEthToDeploy: If ``native_amount`` is not positive
        """
        if token_amount <= 0:
            raise NoTokensToDeploy(self._orchestrator)
        if native_amount <= 0:
            raise NoEthToDeploy(self._orchestrator)

        token = await ctx.load(asset, FungibleToken)
        await token.approve(ctx, self._router, token_amount)

        router = await ctx.load(self._router, PoolRouter)
        value_ctx = await ctx.call_with_value(ctx.caller, self._router, native_amount)
        receipt = await router.add_liquidity_native(
            value_ctx,
            asset,
            amount_token_desired=token_amount,
            amount_token_min=0,
            amount_native_min=0,
            to=ctx.caller,
            deadline=ctx.timestamp,
        )

        pair = await ctx.load(receipt.pair, LiquidityPair)
        burned = await pair.burn_receipt(ctx, receipt)
        logger.debug(
            "Locked %d token and %d native in pool %s",
            receipt.token_amount,
            receipt.native_amount,
            receipt.pair,
            extra={"pool": receipt.pair, "receipts": burned.amount},
        )
        return LockedLiquidity(
            pool=receipt.pair,
            token_amount=receipt.token_amount,
            native_amount=receipt.native_amount,
            receipt=receipt,
            burned=burned,
        )


__all__ = ["LiquidityPoolManager", "LockedLiquidity"]
