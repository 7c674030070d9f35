"""Deploys the claim distributor and funds it with the airdrop allocation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tokenmigration.contracts.claim import ClaimDistributor
from tokenmigration.contracts.token import FungibleToken
from tokenmigration.types import Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


class ClaimFunding:
    """
    Claim-distributor side of the migration.

    Approval and deposit happen back to back in the same transaction, so
    an approval without its deposit is never committed.
    """

    def __init__(self, orchestrator: Address) -> None:
        self._orchestrator = orchestrator

    async def deploy_distributor(self, ctx: CallContext, legacy_asset: Address) -> ClaimDistributor:
        distributor = await ctx.deploy(ClaimDistributor, legacy_asset=legacy_asset)
        logger.debug(
            "Deployed claim distributor %s bound to %s",
            distributor.address,
            legacy_asset,
            extra={"claim_contract": distributor.address, "legacy_asset": legacy_asset},
        )
        return distributor

    async def fund(
        self,
        ctx: CallContext,
        distributor: Address,
        asset: Address,
        amount: int,
    ) -> int:
        """
        Approve ``distributor`` for ``amount`` and have it pull the funds.

        Returns:
            The distributor's total deposit of ``asset`` afterwards
        """
        token = await ctx.load(asset, FungibleToken)
        await token.approve(ctx, distributor, amount)
        claim = await ctx.load(distributor, ClaimDistributor)
        await claim.deposit(ctx, asset, amount)
        return claim.deposited(asset)


__all__ = ["ClaimFunding"]
