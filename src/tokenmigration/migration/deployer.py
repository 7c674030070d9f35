"""Deploys and initializes the successor asset on behalf of the orchestrator."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tokenmigration.contracts.token import SuccessorToken
from tokenmigration.exceptions import AlreadyDeployed, LengthMismatch
from tokenmigration.types import Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


class SuccessorAssetDeployer:
    """
    One successor asset per orchestrator.

    The asset is minted to its recipients at initialization; no transfer
    step follows. Ownership goes to ``initial_owner``, never to the
    orchestrator.
    """

    def __init__(self, orchestrator: Address) -> None:
        self._orchestrator = orchestrator

    async def deploy(
        self,
        ctx: CallContext,
        name: str,
        symbol: str,
        initial_owner: Address,
        recipients: list[Address],
        amounts: list[int],
        *,
        existing: Address | None = None,
    ) -> SuccessorToken:
        """
        Deploy the successor asset and mint its initial distribution.

        ``ctx`` must be the orchestrator's own call context.

        Raises:
            AlreadyDeployed: If ``existing`` names an asset already deployed
            LengthMismatch: If recipients and amounts differ in length
        """
        if existing is not None:
            raise AlreadyDeployed(self._orchestrator, existing)
        if len(recipients) != len(amounts):
            raise LengthMismatch(self._orchestrator, len(recipients), len(amounts))

        token = await ctx.deploy(SuccessorToken)
        await token.initialize(ctx, name, symbol, initial_owner, recipients, amounts)
        logger.debug(
            "Deployed successor asset %s for orchestrator %s",
            token.address,
            self._orchestrator,
            extra={"asset": token.address, "total_supply": token.total_supply},
        )
        return token


__all__ = ["SuccessorAssetDeployer"]
