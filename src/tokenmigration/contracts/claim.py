"""
Claim distributor: holds successor-asset funds that legacy holders redeem.

Bound at construction to the legacy asset whose historical balances decide
who may claim. Eligibility and the claim itself are handled elsewhere; this
contract only receives and accounts for deposits.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.decorators import handles
from tokenmigration.contracts.token import FungibleToken
from tokenmigration.events.ledger import ClaimDistributorBound, Deposited
from tokenmigration.exceptions import InvalidRecipient
from tokenmigration.types import ZERO_ADDRESS, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


class ClaimDistributorState(BaseModel):
    legacy_asset: str | None = None
    deposits: dict[str, int] = Field(default_factory=dict)


@register_contract
class ClaimDistributor(Contract[ClaimDistributorState]):
    def _get_initial_state(self) -> ClaimDistributorState:
        return ClaimDistributorState()

    async def _construct(self, ctx: CallContext, *, legacy_asset: Address) -> None:
        if legacy_asset == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, legacy_asset)
        self._raise(ctx, ClaimDistributorBound, legacy_asset=legacy_asset)

    @property
    def legacy_asset(self) -> Address | None:
        return Address(self._state.legacy_asset) if self._state.legacy_asset else None

    def deposited(self, asset: str) -> int:
        """Total amount of ``asset`` deposited for claiming."""
        return self._state.deposits.get(asset, 0)

    async def deposit(self, ctx: CallContext, asset: Address, amount: int) -> None:
        """
        Pull ``amount`` of ``asset`` from the caller and hold it for claims.

        The caller must have approved this contract for at least ``amount``.

        Raises:
            InsufficientAllowance: If the approval does not cover the amount
            InsufficientBalance: If the caller does not hold the amount
        """
        token = await ctx.load(asset, FungibleToken)
        await token.transfer_from(ctx.call_from(self.address), ctx.caller, self.address, amount)
        self._raise(ctx, Deposited, asset=asset, depositor=ctx.caller, amount=amount)
        logger.debug(
            "Deposited %d of %s into claim distributor %s",
            amount,
            asset,
            self.address,
            extra={"contract_address": self.address, "asset": asset, "amount": amount},
        )

    @handles(ClaimDistributorBound)
    def _on_bound(self, event: ClaimDistributorBound) -> None:
        self._state = self._state.model_copy(update={"legacy_asset": event.legacy_asset})

    @handles(Deposited)
    def _on_deposited(self, event: Deposited) -> None:
        deposits = dict(self._state.deposits)
        deposits[event.asset] = deposits.get(event.asset, 0) + event.amount
        self._state = self._state.model_copy(update={"deposits": deposits})


__all__ = ["ClaimDistributor", "ClaimDistributorState"]
