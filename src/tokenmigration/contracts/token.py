"""
Fungible token contracts.

- FungibleToken: balances, allowances and the transfer/approve interface
- LegacyToken: the V1 asset, with owner-gated minting of historical balances
- SuccessorToken: the V2 asset, initialized once with its full distribution,
  with vote-weight tracking and an owner-gated logic upgrade
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, Field

from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.decorators import handles
from tokenmigration.events.ledger import (
    Approval,
    DelegateChanged,
    DelegateVotesChanged,
    OwnershipTransferred,
    TokenConfigured,
    TokenInitialized,
    Transfer,
    Upgraded,
)
from tokenmigration.exceptions import (
    AlreadyInitialized,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidRecipient,
    LengthMismatch,
    NotInitialized,
)
from tokenmigration.types import ZERO_ADDRESS, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18
INITIAL_IMPLEMENTATION = "SuccessorToken/v1"


class TokenState(BaseModel):
    name: str = ""
    symbol: str = ""
    decimals: int = DEFAULT_DECIMALS
    owner: str | None = None
    total_supply: int = 0
    balances: dict[str, int] = Field(default_factory=dict)
    allowances: dict[str, dict[str, int]] = Field(default_factory=dict)


class SuccessorTokenState(TokenState):
    initialized: bool = False
    implementation: str = INITIAL_IMPLEMENTATION
    delegates: dict[str, str] = Field(default_factory=dict)
    votes: dict[str, int] = Field(default_factory=dict)


TTokenState = TypeVar("TTokenState", bound=TokenState)


class FungibleToken(Contract[TTokenState]):
    """
    Balances and allowances shared by every token kind.

    Not deployable on its own; callers that only need the transfer
    interface load tokens with ``expected=FungibleToken``.
    """

    @property
    def name(self) -> str:
        return self._state.name

    @property
    def symbol(self) -> str:
        return self._state.symbol

    @property
    def decimals(self) -> int:
        return self._state.decimals

    @property
    def owner(self) -> Address | None:
        return Address(self._state.owner) if self._state.owner else None

    @property
    def total_supply(self) -> int:
        return self._state.total_supply

    def balance_of(self, account: str) -> int:
        return self._state.balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._state.allowances.get(owner, {}).get(spender, 0)

    async def transfer(self, ctx: CallContext, to: Address, amount: int) -> bool:
        self._transfer(ctx, ctx.caller, to, amount)
        return True

    async def approve(self, ctx: CallContext, spender: Address, amount: int) -> bool:
        if amount < 0:
            raise ValueError(f"Allowance must be non-negative, got {amount}")
        self._raise(ctx, Approval, owner=ctx.caller, spender=spender, amount=amount)
        return True

    async def transfer_from(
        self, ctx: CallContext, owner: Address, to: Address, amount: int
    ) -> bool:
        """Move ``amount`` from ``owner`` to ``to``, spending the caller's allowance."""
        allowance = self.allowance(owner, ctx.caller)
        if allowance < amount:
            raise InsufficientAllowance(self.address, owner, ctx.caller, allowance, amount)
        self._raise(ctx, Approval, owner=owner, spender=ctx.caller, amount=allowance - amount)
        self._transfer(ctx, owner, to, amount)
        return True

    async def transfer_ownership(self, ctx: CallContext, new_owner: Address) -> None:
        self._only(ctx, self.owner)
        if new_owner == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, new_owner)
        self._raise(
            ctx,
            OwnershipTransferred,
            previous_owner=self._state.owner or ZERO_ADDRESS,
            new_owner=new_owner,
        )

    def _transfer(self, ctx: CallContext, source: Address, destination: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        if destination == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, destination)
        balance = self.balance_of(source)
        if balance < amount:
            raise InsufficientBalance(self.address, source, balance, amount)
        self._raise(ctx, Transfer, source=source, destination=destination, amount=amount)
        self._after_transfer(ctx, source, destination, amount)

    def _mint(self, ctx: CallContext, to: Address, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative, got {amount}")
        if to == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, to)
        self._raise(ctx, Transfer, source=ZERO_ADDRESS, destination=to, amount=amount)
        self._after_transfer(ctx, ZERO_ADDRESS, to, amount)

    def _after_transfer(
        self, ctx: CallContext, source: Address, destination: Address, amount: int
    ) -> None:
        """Hook run after every balance movement, mints included."""

    @handles(TokenConfigured)
    def _on_token_configured(self, event: TokenConfigured) -> None:
        self._state = self._state.model_copy(
            update={
                "name": event.name,
                "symbol": event.symbol,
                "decimals": event.decimals,
                "owner": event.owner,
            }
        )

    @handles(Transfer)
    def _on_transfer(self, event: Transfer) -> None:
        balances = dict(self._state.balances)
        supply = self._state.total_supply
        if event.source == ZERO_ADDRESS:
            supply += event.amount
        else:
            balances[event.source] = balances.get(event.source, 0) - event.amount
        balances[event.destination] = balances.get(event.destination, 0) + event.amount
        self._state = self._state.model_copy(update={"balances": balances, "total_supply": supply})

    @handles(Approval)
    def _on_approval(self, event: Approval) -> None:
        allowances = {owner: dict(spenders) for owner, spenders in self._state.allowances.items()}
        allowances.setdefault(event.owner, {})[event.spender] = event.amount
        self._state = self._state.model_copy(update={"allowances": allowances})

    @handles(OwnershipTransferred)
    def _on_ownership_transferred(self, event: OwnershipTransferred) -> None:
        self._state = self._state.model_copy(update={"owner": event.new_owner})


@register_contract
class LegacyToken(FungibleToken[TokenState]):
    """The V1 asset. Its owner mints the historical holder balances."""

    def _get_initial_state(self) -> TokenState:
        return TokenState()

    async def _construct(
        self,
        ctx: CallContext,
        *,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_DECIMALS,
        owner: Address | None = None,
    ) -> None:
        self._raise(
            ctx,
            TokenConfigured,
            name=name,
            symbol=symbol,
            decimals=decimals,
            owner=owner or ctx.caller,
        )

    async def mint(self, ctx: CallContext, to: Address, amount: int) -> None:
        self._only(ctx, self.owner)
        self._mint(ctx, to, amount)


@register_contract
class SuccessorToken(FungibleToken[SuccessorTokenState]):
    """
    The V2 asset.

    Deployed bare, then initialized exactly once by its deployer, which mints
    every (recipient, amount) pair directly and hands ownership to ``owner``.
    Vote weight follows the balance of each holder's delegate.
    """

    def _get_initial_state(self) -> SuccessorTokenState:
        return SuccessorTokenState()

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def implementation(self) -> str:
        return self._state.implementation

    def delegates(self, account: str) -> Address:
        return Address(self._state.delegates.get(account, ZERO_ADDRESS))

    def get_votes(self, account: str) -> int:
        return self._state.votes.get(account, 0)

    async def initialize(
        self,
        ctx: CallContext,
        name: str,
        symbol: str,
        owner: Address,
        recipients: list[Address],
        amounts: list[int],
    ) -> None:
        """
        Mint the initial distribution and assign ownership.

        Raises:
            AlreadyInitialized: On any second call
            LengthMismatch: If recipients and amounts differ in length
            Unauthorized: If the caller is not the deployer
        """
        if self._state.initialized:
            raise AlreadyInitialized(self.address)
        self._only(ctx, self.deployer, "deployer")
        if len(recipients) != len(amounts):
            raise LengthMismatch(self.address, len(recipients), len(amounts))
        if owner == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, owner)

        self._raise(
            ctx,
            TokenInitialized,
            name=name,
            symbol=symbol,
            owner=owner,
            recipients=list(recipients),
            amounts=list(amounts),
        )
        for recipient, amount in zip(recipients, amounts, strict=True):
            self._mint(ctx, recipient, amount)

        logger.info(
            "Initialized %s (%s) at %s with supply %d",
            name,
            symbol,
            self.address,
            self.total_supply,
            extra={"contract_address": self.address, "total_supply": self.total_supply},
        )

    async def upgrade_to(self, ctx: CallContext, implementation: str) -> None:
        if not self._state.initialized:
            raise NotInitialized(self.address)
        self._only(ctx, self.owner)
        self._raise(ctx, Upgraded, implementation=implementation)

    async def delegate(self, ctx: CallContext, delegatee: Address) -> None:
        previous = self.delegates(ctx.caller)
        self._raise(
            ctx,
            DelegateChanged,
            delegator=ctx.caller,
            from_delegate=previous,
            to_delegate=delegatee,
        )
        self._move_votes(ctx, previous, delegatee, self.balance_of(ctx.caller))

    def _after_transfer(
        self, ctx: CallContext, source: Address, destination: Address, amount: int
    ) -> None:
        self._move_votes(ctx, self.delegates(source), self.delegates(destination), amount)

    def _move_votes(self, ctx: CallContext, source: Address, destination: Address, amount: int) -> None:
        if source == destination or amount == 0:
            return
        if source != ZERO_ADDRESS:
            previous = self.get_votes(source)
            self._raise(
                ctx,
                DelegateVotesChanged,
                delegate=source,
                previous_votes=previous,
                new_votes=previous - amount,
            )
        if destination != ZERO_ADDRESS:
            previous = self.get_votes(destination)
            self._raise(
                ctx,
                DelegateVotesChanged,
                delegate=destination,
                previous_votes=previous,
                new_votes=previous + amount,
            )

    @handles(TokenInitialized)
    def _on_token_initialized(self, event: TokenInitialized) -> None:
        self._state = self._state.model_copy(
            update={
                "name": event.name,
                "symbol": event.symbol,
                "owner": event.owner,
                "initialized": True,
            }
        )

    @handles(Upgraded)
    def _on_upgraded(self, event: Upgraded) -> None:
        self._state = self._state.model_copy(update={"implementation": event.implementation})

    @handles(DelegateChanged)
    def _on_delegate_changed(self, event: DelegateChanged) -> None:
        delegates = dict(self._state.delegates)
        delegates[event.delegator] = event.to_delegate
        self._state = self._state.model_copy(update={"delegates": delegates})

    @handles(DelegateVotesChanged)
    def _on_delegate_votes_changed(self, event: DelegateVotesChanged) -> None:
        votes = dict(self._state.votes)
        votes[event.delegate] = event.new_votes
        self._state = self._state.model_copy(update={"votes": votes})


__all__ = [
    "DEFAULT_DECIMALS",
    "FungibleToken",
    "LegacyToken",
    "SuccessorToken",
    "SuccessorTokenState",
    "TokenState",
]
