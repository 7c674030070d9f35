"""
The account book: base-currency balances and deployer nonces.

There is exactly one account book per ledger, at ``ACCOUNT_BOOK_ADDRESS``.
Any account or contract can receive base currency at any time; value only
leaves an account when that account is the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.decorators import handles
from tokenmigration.events.ledger import NativeCredited, NativeTransferred, NonceConsumed
from tokenmigration.exceptions import InsufficientBalance, InvalidRecipient, Unauthorized
from tokenmigration.types import RESERVED_ADDRESSES, ZERO_ADDRESS, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext


class AccountBookState(BaseModel):
    balances: dict[str, int] = Field(default_factory=dict)
    nonces: dict[str, int] = Field(default_factory=dict)
    total_issued: int = 0


@register_contract
class AccountBook(Contract[AccountBookState]):
    """System contract holding every account's base-currency balance."""

    def _get_initial_state(self) -> AccountBookState:
        return AccountBookState()

    def balance_of(self, account: str) -> int:
        return self._state.balances.get(account, 0)

    def nonce_of(self, account: str) -> int:
        return self._state.nonces.get(account, 0)

    @property
    def total_issued(self) -> int:
        return self._state.total_issued

    async def credit(self, ctx: CallContext, account: Address, amount: int) -> None:
        """Create base currency. Only the ledger itself (the zero address) may do this."""
        if ctx.caller != ZERO_ADDRESS:
            raise Unauthorized(self.address, ctx.caller, "ledger")
        if amount <= 0:
            raise ValueError(f"Credit amount must be positive, got {amount}")
        if account in RESERVED_ADDRESSES:
            raise InvalidRecipient(self.address, account)
        self._raise(ctx, NativeCredited, account=account, amount=amount)

    async def transfer(self, ctx: CallContext, destination: Address, amount: int) -> None:
        """Move ``amount`` from the caller to ``destination``."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative, got {amount}")
        if destination == ZERO_ADDRESS:
            raise InvalidRecipient(self.address, destination)
        balance = self.balance_of(ctx.caller)
        if balance < amount:
            raise InsufficientBalance(self.address, ctx.caller, balance, amount)
        self._raise(
            ctx,
            NativeTransferred,
            source=ctx.caller,
            destination=destination,
            amount=amount,
        )

    async def consume_nonce(self, ctx: CallContext, created: Address) -> int:
        nonce = self.nonce_of(ctx.caller)
        self._raise(ctx, NonceConsumed, account=ctx.caller, nonce=nonce, created=created)
        return nonce

    @handles(NativeCredited)
    def _on_native_credited(self, event: NativeCredited) -> None:
        balances = dict(self._state.balances)
        balances[event.account] = balances.get(event.account, 0) + event.amount
        self._state = self._state.model_copy(
            update={
                "balances": balances,
                "total_issued": self._state.total_issued + event.amount,
            }
        )

    @handles(NativeTransferred)
    def _on_native_transferred(self, event: NativeTransferred) -> None:
        balances = dict(self._state.balances)
        balances[event.source] = balances.get(event.source, 0) - event.amount
        balances[event.destination] = balances.get(event.destination, 0) + event.amount
        self._state = self._state.model_copy(update={"balances": balances})

    @handles(NonceConsumed)
    def _on_nonce_consumed(self, event: NonceConsumed) -> None:
        nonces = dict(self._state.nonces)
        nonces[event.account] = event.nonce + 1
        self._state = self._state.model_copy(update={"nonces": nonces})


__all__ = ["AccountBook", "AccountBookState"]
