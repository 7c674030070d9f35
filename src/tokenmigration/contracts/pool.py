"""
Constant-product pools pairing a token with the base currency.

- PoolFactory: one pair per asset couple, created on demand
- LiquidityPair: reserves plus pool receipts; receipts cannot be transferred,
  only burned to the permanent sink with ``burn_receipt``
- PoolRouter: prices a deposit against current reserves, moves both assets
  into the pair, refunds surplus base currency and returns the receipt
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.decorators import handles
from tokenmigration.contracts.token import FungibleToken
from tokenmigration.events.ledger import (
    PairBound,
    PairCreated,
    ReceiptBurned,
    ReceiptsMinted,
    ReservesSynced,
    RouterBound,
)
from tokenmigration.exceptions import (
    ContractRevert,
    DeadlineExpired,
    IdenticalAssets,
    InsufficientLiquidityMinted,
    InvalidReceipt,
    InvalidRecipient,
    PairExists,
    SlippageExceeded,
)
from tokenmigration.types import BURN_ADDRESS, NATIVE_ASSET, ZERO_ADDRESS, Address

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidityReceipt:
    """Pool receipts minted to ``holder`` by one deposit."""

    pair: Address
    holder: Address
    amount: int
    token_amount: int = 0
    native_amount: int = 0


@dataclass(frozen=True)
class BurnedReceipt:
    """Receipts that now sit at the sink. Nothing can move them again."""

    pair: Address
    amount: int
    sink: Address = BURN_ADDRESS


def pair_key(asset_a: str, asset_b: str) -> str:
    first, second = sorted((asset_a, asset_b))
    return f"{first}:{second}"


def quote(amount: int, reserve_in: int, reserve_out: int) -> int:
    """Amount of the other asset that keeps the reserve ratio unchanged."""
    return amount * reserve_out // reserve_in


# =============================================================================
# Factory
# =============================================================================


class PoolFactoryState(BaseModel):
    pairs: dict[str, str] = Field(default_factory=dict)
    all_pairs: list[str] = Field(default_factory=list)


@register_contract
class PoolFactory(Contract[PoolFactoryState]):
    def _get_initial_state(self) -> PoolFactoryState:
        return PoolFactoryState()

    def get_pair(self, asset_a: str, asset_b: str) -> Address | None:
        """Pair for two assets in either order, or None."""
        pair = self._state.pairs.get(pair_key(asset_a, asset_b))
        return Address(pair) if pair else None

    @property
    def all_pairs(self) -> list[Address]:
        return [Address(p) for p in self._state.all_pairs]

    async def create_pair(self, ctx: CallContext, asset_a: Address, asset_b: Address) -> Address:
        """
        Deploy the pair for two assets.

        Raises:
            IdenticalAssets: If both assets are the same
            PairExists: If the pair was already created
        """
        if asset_a == asset_b:
            raise IdenticalAssets(self.address, asset_a)
        existing = self.get_pair(asset_a, asset_b)
        if existing is not None:
            raise PairExists(self.address, existing)
        if NATIVE_ASSET not in (asset_a, asset_b):
            raise ContractRevert(self.address, "Pairs must include the base currency")
        if ZERO_ADDRESS in (asset_a, asset_b):
            raise InvalidRecipient(self.address, ZERO_ADDRESS)

        token = asset_b if asset_a == NATIVE_ASSET else asset_a
        pair = await ctx.call_from(self.address).deploy(
            LiquidityPair,
            factory=self.address,
            token=token,
            base_asset=NATIVE_ASSET,
        )
        self._raise(
            ctx,
            PairCreated,
            asset_a=asset_a,
            asset_b=asset_b,
            pair=pair.address,
            index=len(self._state.all_pairs),
        )
        logger.info(
            "Created pair %s for %s/%s",
            pair.address,
            asset_a,
            asset_b,
            extra={"pair": pair.address, "asset_a": asset_a, "asset_b": asset_b},
        )
        return pair.address

    @handles(PairCreated)
    def _on_pair_created(self, event: PairCreated) -> None:
        pairs = dict(self._state.pairs)
        pairs[pair_key(event.asset_a, event.asset_b)] = event.pair
        self._state = self._state.model_copy(
            update={"pairs": pairs, "all_pairs": [*self._state.all_pairs, event.pair]}
        )


# =============================================================================
# Pair
# =============================================================================


class LiquidityPairState(BaseModel):
    factory: str | None = None
    token: str | None = None
    base_asset: str = NATIVE_ASSET
    reserve_token: int = 0
    reserve_native: int = 0
    receipts: dict[str, int] = Field(default_factory=dict)
    total_receipts: int = 0
    burned_receipts: int = 0


@register_contract
class LiquidityPair(Contract[LiquidityPairState]):
    """
    Reserves of one token and the base currency.

    Pool receipts have no transfer operation. The only way a holder can
    part with receipts is ``burn_receipt``, which parks them at the sink.
    """

    def _get_initial_state(self) -> LiquidityPairState:
        return LiquidityPairState()

    async def _construct(
        self,
        ctx: CallContext,
        *,
        factory: Address,
        token: Address,
        base_asset: Address = NATIVE_ASSET,
    ) -> None:
        self._only(ctx, factory, "factory")
        self._raise(ctx, PairBound, factory=factory, token=token, base_asset=base_asset)

    @property
    def factory(self) -> Address | None:
        return Address(self._state.factory) if self._state.factory else None

    @property
    def token(self) -> Address:
        return Address(self._state.token or ZERO_ADDRESS)

    @property
    def reserves(self) -> tuple[int, int]:
        """(token reserve, base-currency reserve)."""
        return self._state.reserve_token, self._state.reserve_native

    @property
    def total_receipts(self) -> int:
        return self._state.total_receipts

    @property
    def burned_receipts(self) -> int:
        return self._state.burned_receipts

    def receipt_balance(self, account: str) -> int:
        return self._state.receipts.get(account, 0)

    async def mint(self, ctx: CallContext, to: Address) -> LiquidityReceipt:
        """
        Mint receipts for whatever was sent to the pair since the last sync.

        The first deposit mints ``isqrt(token * native)`` receipts; later
        deposits mint in proportion to the smaller of the two contributions.

        Raises:
            InsufficientLiquidityMinted: If the deposit is worth no receipts
            InvalidRecipient: If ``to`` is the zero address or the sink
        """
        if to in (ZERO_ADDRESS, BURN_ADDRESS):
            raise InvalidRecipient(self.address, to)

        token = await ctx.load(self.token, FungibleToken)
        book = await ctx.account_book()
        balance_token = token.balance_of(self.address)
        balance_native = book.balance_of(self.address)
        reserve_token, reserve_native = self.reserves
        amount_token = balance_token - reserve_token
        amount_native = balance_native - reserve_native

        total = self._state.total_receipts
        if total == 0:
            liquidity = math.isqrt(amount_token * amount_native)
        else:
            liquidity = min(
                amount_token * total // reserve_token,
                amount_native * total // reserve_native,
            )
        if liquidity <= 0:
            raise InsufficientLiquidityMinted(self.address)

        self._raise(
            ctx,
            ReceiptsMinted,
            holder=to,
            amount=liquidity,
            token_amount=amount_token,
            native_amount=amount_native,
        )
        self._raise(ctx, ReservesSynced, reserve_token=balance_token, reserve_native=balance_native)
        return LiquidityReceipt(
            pair=self.address,
            holder=to,
            amount=liquidity,
            token_amount=amount_token,
            native_amount=amount_native,
        )

    async def burn_receipt(self, ctx: CallContext, receipt: LiquidityReceipt) -> BurnedReceipt:
        """
        Send the caller's receipts to the permanent sink.

        Raises:
            InvalidReceipt: If the receipt is for another pair, is not held
                by the caller, or exceeds the caller's receipt balance
        """
        if receipt.pair != self.address:
            raise InvalidReceipt(self.address, f"receipt belongs to pair {receipt.pair}")
        if receipt.holder != ctx.caller:
            raise InvalidReceipt(self.address, f"receipt is held by {receipt.holder}")
        if receipt.amount <= 0:
            raise InvalidReceipt(self.address, "amount must be positive")
        balance = self.receipt_balance(ctx.caller)
        if balance < receipt.amount:
            raise InvalidReceipt(
                self.address, f"caller holds {balance} receipts, not {receipt.amount}"
            )

        self._raise(
            ctx,
            ReceiptBurned,
            holder=ctx.caller,
            amount=receipt.amount,
            sink=BURN_ADDRESS,
        )
        logger.info(
            "Burned %d receipts of pair %s held by %s",
            receipt.amount,
            self.address,
            ctx.caller,
            extra={"pair": self.address, "holder": ctx.caller, "amount": receipt.amount},
        )
        return BurnedReceipt(pair=self.address, amount=receipt.amount)

    @handles(PairBound)
    def _on_pair_bound(self, event: PairBound) -> None:
        self._state = self._state.model_copy(
            update={
                "factory": event.factory,
                "token": event.token,
                "base_asset": event.base_asset,
            }
        )

    @handles(ReceiptsMinted)
    def _on_receipts_minted(self, event: ReceiptsMinted) -> None:
        receipts = dict(self._state.receipts)
        receipts[event.holder] = receipts.get(event.holder, 0) + event.amount
        self._state = self._state.model_copy(
            update={
                "receipts": receipts,
                "total_receipts": self._state.total_receipts + event.amount,
            }
        )

    @handles(ReservesSynced)
    def _on_reserves_synced(self, event: ReservesSynced) -> None:
        self._state = self._state.model_copy(
            update={
                "reserve_token": event.reserve_token,
                "reserve_native": event.reserve_native,
            }
        )

    @handles(ReceiptBurned)
    def _on_receipt_burned(self, event: ReceiptBurned) -> None:
        receipts = dict(self._state.receipts)
        receipts[event.holder] = receipts.get(event.holder, 0) - event.amount
        receipts[event.sink] = receipts.get(event.sink, 0) + event.amount
        self._state = self._state.model_copy(
            update={
                "receipts": receipts,
                "burned_receipts": self._state.burned_receipts + event.amount,
            }
        )


# =============================================================================
# Router
# =============================================================================


class PoolRouterState(BaseModel):
    factory: str | None = None


@register_contract
class PoolRouter(Contract[PoolRouterState]):
    def _get_initial_state(self) -> PoolRouterState:
        return PoolRouterState()

    async def _construct(self, ctx: CallContext, *, factory: Address) -> None:
        self._raise(ctx, RouterBound, factory=factory)

    @handles(RouterBound)
    def _on_router_bound(self, event: RouterBound) -> None:
        self._state = self._state.model_copy(update={"factory": event.factory})

    @property
    def factory(self) -> Address:
        return Address(self._state.factory or ZERO_ADDRESS)

    async def add_liquidity_native(
        self,
        ctx: CallContext,
        token: Address,
        amount_token_desired: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
    ) -> LiquidityReceipt:
        """
        Deposit a token and the attached base currency as paired liquidity.

        The token amount is pulled from the caller through its allowance to
        this router; ``ctx.value`` is the base currency the caller attached.
        Base currency the reserves do not need is refunded.

        Raises:
            DeadlineExpired: If the ledger time is past ``deadline``
            SlippageExceeded: If either amount would fall below its minimum
        """
        if ctx.timestamp > deadline:
            raise DeadlineExpired(self.address, deadline, ctx.timestamp)

        me = ctx.call_from(self.address)
        factory = await ctx.load(self.factory, PoolFactory)
        pair_address = factory.get_pair(token, NATIVE_ASSET)
        if pair_address is None:
            pair_address = await factory.create_pair(me, token, NATIVE_ASSET)
        pair = await ctx.load(pair_address, LiquidityPair)

        amount_token, amount_native = self._optimal_amounts(
            pair,
            token,
            amount_token_desired,
            ctx.value,
            amount_token_min,
            amount_native_min,
        )

        token_contract = await ctx.load(token, FungibleToken)
        await token_contract.transfer_from(me, ctx.caller, pair_address, amount_token)
        await ctx.transaction.transfer_native(self.address, pair_address, amount_native)
        receipt = await pair.mint(me, to)

        if ctx.value > amount_native:
            await ctx.transaction.transfer_native(
                self.address, ctx.caller, ctx.value - amount_native
            )

        logger.debug(
            "Added %d token and %d native to pair %s",
            amount_token,
            amount_native,
            pair_address,
            extra={
                "pair": pair_address,
                "token_amount": amount_token,
                "native_amount": amount_native,
                "receipts": receipt.amount,
            },
        )
        return receipt

    def _optimal_amounts(
        self,
        pair: LiquidityPair,
        token: Address,
        token_desired: int,
        native_desired: int,
        token_min: int,
        native_min: int,
    ) -> tuple[int, int]:
        reserve_token, reserve_native = pair.reserves
        if reserve_token == 0 and reserve_native == 0:
            return token_desired, native_desired

        native_optimal = quote(token_desired, reserve_token, reserve_native)
        if native_optimal <= native_desired:
            if native_optimal < native_min:
                raise SlippageExceeded(self.address, NATIVE_ASSET, native_optimal, native_min)
            return token_desired, native_optimal

        token_optimal = quote(native_desired, reserve_native, reserve_token)
        if token_optimal < token_min:
            raise SlippageExceeded(self.address, token, token_optimal, token_min)
        return token_optimal, native_desired


__all__ = [
    "BurnedReceipt",
    "LiquidityPair",
    "LiquidityPairState",
    "LiquidityReceipt",
    "PoolFactory",
    "PoolFactoryState",
    "PoolRouter",
    "PoolRouterState",
    "pair_key",
    "quote",
]
