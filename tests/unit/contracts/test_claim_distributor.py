"""Tests for the claim distributor."""

import pytest

from tokenmigration.contracts.claim import ClaimDistributor
from tokenmigration.contracts.token import LegacyToken
from tokenmigration.events.ledger import Deposited
from tokenmigration.exceptions import InsufficientAllowance, InvalidRecipient
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.types import ZERO_ADDRESS, Address


async def setup_token_and_distributor(ledger: Ledger, alice: Address) -> tuple[Address, Address]:
    async with ledger.transaction(alice) as tx:
        token = await tx.deploy(alice, LegacyToken, name="Asset", symbol="AST")
        await token.mint(tx.context(), alice, 100)
        claim = await tx.deploy(alice, ClaimDistributor, legacy_asset=token.address)
    return token.address, claim.address


class TestClaimDistributor:
    @pytest.mark.asyncio
    async def test_bound_to_legacy_asset(self, ledger: Ledger, alice: Address) -> None:
        token, claim = await setup_token_and_distributor(ledger, alice)
        distributor = await ledger.load(claim, ClaimDistributor)
        assert distributor.legacy_asset == token
        assert distributor.deposited(token) == 0

    @pytest.mark.asyncio
    async def test_zero_legacy_asset(self, ledger: Ledger, alice: Address) -> None:
        with pytest.raises(InvalidRecipient):
            await ledger.deploy(alice, ClaimDistributor, legacy_asset=ZERO_ADDRESS)

    @pytest.mark.asyncio
    async def test_deposit_pulls_approved_funds(self, ledger: Ledger, alice: Address) -> None:
        token_address, claim_address = await setup_token_and_distributor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(token_address, LegacyToken)
            await token.approve(tx.context(), claim_address, 30)
            claim = await tx.load(claim_address, ClaimDistributor)
            await claim.deposit(tx.context(), token_address, 30)
            deposited = [e for e in tx.events if isinstance(e, Deposited)]

        token = await ledger.load(token_address, LegacyToken)
        claim = await ledger.load(claim_address, ClaimDistributor)
        assert token.balance_of(claim_address) == 30
        assert token.balance_of(alice) == 70
        assert token.allowance(alice, claim_address) == 0
        assert claim.deposited(token_address) == 30
        assert deposited[0].depositor == alice

    @pytest.mark.asyncio
    async def test_deposit_without_approval(self, ledger: Ledger, alice: Address) -> None:
        token_address, claim_address = await setup_token_and_distributor(ledger, alice)
        with pytest.raises(InsufficientAllowance):
            async with ledger.transaction(alice) as tx:
                claim = await tx.load(claim_address, ClaimDistributor)
                await claim.deposit(tx.context(), token_address, 1)
        assert (await ledger.load(claim_address, ClaimDistributor)).deposited(token_address) == 0
