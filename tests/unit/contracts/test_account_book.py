"""Tests for the base-currency account book."""

import pytest

from tokenmigration.contracts.accounts import AccountBook
from tokenmigration.contracts.token import LegacyToken
from tokenmigration.exceptions import InsufficientBalance, InvalidRecipient
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.types import (
    ACCOUNT_BOOK_ADDRESS,
    BURN_ADDRESS,
    ZERO_ADDRESS,
    Address,
    derive_contract_address,
)


async def book(ledger: Ledger) -> AccountBook:
    return await ledger.load(ACCOUNT_BOOK_ADDRESS, AccountBook)


class TestCredit:
    @pytest.mark.asyncio
    async def test_faucet_tracks_total_issued(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        await ledger.faucet(alice, 100)
        await ledger.faucet(bob, 20)
        assert (await book(ledger)).total_issued == 120

    @pytest.mark.asyncio
    async def test_credit_must_be_positive(self, ledger: Ledger, alice: Address) -> None:
        with pytest.raises(ValueError):
            await ledger.faucet(alice, 0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("account", [ZERO_ADDRESS, BURN_ADDRESS, ACCOUNT_BOOK_ADDRESS])
    async def test_reserved_accounts_cannot_be_credited(
        self, ledger: Ledger, account: Address
    ) -> None:
        with pytest.raises(InvalidRecipient):
            await ledger.faucet(account, 1)


class TestTransfer:
    @pytest.mark.asyncio
    async def test_transfer_to_burn_address_is_allowed(
        self, ledger: Ledger, alice: Address
    ) -> None:
        await ledger.faucet(alice, 10)
        await ledger.transfer_native(alice, BURN_ADDRESS, 4)
        assert await ledger.native_balance(BURN_ADDRESS) == 4
        assert (await book(ledger)).total_issued == 10

    @pytest.mark.asyncio
    async def test_transfer_to_zero_address(self, ledger: Ledger, alice: Address) -> None:
        await ledger.faucet(alice, 10)
        with pytest.raises(InvalidRecipient):
            await ledger.transfer_native(alice, ZERO_ADDRESS, 1)
        assert await ledger.native_balance(alice) == 10

    @pytest.mark.asyncio
    async def test_negative_transfer(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        await ledger.faucet(alice, 10)
        with pytest.raises(ValueError):
            await ledger.transfer_native(alice, bob, -1)

    @pytest.mark.asyncio
    async def test_insufficient_balance_details(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        await ledger.faucet(alice, 3)
        with pytest.raises(InsufficientBalance) as exc_info:
            await ledger.transfer_native(alice, bob, 5)
        assert exc_info.value.balance == 3
        assert exc_info.value.required == 5


class TestNonces:
    @pytest.mark.asyncio
    async def test_nonces_are_per_deployer(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        first = await ledger.deploy(alice, LegacyToken, name="A", symbol="A")
        second = await ledger.deploy(alice, LegacyToken, name="B", symbol="B")
        other = await ledger.deploy(bob, LegacyToken, name="C", symbol="C")

        accounts = await book(ledger)
        assert accounts.nonce_of(alice) == 2
        assert accounts.nonce_of(bob) == 1
        assert first == derive_contract_address(alice, 0)
        assert second == derive_contract_address(alice, 1)
        assert other == derive_contract_address(bob, 0)
