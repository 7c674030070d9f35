"""Tests for the legacy and successor token contracts."""

from __future__ import annotations

import pytest

from tokenmigration.contracts.token import LegacyToken, SuccessorToken
from tokenmigration.exceptions import (
    AlreadyInitialized,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidRecipient,
    LengthMismatch,
    NotInitialized,
    Unauthorized,
)
from tokenmigration.ledger.ledger import Ledger
from tokenmigration.types import ZERO_ADDRESS, Address, account_address

CAROL = account_address("carol")


async def legacy_with_balance(ledger: Ledger, owner: Address, holder: Address, amount: int) -> Address:
    async with ledger.transaction(owner) as tx:
        token = await tx.deploy(owner, LegacyToken, name="Legacy", symbol="OLD")
        await token.mint(tx.context(), holder, amount)
    return token.address


async def bare_successor(ledger: Ledger, deployer: Address) -> Address:
    return await ledger.deploy(deployer, SuccessorToken)


class TestLegacyToken:
    @pytest.mark.asyncio
    async def test_mint_and_transfer(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 100)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, LegacyToken)
            assert await token.transfer(tx.context(), bob, 40)

        token = await ledger.load(address, LegacyToken)
        assert token.balance_of(alice) == 60
        assert token.balance_of(bob) == 40
        assert token.total_supply == 100
        assert token.decimals == 18

    @pytest.mark.asyncio
    async def test_transfer_to_zero_address(self, ledger: Ledger, alice: Address) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 1)
        with pytest.raises(InvalidRecipient):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, LegacyToken)
                await token.transfer(tx.context(), ZERO_ADDRESS, 1)

    @pytest.mark.asyncio
    async def test_negative_transfer(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 1)
        with pytest.raises(ValueError):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, LegacyToken)
                await token.transfer(tx.context(), bob, -1)

    @pytest.mark.asyncio
    async def test_transfer_from_spends_allowance(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 100)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, LegacyToken)
            await token.approve(tx.context(), bob, 30)

        async with ledger.transaction(bob) as tx:
            token = await tx.load(address, LegacyToken)
            await token.transfer_from(tx.context(), alice, CAROL, 20)

        token = await ledger.load(address, LegacyToken)
        assert token.allowance(alice, bob) == 10
        assert token.balance_of(CAROL) == 20

    @pytest.mark.asyncio
    async def test_transfer_from_beyond_allowance(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 100)
        with pytest.raises(InsufficientAllowance) as exc_info:
            async with ledger.transaction(bob) as tx:
                token = await tx.load(address, LegacyToken)
                await token.transfer_from(tx.context(), alice, bob, 1)
        assert exc_info.value.allowance == 0
        assert exc_info.value.spender == bob

    @pytest.mark.asyncio
    async def test_transfer_from_beyond_balance(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 5)
        with pytest.raises(InsufficientBalance):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, LegacyToken)
                await token.approve(tx.context(), bob, 10)
                await token.transfer_from(tx.context(bob), alice, bob, 10)
        assert (await ledger.load(address, LegacyToken)).allowance(alice, bob) == 0

    @pytest.mark.asyncio
    async def test_negative_allowance(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 5)
        with pytest.raises(ValueError):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, LegacyToken)
                await token.approve(tx.context(), bob, -1)

    @pytest.mark.asyncio
    async def test_transfer_ownership(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await legacy_with_balance(ledger, alice, alice, 5)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, LegacyToken)
            await token.transfer_ownership(tx.context(), bob)

        with pytest.raises(Unauthorized):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, LegacyToken)
                await token.mint(tx.context(), alice, 1)

        assert (await ledger.load(address, LegacyToken)).owner == bob


class TestSuccessorTokenInitialize:
    @pytest.mark.asyncio
    async def test_mints_distribution_and_sets_owner(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        address = await bare_successor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, SuccessorToken)
            await token.initialize(tx.context(), "Successor", "NEW", bob, [alice, CAROL], [7, 3])

        token = await ledger.load(address, SuccessorToken)
        assert token.initialized
        assert token.owner == bob
        assert token.total_supply == 10
        assert token.balance_of(alice) == 7
        assert token.balance_of(CAROL) == 3
        assert token.name == "Successor"

    @pytest.mark.asyncio
    async def test_only_deployer(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await bare_successor(ledger, alice)
        with pytest.raises(Unauthorized):
            async with ledger.transaction(bob) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.initialize(tx.context(), "S", "S", bob, [bob], [1])

    @pytest.mark.asyncio
    async def test_second_initialize(self, ledger: Ledger, alice: Address) -> None:
        address = await bare_successor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, SuccessorToken)
            await token.initialize(tx.context(), "S", "S", alice, [alice], [1])

        with pytest.raises(AlreadyInitialized):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.initialize(tx.context(), "S", "S", alice, [alice], [1])

    @pytest.mark.asyncio
    async def test_length_mismatch(self, ledger: Ledger, alice: Address) -> None:
        address = await bare_successor(ledger, alice)
        with pytest.raises(LengthMismatch) as exc_info:
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.initialize(tx.context(), "S", "S", alice, [alice, CAROL], [1])
        assert (exc_info.value.recipients, exc_info.value.amounts) == (2, 1)

    @pytest.mark.asyncio
    async def test_zero_owner(self, ledger: Ledger, alice: Address) -> None:
        address = await bare_successor(ledger, alice)
        with pytest.raises(InvalidRecipient):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.initialize(tx.context(), "S", "S", ZERO_ADDRESS, [alice], [1])

    @pytest.mark.asyncio
    async def test_zero_recipient(self, ledger: Ledger, alice: Address) -> None:
        address = await bare_successor(ledger, alice)
        with pytest.raises(InvalidRecipient):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.initialize(tx.context(), "S", "S", alice, [ZERO_ADDRESS], [1])
        assert not (await ledger.load(address, SuccessorToken)).initialized


class TestSuccessorTokenGovernance:
    @pytest.mark.asyncio
    async def test_votes_follow_delegation_and_transfers(
        self, ledger: Ledger, alice: Address, bob: Address
    ) -> None:
        address = await bare_successor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, SuccessorToken)
            await token.initialize(tx.context(), "S", "S", alice, [alice], [100])
            await token.delegate(tx.context(), bob)
            assert token.get_votes(bob) == 100
            await token.transfer(tx.context(), CAROL, 40)

        token = await ledger.load(address, SuccessorToken)
        assert token.delegates(alice) == bob
        assert token.get_votes(bob) == 60
        assert token.get_votes(CAROL) == 0

    @pytest.mark.asyncio
    async def test_upgrade_requires_owner(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await bare_successor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            token = await tx.load(address, SuccessorToken)
            await token.initialize(tx.context(), "S", "S", bob, [alice], [1])

        with pytest.raises(Unauthorized):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.upgrade_to(tx.context(), "SuccessorToken/v2")

        async with ledger.transaction(bob) as tx:
            token = await tx.load(address, SuccessorToken)
            await token.upgrade_to(tx.context(), "SuccessorToken/v2")

        assert (await ledger.load(address, SuccessorToken)).implementation == "SuccessorToken/v2"

    @pytest.mark.asyncio
    async def test_upgrade_before_initialize(self, ledger: Ledger, alice: Address) -> None:
        address = await bare_successor(ledger, alice)
        with pytest.raises(NotInitialized):
            async with ledger.transaction(alice) as tx:
                token = await tx.load(address, SuccessorToken)
                await token.upgrade_to(tx.context(), "SuccessorToken/v2")

    @pytest.mark.asyncio
    async def test_replay_matches_live_state(self, ledger: Ledger, alice: Address, bob: Address) -> None:
        address = await bare_successor(ledger, alice)
        async with ledger.transaction(alice) as tx:
            live = await tx.load(address, SuccessorToken)
            await live.initialize(tx.context(), "S", "S", alice, [alice, bob], [5, 6])
            await live.delegate(tx.context(), alice)

        replayed = await ledger.load(address, SuccessorToken)
        assert replayed.state == live.state
        assert replayed.version == live.version
