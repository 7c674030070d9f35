"""Tests for addresses and address derivation."""

import pytest

from tokenmigration.types import (
    ACCOUNT_BOOK_ADDRESS,
    BURN_ADDRESS,
    NATIVE_ASSET,
    RESERVED_ADDRESSES,
    ZERO_ADDRESS,
    account_address,
    derive_contract_address,
    is_address,
    to_address,
)


class TestToAddress:
    def test_lowercases_mixed_case(self) -> None:
        raw = "0x" + "AbCd" * 10
        assert to_address(raw) == "0x" + "abcd" * 10

    def test_strips_whitespace(self) -> None:
        assert to_address("  " + ZERO_ADDRESS + "\n") == ZERO_ADDRESS

    @pytest.mark.parametrize(
        "value",
        ["", "0x", "0x123", "1234567890" * 4, "0x" + "g" * 40, "0x" + "a" * 41],
    )
    def test_rejects_malformed(self, value: str) -> None:
        with pytest.raises(ValueError):
            to_address(value)

    def test_rejects_non_string(self) -> None:
        with pytest.raises(ValueError, match="must be a string"):
            to_address(42)  # type: ignore[arg-type]

    def test_is_address(self) -> None:
        assert is_address(BURN_ADDRESS)
        assert is_address("0x" + "A" * 40)
        assert not is_address("not an address")
        assert not is_address(None)


class TestReservedAddresses:
    def test_all_distinct(self) -> None:
        assert len(RESERVED_ADDRESSES) == 4
        assert {ZERO_ADDRESS, BURN_ADDRESS, NATIVE_ASSET, ACCOUNT_BOOK_ADDRESS} == RESERVED_ADDRESSES

    def test_reserved_addresses_are_well_formed(self) -> None:
        for address in RESERVED_ADDRESSES:
            assert to_address(address) == address


class TestDerivation:
    def test_contract_address_is_deterministic(self) -> None:
        deployer = account_address("deployer")
        assert derive_contract_address(deployer, 0) == derive_contract_address(deployer, 0)

    def test_contract_address_depends_on_nonce_and_deployer(self) -> None:
        a = account_address("a")
        b = account_address("b")
        assert derive_contract_address(a, 0) != derive_contract_address(a, 1)
        assert derive_contract_address(a, 0) != derive_contract_address(b, 0)

    def test_derived_addresses_are_valid(self) -> None:
        assert is_address(derive_contract_address(account_address("x"), 7))
        assert is_address(account_address("x"))

    def test_account_address_differs_from_contract_address(self) -> None:
        assert account_address("x") != derive_contract_address(account_address("x"), 0)
