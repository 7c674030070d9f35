"""Common type definitions and reserved addresses for the tokenmigration library."""

import hashlib
import re
from typing import NewType, TypeVar

from pydantic import BaseModel

# Type variable for contract state
TState = TypeVar("TState", bound=BaseModel)

# 20-byte account or contract identity, lowercase hex with 0x prefix
Address = NewType("Address", str)

_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-f]{40}$")

# Origin of mints and destination of ordinary token burns
ZERO_ADDRESS = Address("0x" + "0" * 40)

# Permanent sink for pool receipts; nothing can ever move value out of it
BURN_ADDRESS = Address("0x" + "0" * 36 + "dead")

# Identity of the base (native) currency when it appears as one side of a pair
NATIVE_ASSET = Address("0x" + "e" * 40)

# System contract holding base-currency balances and deployer nonces
ACCOUNT_BOOK_ADDRESS = Address("0x" + "0" * 39 + "1")

RESERVED_ADDRESSES = frozenset({ZERO_ADDRESS, BURN_ADDRESS, NATIVE_ASSET, ACCOUNT_BOOK_ADDRESS})


def to_address(value: str) -> Address:
    """
    Normalize and validate an address.

    Args:
        value: Hex address, with or without mixed case

    Returns:
        The lowercase address

    Raises:
        ValueError: If the value is not a 20-byte hex address
    """
    if not isinstance(value, str):
        raise ValueError(f"Address must be a string, got {type(value).__name__}")
    normalized = value.strip().lower()
    if not _ADDRESS_PATTERN.match(normalized):
        raise ValueError(f"Invalid address: {value!r}")
    return Address(normalized)


def is_address(value: object) -> bool:
    """Check whether a value is a well-formed address."""
    return isinstance(value, str) and bool(_ADDRESS_PATTERN.match(value.lower()))


def derive_contract_address(deployer: Address, nonce: int) -> Address:
    """
    Derive the address of a contract created by ``deployer`` at ``nonce``.

    The derivation is deterministic, so replaying a ledger reproduces the
    same addresses.
    """
    digest = hashlib.sha256(f"{deployer}:{nonce}".encode()).hexdigest()
    return Address("0x" + digest[-40:])


def account_address(label: str) -> Address:
    """Derive a stable externally-owned account address from a label."""
    digest = hashlib.sha256(f"account:{label}".encode()).hexdigest()
    return Address("0x" + digest[:40])
