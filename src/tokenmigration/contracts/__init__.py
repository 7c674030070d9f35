"""
Event-sourced contracts simulated on the ledger.

Importing this package registers every contract type, so any address can
be rebuilt from its stored events.
"""

from tokenmigration.contracts.accounts import AccountBook, AccountBookState
from tokenmigration.contracts.base import Contract, register_contract
from tokenmigration.contracts.claim import ClaimDistributor, ClaimDistributorState
from tokenmigration.contracts.decorators import get_handled_event_type, handles
from tokenmigration.contracts.pool import (
    BurnedReceipt,
    LiquidityPair,
    LiquidityReceipt,
    PoolFactory,
    PoolRouter,
    pair_key,
    quote,
)
from tokenmigration.contracts.registry import (
    ContractRegistry,
    DuplicateContractTypeError,
    default_contract_registry,
)
from tokenmigration.contracts.token import (
    FungibleToken,
    LegacyToken,
    SuccessorToken,
    SuccessorTokenState,
    TokenState,
)

__all__ = [
    "AccountBook",
    "AccountBookState",
    "BurnedReceipt",
    "ClaimDistributor",
    "ClaimDistributorState",
    "Contract",
    "ContractRegistry",
    "DuplicateContractTypeError",
    "FungibleToken",
    "LegacyToken",
    "LiquidityPair",
    "LiquidityReceipt",
    "PoolFactory",
    "PoolRouter",
    "SuccessorToken",
    "SuccessorTokenState",
    "TokenState",
    "default_contract_registry",
    "get_handled_event_type",
    "handles",
    "pair_key",
    "quote",
    "register_contract",
]
