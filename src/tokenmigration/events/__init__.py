"""Ledger event primitives: base class, registry and the contracts' events."""

from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.ledger import (
    Approval,
    ClaimDistributorBound,
    ContractDeployed,
    DelegateChanged,
    DelegateVotesChanged,
    Deposited,
    NativeCredited,
    NativeTransferred,
    NonceConsumed,
    OwnershipTransferred,
    PairBound,
    PairCreated,
    ReceiptBurned,
    ReceiptsMinted,
    ReservesSynced,
    RouterBound,
    TokenConfigured,
    TokenInitialized,
    Transfer,
    Upgraded,
)
from tokenmigration.events.registry import (
    DuplicateEventTypeError,
    EventRegistry,
    EventTypeNotFoundError,
    default_registry,
    get_event_class,
    register_event,
)

__all__ = [
    "LedgerEvent",
    "EventRegistry",
    "EventTypeNotFoundError",
    "DuplicateEventTypeError",
    "default_registry",
    "get_event_class",
    "register_event",
    "Approval",
    "ClaimDistributorBound",
    "ContractDeployed",
    "DelegateChanged",
    "DelegateVotesChanged",
    "Deposited",
    "NativeCredited",
    "NativeTransferred",
    "NonceConsumed",
    "OwnershipTransferred",
    "PairBound",
    "PairCreated",
    "ReceiptBurned",
    "ReceiptsMinted",
    "ReservesSynced",
    "RouterBound",
    "TokenConfigured",
    "TokenInitialized",
    "Transfer",
    "Upgraded",
]
