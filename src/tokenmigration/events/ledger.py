"""
Events raised by the ledger's contracts.

Every event is registered with the default registry so persistent stores
can deserialize it. ``contract_type`` is filled in by the raising contract,
which lets token events such as ``Transfer`` be shared by every token kind.
"""

from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.registry import register_event

# =============================================================================
# Lifecycle
# =============================================================================


@register_event
class ContractDeployed(LedgerEvent):
    """First event of every contract stream."""

    deployer: str
    code: str


# =============================================================================
# Account book (base currency and nonces)
# =============================================================================


@register_event
class NativeCredited(LedgerEvent):
    """Base currency created out of thin air for genesis or test funding."""

    account: str
    amount: int


@register_event
class NativeTransferred(LedgerEvent):
    source: str
    destination: str
    amount: int


@register_event
class NonceConsumed(LedgerEvent):
    """A deployer spent a nonce creating a contract at ``created``."""

    account: str
    nonce: int
    created: str


# =============================================================================
# Fungible tokens
# =============================================================================


@register_event
class TokenConfigured(LedgerEvent):
    name: str
    symbol: str
    decimals: int
    owner: str


@register_event
class TokenInitialized(LedgerEvent):
    """One-time initialization of the successor asset."""

    name: str
    symbol: str
    owner: str
    recipients: list[str]
    amounts: list[int]


@register_event
class Transfer(LedgerEvent):
    """Balance movement; ``source`` is the zero address for mints."""

    source: str
    destination: str
    amount: int


@register_event
class Approval(LedgerEvent):
    owner: str
    spender: str
    amount: int


@register_event
class DelegateChanged(LedgerEvent):
    delegator: str
    from_delegate: str
    to_delegate: str


@register_event
class DelegateVotesChanged(LedgerEvent):
    delegate: str
    previous_votes: int
    new_votes: int


@register_event
class Upgraded(LedgerEvent):
    implementation: str


@register_event
class OwnershipTransferred(LedgerEvent):
    previous_owner: str
    new_owner: str


# =============================================================================
# Claim distributor
# =============================================================================


@register_event
class ClaimDistributorBound(LedgerEvent):
    legacy_asset: str


@register_event
class Deposited(LedgerEvent):
    asset: str
    depositor: str
    amount: int


# =============================================================================
# Pools
# =============================================================================


@register_event
class RouterBound(LedgerEvent):
    factory: str


@register_event
class PairCreated(LedgerEvent):
    asset_a: str
    asset_b: str
    pair: str
    index: int


@register_event
class PairBound(LedgerEvent):
    factory: str
    token: str
    base_asset: str


@register_event
class ReceiptsMinted(LedgerEvent):
    holder: str
    amount: int
    token_amount: int
    native_amount: int


@register_event
class ReceiptBurned(LedgerEvent):
    """Pool receipts moved to the permanent sink; never reversible."""

    holder: str
    amount: int
    sink: str


@register_event
class ReservesSynced(LedgerEvent):
    reserve_token: int
    reserve_native: int


__all__ = [
    "ContractDeployed",
    "NativeCredited",
    "NativeTransferred",
    "NonceConsumed",
    "TokenConfigured",
    "TokenInitialized",
    "Transfer",
    "Approval",
    "DelegateChanged",
    "DelegateVotesChanged",
    "Upgraded",
    "OwnershipTransferred",
    "ClaimDistributorBound",
    "Deposited",
    "RouterBound",
    "PairCreated",
    "PairBound",
    "ReceiptsMinted",
    "ReceiptBurned",
    "ReservesSynced",
]
