"""
Events raised by the migration orchestrator.

``PoolCreated`` is the notification off-ledger indexers watch for; it is
raised only when the migration actually created the pool.
"""

from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.registry import register_event
from tokenmigration.migration.config import MigrationConfig


@register_event
class OrchestratorConfigured(LedgerEvent):
    config: MigrationConfig


@register_event
class MigrationStarted(LedgerEvent):
    """The single-use migration right was claimed (PENDING -> COMPLETED)."""

    phase: str


@register_event
class ClaimContractDeployed(LedgerEvent):
    claim_contract: str
    legacy_asset: str


@register_event
class SuccessorAssetDeployed(LedgerEvent):
    asset: str
    total_supply: int


@register_event
class AirdropFunded(LedgerEvent):
    claim_contract: str
    amount: int


@register_event
class PoolCreated(LedgerEvent):
    pool: str
    asset: str
    base_asset: str


@register_event
class LiquidityLocked(LedgerEvent):
    pool: str
    token_amount: int
    native_amount: int
    receipts: int
    sink: str


@register_event
class MigrationCompleted(LedgerEvent):
    successor_asset: str
    claim_contract: str
    pool: str


__all__ = [
    "AirdropFunded",
    "ClaimContractDeployed",
    "LiquidityLocked",
    "MigrationCompleted",
    "MigrationStarted",
    "OrchestratorConfigured",
    "PoolCreated",
    "SuccessorAssetDeployed",
]
