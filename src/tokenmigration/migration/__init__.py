"""
One-time migration from a legacy token to its successor.

- MigrationConfig / FixedAllocationLedger: the fixed parameters
- MigrationPhase: PENDING -> COMPLETED
- SuccessorAssetDeployer, ClaimFunding, LiquidityPoolManager: the steps
- MigrationOrchestrator: the on-ledger contract sequencing them
- MigrationService: off-ledger driver producing a MigrationReport
"""

from tokenmigration.migration.allocation import FixedAllocationLedger
from tokenmigration.migration.claims import ClaimFunding
from tokenmigration.migration.config import MigrationConfig
from tokenmigration.migration.deployer import SuccessorAssetDeployer
from tokenmigration.migration.events import (
    AirdropFunded,
    ClaimContractDeployed,
    LiquidityLocked,
    MigrationCompleted,
    MigrationStarted,
    OrchestratorConfigured,
    PoolCreated,
    SuccessorAssetDeployed,
)
from tokenmigration.migration.liquidity import LiquidityPoolManager, LockedLiquidity
from tokenmigration.migration.orchestrator import MigrationOrchestrator, OrchestratorState
from tokenmigration.migration.service import MigrationReport, MigrationService
from tokenmigration.migration.state import MigrationPhase

__all__ = [
    "AirdropFunded",
    "ClaimContractDeployed",
    "ClaimFunding",
    "FixedAllocationLedger",
    "LiquidityLocked",
    "LiquidityPoolManager",
    "LockedLiquidity",
    "MigrationCompleted",
    "MigrationConfig",
    "MigrationOrchestrator",
    "MigrationPhase",
    "MigrationReport",
    "MigrationService",
    "MigrationStarted",
    "OrchestratorConfigured",
    "OrchestratorState",
    "PoolCreated",
    "SuccessorAssetDeployed",
    "SuccessorAssetDeployer",
]
