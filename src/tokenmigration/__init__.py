"""
tokenmigration - One-time, atomic migration of a legacy token to its successor.

This library provides:
- An event-sourced ledger with all-or-nothing transactions
- Simulated contracts: base-currency account book, legacy and successor
  tokens, claim distributor, pool factory, pairs and router
- The migration orchestrator and the components it sequences
- In-memory and SQLite event stores, an in-memory event bus and a pool index
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("token-migration")
except PackageNotFoundError:
    # Package not installed (running from source without install)
    __version__ = "0.0.0.dev0"

# Event bus
from tokenmigration.bus import EventBus, EventHandlerFunc, EventSubscriber, InMemoryEventBus

# Contracts (importing registers every contract type)
from tokenmigration.contracts import (
    AccountBook,
    BurnedReceipt,
    ClaimDistributor,
    Contract,
    LegacyToken,
    LiquidityPair,
    LiquidityReceipt,
    PoolFactory,
    PoolRouter,
    SuccessorToken,
    handles,
    register_contract,
)

# Events
from tokenmigration.events import LedgerEvent, register_event

# Exceptions
from tokenmigration.exceptions import (
    AlreadyDeployed,
    AlreadyMigrated,
    ContractNotFoundError,
    ContractRevert,
    EventStoreError,
    InvalidConfigurationError,
    InvalidPhaseTransitionError,
    LedgerError,
    LengthMismatch,
    NoEthToDeploy,
    NoTokensToDeploy,
    OptimisticLockError,
    TransactionError,
    Unauthorized,
)

# Ledger
from tokenmigration.ledger import CallContext, Ledger, LedgerSettings, Transaction

# Migration
from tokenmigration.migration import (
    FixedAllocationLedger,
    MigrationConfig,
    MigrationOrchestrator,
    MigrationPhase,
    MigrationReport,
    MigrationService,
)

# Projections
from tokenmigration.projections import PoolIndex

# Stores
from tokenmigration.stores import (
    CommitBatch,
    EventStore,
    InMemoryEventStore,
    ReadOptions,
    SQLiteEventStore,
    StoredEvent,
)

# Types
from tokenmigration.types import (
    BURN_ADDRESS,
    NATIVE_ASSET,
    ZERO_ADDRESS,
    Address,
    account_address,
    to_address,
)

__all__ = [
    "__version__",
    # Types
    "Address",
    "BURN_ADDRESS",
    "NATIVE_ASSET",
    "ZERO_ADDRESS",
    "account_address",
    "to_address",
    # Events
    "LedgerEvent",
    "register_event",
    # Exceptions
    "AlreadyDeployed",
    "AlreadyMigrated",
    "ContractNotFoundError",
    "ContractRevert",
    "EventStoreError",
    "InvalidConfigurationError",
    "InvalidPhaseTransitionError",
    "LedgerError",
    "LengthMismatch",
    "NoEthToDeploy",
    "NoTokensToDeploy",
    "OptimisticLockError",
    "TransactionError",
    "Unauthorized",
    # Stores
    "CommitBatch",
    "EventStore",
    "InMemoryEventStore",
    "ReadOptions",
    "SQLiteEventStore",
    "StoredEvent",
    # Bus
    "EventBus",
    "EventHandlerFunc",
    "EventSubscriber",
    "InMemoryEventBus",
    # Contracts
    "AccountBook",
    "BurnedReceipt",
    "ClaimDistributor",
    "Contract",
    "LegacyToken",
    "LiquidityPair",
    "LiquidityReceipt",
    "PoolFactory",
    "PoolRouter",
    "SuccessorToken",
    "handles",
    "register_contract",
    # Ledger
    "CallContext",
    "Ledger",
    "LedgerSettings",
    "Transaction",
    # Migration
    "FixedAllocationLedger",
    "MigrationConfig",
    "MigrationOrchestrator",
    "MigrationPhase",
    "MigrationReport",
    "MigrationService",
    # Projections
    "PoolIndex",
]
