"""Library exceptions for the tokenmigration package.

Exception Hierarchy:
    LedgerError (base)
    +-- OptimisticLockError
    +-- ContractNotFoundError
    +-- EventStoreError
    +-- SerializationError
    +-- EventVersionError
    +-- UnhandledEventError
    +-- TransactionError
    +-- InvalidConfigurationError
    +-- InvalidPhaseTransitionError
    +-- ContractRevert
        +-- Unauthorized
        +-- InsufficientBalance
        +-- InsufficientAllowance
        +-- InvalidRecipient
        +-- AlreadyInitialized
        +-- NotInitialized
        +-- LengthMismatch
        +-- IdenticalAssets
        +-- PairExists
        +-- InsufficientLiquidityMinted
        +-- SlippageExceeded
        +-- DeadlineExpired
        +-- InvalidReceipt
        +-- AlreadyMigrated
        +-- AlreadyDeployed
        +-- NoTokensToDeploy
        +-- NoEthToDeploy

A ContractRevert raised anywhere inside a ledger transaction aborts the
whole transaction; nothing it did is committed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tokenmigration.types import Address


class LedgerError(Exception):
    """Base exception for tokenmigration library."""

    pass


class OptimisticLockError(LedgerError):
    """Raised when a contract stream changed since it was loaded."""

    def __init__(self, address: str, expected_version: int, actual_version: int) -> None:
        self.address = address
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Optimistic lock error for contract {address}: "
            f"expected version {expected_version}, but current version is {actual_version}"
        )


class ContractNotFoundError(LedgerError):
    """Raised when no contract has been deployed at an address."""

    def __init__(self, address: str, contract_type: str | None = None) -> None:
        self.address = address
        self.contract_type = contract_type
        type_info = f" of type {contract_type}" if contract_type else ""
        super().__init__(f"Contract{type_info} not found: {address}")


class EventStoreError(LedgerError):
    """Raised when there's an error in the event store."""

    pass


class SerializationError(LedgerError):
    """Raised when event serialization or deserialization fails."""

    def __init__(self, event_type: str, message: str) -> None:
        self.event_type = event_type
        super().__init__(f"Serialization error for {event_type}: {message}")


class EventVersionError(LedgerError):
    """
    Raised when a new event does not carry the next sequence number.

    Attributes:
        expected_version: The version that was expected (current version + 1)
        actual_version: The version found in the event
        address: Contract being updated
    """

    def __init__(self, expected_version: int, actual_version: int, address: str) -> None:
        self.expected_version = expected_version
        self.actual_version = actual_version
        self.address = address
        super().__init__(
            f"Event version mismatch for contract {address}: "
            f"expected version {expected_version}, got {actual_version}"
        )


class UnhandledEventError(LedgerError):
    """Raised when a contract replays an event type it has no handler for."""

    def __init__(self, event_type: str, contract_class: str, available_handlers: list[str]) -> None:
        self.event_type = event_type
        self.contract_class = contract_class
        self.available_handlers = available_handlers
        handlers_str = ", ".join(available_handlers) if available_handlers else "none"
        super().__init__(
            f"No handler registered for event type '{event_type}' "
            f"in {contract_class}. Available handlers: {handlers_str}."
        )


class TransactionError(LedgerError):
    """Raised when a transaction is used after it has been closed."""

    pass


class InvalidConfigurationError(LedgerError):
    """Raised when migration or ledger configuration is inconsistent."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class InvalidPhaseTransitionError(LedgerError):
    """Raised when the migration state machine is asked for an illegal transition."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition migration from {current} to {target}")


# =============================================================================
# Contract reverts
# =============================================================================


class ContractRevert(LedgerError):
    """
    Base class for failures raised by contract code.

    Attributes:
        contract: Address of the contract that reverted (None before deployment)
    """

    def __init__(self, contract: Address | None, message: str) -> None:
        self.contract = contract
        super().__init__(message)


class Unauthorized(ContractRevert):
    """Raised when a caller is not allowed to invoke an operation."""

    def __init__(self, contract: Address | None, caller: str, required: str) -> None:
        self.caller = caller
        self.required = required
        super().__init__(contract, f"Caller {caller} is not authorized (requires {required})")


class InsufficientBalance(ContractRevert):
    """Raised when an account does not hold enough of an asset."""

    def __init__(self, contract: Address | None, account: str, balance: int, required: int) -> None:
        self.account = account
        self.balance = balance
        self.required = required
        super().__init__(
            contract, f"Account {account} holds {balance}, but {required} is required"
        )


class InsufficientAllowance(ContractRevert):
    """Raised when a spender has not been approved for enough of an asset."""

    def __init__(
        self,
        contract: Address | None,
        owner: str,
        spender: str,
        allowance: int,
        required: int,
    ) -> None:
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.required = required
        super().__init__(
            contract,
            f"Spender {spender} may move {allowance} from {owner}, but {required} is required",
        )


class InvalidRecipient(ContractRevert):
    """Raised when value would be sent to a reserved address."""

    def __init__(self, contract: Address | None, recipient: str) -> None:
        self.recipient = recipient
        super().__init__(contract, f"Invalid recipient: {recipient}")


class AlreadyInitialized(ContractRevert):
    """Raised when a one-time initializer runs a second time."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, f"Contract {contract} is already initialized")


class NotInitialized(ContractRevert):
    """Raised when a contract is used before its initializer ran."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, f"Contract {contract} is not initialized")


class LengthMismatch(ContractRevert):
    """Raised when recipient and amount lists differ in length."""

    def __init__(self, contract: Address | None, recipients: int, amounts: int) -> None:
        self.recipients = recipients
        self.amounts = amounts
        super().__init__(
            contract, f"Length mismatch: {recipients} recipients but {amounts} amounts"
        )


class IdenticalAssets(ContractRevert):
    """Raised when a pair is requested between an asset and itself."""

    def __init__(self, contract: Address | None, asset: str) -> None:
        self.asset = asset
        super().__init__(contract, f"Cannot pair asset {asset} with itself")


class PairExists(ContractRevert):
    """Raised when creating a pair that already exists."""

    def __init__(self, contract: Address | None, pair: str) -> None:
        self.pair = pair
        super().__init__(contract, f"Pair already exists: {pair}")


class InsufficientLiquidityMinted(ContractRevert):
    """Raised when a deposit would mint no pool receipts."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, "Insufficient liquidity minted")


class SlippageExceeded(ContractRevert):
    """Raised when a deposit would use less than the caller's minimum."""

    def __init__(self, contract: Address | None, asset: str, amount: int, minimum: int) -> None:
        self.asset = asset
        self.amount = amount
        self.minimum = minimum
        super().__init__(
            contract, f"Slippage exceeded for {asset}: {amount} is below minimum {minimum}"
        )


class DeadlineExpired(ContractRevert):
    """Raised when a call arrives after its deadline."""

    def __init__(self, contract: Address | None, deadline: int, timestamp: int) -> None:
        self.deadline = deadline
        self.timestamp = timestamp
        super().__init__(contract, f"Deadline {deadline} expired at {timestamp}")


class InvalidReceipt(ContractRevert):
    """Raised when a pool receipt does not belong to the caller or pair."""

    def __init__(self, contract: Address | None, reason: str) -> None:
        self.reason = reason
        super().__init__(contract, f"Invalid receipt: {reason}")


# =============================================================================
# Migration signals
# =============================================================================


class AlreadyMigrated(ContractRevert):
    """Raised when migrate() is invoked after the single allowed run."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, f"Migration already performed by {contract}")


class AlreadyDeployed(ContractRevert):
    """Raised when the successor asset would be deployed a second time."""

    def __init__(self, contract: Address | None, asset: str) -> None:
        self.asset = asset
        super().__init__(contract, f"Successor asset already deployed at {asset}")


class NoTokensToDeploy(ContractRevert):
    """Raised when the liquidity step has no successor-asset amount to deposit."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, "No successor-asset tokens to deploy as liquidity")


class NoEthToDeploy(ContractRevert):
    """Raised when the liquidity step has no base currency to deposit."""

    def __init__(self, contract: Address | None) -> None:
        super().__init__(contract, "No base currency to deploy as liquidity")


__all__ = [
    "LedgerError",
    "OptimisticLockError",
    "ContractNotFoundError",
    "EventStoreError",
    "SerializationError",
    "EventVersionError",
    "UnhandledEventError",
    "TransactionError",
    "InvalidConfigurationError",
    "InvalidPhaseTransitionError",
    "ContractRevert",
    "Unauthorized",
    "InsufficientBalance",
    "InsufficientAllowance",
    "InvalidRecipient",
    "AlreadyInitialized",
    "NotInitialized",
    "LengthMismatch",
    "IdenticalAssets",
    "PairExists",
    "InsufficientLiquidityMinted",
    "SlippageExceeded",
    "DeadlineExpired",
    "InvalidReceipt",
    "AlreadyMigrated",
    "AlreadyDeployed",
    "NoTokensToDeploy",
    "NoEthToDeploy",
]
