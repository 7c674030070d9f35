"""
Base classes for ledger events.

Ledger events are immutable records of state changes made by contracts.
A contract's state is nothing more than the replay of its own events, and
a ledger transaction commits the events of every contract it touched as a
single unit.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LedgerEvent(BaseModel):
    """
    An event in one contract's stream.

    ``event_type`` is always the class name; it is the key the SQLite store
    writes beside the payload and the event registry resolves on read.

    Attributes:
        event_id: Unique identifier for this event instance
        event_type: Name of the event class
        event_version: Schema version for this event type
        occurred_at: Ledger time at which the event was raised (UTC)
        contract_address: Address of the contract whose stream holds the event
        contract_type: Type of contract (e.g., 'SuccessorToken')
        sequence: Version of the contract stream after this event
        transaction_id: Transaction that raised the event
        sender: Immediate caller of the operation that raised the event
        metadata: Free-form annotations

    Example:
        >>> @register_event
        ... class Transfer(LedgerEvent):
        ...     source: str
        ...     destination: str
        ...     amount: int
        ...
        >>> Transfer(
        ...     contract_address=token,
        ...     contract_type="SuccessorToken",
        ...     source=ZERO_ADDRESS,
        ...     destination=holder,
        ...     amount=100,
        ... ).event_type
        'Transfer'
    """

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=uuid4)
    event_type: str = ""
    event_version: int = Field(default=1, ge=1)
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    contract_address: str
    contract_type: str
    sequence: int = Field(default=1, ge=1)

    transaction_id: UUID | None = None
    sender: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _stamp_event_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("event_type") != cls.__name__:
            data = {**data, "event_type": cls.__name__}
        return data

    def __str__(self) -> str:
        return f"{self.event_type}@{self.contract_address}#{self.sequence}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(contract_address={self.contract_address!r}, "
            f"sequence={self.sequence}, transaction_id={self.transaction_id!r})"
        )

    def with_sequence(self, sequence: int) -> Self:
        return self.model_copy(update={"sequence": sequence})

    def with_metadata(self, **kwargs: Any) -> Self:
        """Copy of the event with ``kwargs`` merged into its metadata."""
        return self.model_copy(update={"metadata": {**self.metadata, **kwargs}})

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Raises:
            ValidationError: If ``data`` does not match the event's schema
        """
        return cls.model_validate(data)

    def is_correlated_with(self, event: LedgerEvent) -> bool:
        """True when both events were raised by the same transaction."""
        return self.transaction_id is not None and self.transaction_id == event.transaction_id
