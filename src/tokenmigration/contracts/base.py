"""
Base class for event-sourced contracts.

A contract is the ledger's consistency boundary. Its state is rebuilt by
replaying its own event stream, and its commands validate their inputs,
then raise events that are applied immediately and journaled into the
enclosing transaction. Nothing reaches the event store until the
transaction commits.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from tokenmigration.contracts.decorators import handles
from tokenmigration.contracts.registry import default_contract_registry
from tokenmigration.events.base import LedgerEvent
from tokenmigration.events.ledger import ContractDeployed
from tokenmigration.exceptions import EventVersionError, Unauthorized, UnhandledEventError
from tokenmigration.types import Address, TState

if TYPE_CHECKING:
    from tokenmigration.ledger.transaction import CallContext

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent", bound=LedgerEvent)
TContract = TypeVar("TContract", bound="Contract[Any]")


class Contract(Generic[TState], ABC):
    """
    Base class for event-sourced contracts.

    Subclasses provide ``_get_initial_state`` and one ``@handles`` method per
    event type they raise. Commands take a ``CallContext`` as their first
    argument and call ``_raise`` to record state changes.

    Example:
        >>> class Counter(Contract[CounterState]):
        ...     def _get_initial_state(self) -> CounterState:
        ...         return CounterState()
        ...
        ...     async def increment(self, ctx: CallContext) -> None:
        ...         self._raise(ctx, Incremented, by=1)
        ...
        ...     @handles(Incremented)
        ...     def _on_incremented(self, event: Incremented) -> None:
        ...         self._state = self._state.model_copy(
        ...             update={"value": self._state.value + event.by}
        ...         )

    Attributes:
        contract_type: Type name stored next to the stream (defaults to class name)
    """

    contract_type: ClassVar[str] = ""
    _event_handlers: ClassVar[dict[type[LedgerEvent], str]]

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if "contract_type" not in cls.__dict__:
            cls.contract_type = cls.__name__
        cls._event_handlers = {}
        for name in dir(cls):
            method = getattr(cls, name, None)
            event_type = getattr(method, "_handles_event_type", None)
            if event_type is not None:
                cls._event_handlers[event_type] = name

    def __init__(self, address: Address) -> None:
        self._address = address
        self._version = 0
        self._deployer: Address | None = None
        self._uncommitted_events: list[LedgerEvent] = []
        self._state: TState = self._get_initial_state()

    @property
    def address(self) -> Address:
        return self._address

    @property
    def version(self) -> int:
        """Number of events applied, committed or not."""
        return self._version

    @property
    def committed_version(self) -> int:
        """Version of the stream as it was loaded from the store."""
        return self._version - len(self._uncommitted_events)

    @property
    def state(self) -> TState:
        return self._state

    @property
    def deployer(self) -> Address | None:
        return self._deployer

    @property
    def uncommitted_events(self) -> list[LedgerEvent]:
        return self._uncommitted_events.copy()

    @property
    def has_uncommitted_events(self) -> bool:
        return len(self._uncommitted_events) > 0

    @abstractmethod
    def _get_initial_state(self) -> TState:
        """State of a contract before any event has been applied."""

    async def _construct(self, ctx: CallContext, **kwargs: Any) -> None:
        """
        Constructor hook run once, right after deployment.

        Contracts that take constructor arguments override this and raise
        their configuration events here.
        """
        if kwargs:
            raise TypeError(
                f"{self.contract_type} takes no constructor arguments, got {sorted(kwargs)}"
            )

    def apply_event(self, event: LedgerEvent, is_new: bool = True) -> None:
        """
        Apply an event to the contract.

        Args:
            event: The event to apply
            is_new: False when replaying history from the store

        Raises:
            EventVersionError: If a new event does not carry the next sequence
            UnhandledEventError: If the contract has no handler for the event
        """
        if is_new and event.sequence != self._version + 1:
            raise EventVersionError(
                expected_version=self._version + 1,
                actual_version=event.sequence,
                address=self._address,
            )

        self._version = event.sequence
        self._apply(event)

        if is_new:
            self._uncommitted_events.append(event)

    def _apply(self, event: LedgerEvent) -> None:
        handler_name = self._event_handlers.get(type(event))
        if handler_name is None:
            raise UnhandledEventError(
                event_type=event.event_type,
                contract_class=self.__class__.__name__,
                available_handlers=[et.__name__ for et in self._event_handlers],
            )
        getattr(self, handler_name)(event)

    def load_from_history(self, events: list[LedgerEvent]) -> None:
        for event in events:
            self.apply_event(event, is_new=False)

    def mark_events_as_committed(self) -> None:
        self._uncommitted_events.clear()

    def _raise(self, ctx: CallContext, event_class: type[TEvent], **payload: Any) -> TEvent:
        """
        Create, apply and journal a new event.

        Fills in the stream and transaction metadata, so callers pass only
        the event's own fields.
        """
        event = event_class(
            contract_address=self._address,
            contract_type=self.contract_type,
            sequence=self._version + 1,
            transaction_id=ctx.transaction_id,
            sender=ctx.caller,
            occurred_at=ctx.occurred_at,
            **payload,
        )
        self.apply_event(event)
        ctx.record(event)
        return event

    def _only(self, ctx: CallContext, required: Address | None, role: str = "owner") -> None:
        """Revert unless the immediate caller is ``required``."""
        if required is None or ctx.caller != required:
            raise Unauthorized(self._address, ctx.caller, f"{role} {required}")

    @handles(ContractDeployed)
    def _on_contract_deployed(self, event: ContractDeployed) -> None:
        self._deployer = Address(event.deployer)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"address={self._address!r}, "
            f"version={self._version}, "
            f"uncommitted={len(self._uncommitted_events)})"
        )


def register_contract(contract_class: type[TContract]) -> type[TContract]:
    """
    Register a contract class so it can be rebuilt from the store.

    Example:
        >>> @register_contract
        ... class FungibleToken(Contract[TokenState]):
        ...     ...
    """
    default_contract_registry.register(contract_class)
    return contract_class


__all__ = ["Contract", "register_contract"]
