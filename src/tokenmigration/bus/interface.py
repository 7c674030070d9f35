"""Event bus interface definitions.

The bus carries committed ledger events to off-ledger observers such as
indexers and projections. Events of a rolled-back transaction are never
published.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

from tokenmigration.events.base import LedgerEvent

# Type alias for simple function-based handlers
EventHandlerFunc = Callable[[LedgerEvent], Awaitable[None] | None]


@runtime_checkable
class EventHandler(Protocol):
    """Object with a sync or async ``handle(event)`` method."""

    def handle(self, event: LedgerEvent) -> Awaitable[None] | None: ...


@runtime_checkable
class EventSubscriber(EventHandler, Protocol):
    """Handler that declares the event types it wants."""

    def subscribed_to(self) -> list[type[LedgerEvent]]: ...


class EventBus(ABC):
    """
    Abstract event bus for publishing and subscribing to ledger events.

    Implementations take a composition-based ``Tracer`` and name their
    spans ``tokenmigration.event_bus.<operation>``.

    Example:
        >>> bus = InMemoryEventBus()
        >>> bus.subscribe(PairCreated, on_pair_created)
        >>> bus.subscribe_all(pool_index)
        >>> await bus.publish(committed_events)
    """

    @abstractmethod
    async def publish(self, events: list[LedgerEvent]) -> None:
        """
        Publish events to all registered subscribers, in order.

        Handler errors are caught and logged; they never prevent other
        handlers from running and never propagate to the publisher.
        """
        pass

    @abstractmethod
    def subscribe(
        self,
        event_type: type[LedgerEvent],
        handler: EventHandler | EventHandlerFunc,
    ) -> None:
        pass

    @abstractmethod
    def unsubscribe(
        self,
        event_type: type[LedgerEvent],
        handler: EventHandler | EventHandlerFunc,
    ) -> bool:
        """
        Returns:
            True if the handler was found and removed, False otherwise
        """
        pass

    @abstractmethod
    def subscribe_all(self, subscriber: EventSubscriber) -> None:
        """Subscribe ``subscriber`` to every type returned by ``subscribed_to()``."""
        pass

    @abstractmethod
    def subscribe_to_all_events(self, handler: EventHandler | EventHandlerFunc) -> None:
        """Wildcard subscription: receive every published event."""
        pass


__all__ = ["EventBus", "EventHandler", "EventHandlerFunc", "EventSubscriber"]
