"""
In-process event bus.

The ledger publishes each committed batch here once the store has accepted
it. Handlers run one at a time in subscription order, typed subscribers
before wildcard ones, so an observer always sees a transaction's events in
the order they were raised.
"""

import logging
import threading

from tokenmigration.bus.adapter import HandlerAdapter
from tokenmigration.bus.interface import (
    EventBus,
    EventHandler,
    EventHandlerFunc,
    EventSubscriber,
)
from tokenmigration.events.base import LedgerEvent
from tokenmigration.observability import (
    ATTR_CONTRACT_ADDRESS,
    ATTR_EVENT_COUNT,
    ATTR_EVENT_ID,
    ATTR_EVENT_TYPE,
    ATTR_HANDLER_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_HANDLER_SUCCESS,
    Tracer,
    create_tracer,
)

logger = logging.getLogger(__name__)


class InMemoryEventBus(EventBus):
    """
    Example:
        >>> bus = InMemoryEventBus()
        >>> bus.subscribe(PairCreated, on_pair_created)
        >>> bus.subscribe_all(pool_index)
        >>> ledger = Ledger(store, event_bus=bus)

    A handler that raises is logged at ERROR and counted; the remaining
    handlers still run and ``publish`` itself never raises for it.
    """

    def __init__(
        self,
        *,
        tracer: Tracer | None = None,
        enable_tracing: bool = True,
    ) -> None:
        self._typed: dict[type[LedgerEvent], list[HandlerAdapter]] = {}
        self._wildcard: list[HandlerAdapter] = []
        self._lock = threading.Lock()
        self._stats = {"events_published": 0, "handlers_invoked": 0, "handler_errors": 0}
        self._tracer = tracer or create_tracer(__name__, enable_tracing)

    async def publish(self, events: list[LedgerEvent]) -> None:
        if not events:
            return
        with self._tracer.span("tokenmigration.event_bus.publish", {ATTR_EVENT_COUNT: len(events)}):
            for event in events:
                await self._dispatch(event)
                self._stats["events_published"] += 1

    def _handlers_for(self, event: LedgerEvent) -> list[HandlerAdapter]:
        with self._lock:
            return [*self._typed.get(type(event), ()), *self._wildcard]

    async def _dispatch(self, event: LedgerEvent) -> None:
        handlers = self._handlers_for(event)
        if not handlers:
            return
        attributes = {
            ATTR_EVENT_TYPE: event.event_type,
            ATTR_EVENT_ID: str(event.event_id),
            ATTR_CONTRACT_ADDRESS: event.contract_address,
            ATTR_HANDLER_COUNT: len(handlers),
        }
        with self._tracer.span("tokenmigration.event_bus.dispatch", attributes):
            for adapter in handlers:
                await self._invoke(adapter, event)

    async def _invoke(self, adapter: HandlerAdapter, event: LedgerEvent) -> None:
        with self._tracer.span(
            "tokenmigration.event_bus.handle",
            {ATTR_EVENT_TYPE: event.event_type, ATTR_HANDLER_NAME: adapter.name},
        ) as span:
            try:
                await adapter.handle(event)
            except Exception as e:
                self._stats["handler_errors"] += 1
                if span:
                    span.set_attribute(ATTR_HANDLER_SUCCESS, False)
                    span.record_exception(e)
                logger.error(
                    "Handler %s failed on %s from %s: %s",
                    adapter.name,
                    event.event_type,
                    event.contract_address,
                    e,
                    exc_info=True,
                    extra={
                        "handler": adapter.name,
                        "event_type": event.event_type,
                        "event_id": str(event.event_id),
                    },
                )
            else:
                self._stats["handlers_invoked"] += 1
                if span:
                    span.set_attribute(ATTR_HANDLER_SUCCESS, True)

    def subscribe(
        self,
        event_type: type[LedgerEvent],
        handler: EventHandler | EventHandlerFunc,
    ) -> None:
        adapter = HandlerAdapter(handler)
        with self._lock:
            self._typed.setdefault(event_type, []).append(adapter)
        logger.debug("Subscribed %s to %s", adapter.name, event_type.__name__)

    def unsubscribe(
        self,
        event_type: type[LedgerEvent],
        handler: EventHandler | EventHandlerFunc,
    ) -> bool:
        target = HandlerAdapter(handler)
        with self._lock:
            adapters = self._typed.get(event_type, [])
            if target not in adapters:
                return False
            adapters.remove(target)
        logger.debug("Unsubscribed %s from %s", target.name, event_type.__name__)
        return True

    def subscribe_all(self, subscriber: EventSubscriber) -> None:
        for event_type in subscriber.subscribed_to():
            self.subscribe(event_type, subscriber)

    def subscribe_to_all_events(self, handler: EventHandler | EventHandlerFunc) -> None:
        adapter = HandlerAdapter(handler)
        with self._lock:
            self._wildcard.append(adapter)
        logger.debug("Subscribed %s to every event", adapter.name)

    def clear_subscribers(self) -> None:
        with self._lock:
            self._typed.clear()
            self._wildcard.clear()

    def get_subscriber_count(self, event_type: type[LedgerEvent] | None = None) -> int:
        """Typed subscribers for ``event_type``, or for every type; wildcards are not counted."""
        with self._lock:
            if event_type is not None:
                return len(self._typed.get(event_type, ()))
            return sum(len(adapters) for adapters in self._typed.values())

    def get_stats(self) -> dict[str, int]:
        return dict(self._stats)


__all__ = ["InMemoryEventBus"]
