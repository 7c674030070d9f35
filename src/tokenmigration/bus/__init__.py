"""In-process distribution of committed ledger events."""

from tokenmigration.bus.adapter import HandlerAdapter
from tokenmigration.bus.interface import EventBus, EventHandler, EventHandlerFunc, EventSubscriber
from tokenmigration.bus.memory import InMemoryEventBus

__all__ = [
    "EventBus",
    "EventHandler",
    "EventHandlerFunc",
    "EventSubscriber",
    "HandlerAdapter",
    "InMemoryEventBus",
]
