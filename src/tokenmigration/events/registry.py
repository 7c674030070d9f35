"""
Event type names to event classes.

The SQLite store writes each event's type name next to its JSON payload;
on read it asks a registry which ``LedgerEvent`` subclass validates the
payload. Every event module registers its classes at import time with
``@register_event``.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from tokenmigration.exceptions import LedgerError

if TYPE_CHECKING:
    from tokenmigration.events.base import LedgerEvent

logger = logging.getLogger(__name__)

TEvent = TypeVar("TEvent", bound="LedgerEvent")


class EventTypeNotFoundError(LedgerError):
    """Raised when a stored event names a type nobody registered."""

    def __init__(self, event_type: str, known: list[str]) -> None:
        self.event_type = event_type
        self.known = known
        super().__init__(
            f"Unknown event type '{event_type}' ({len(known)} registered types)"
        )


class DuplicateEventTypeError(LedgerError):
    """Raised when two classes claim one event type name."""

    def __init__(self, event_type: str, existing: type, new: type) -> None:
        self.event_type = event_type
        super().__init__(
            f"Event type '{event_type}' belongs to {existing.__qualname__}, "
            f"not {new.__qualname__}"
        )


class EventRegistry:
    """Thread-safe event class lookup. Registering the same class twice is a no-op."""

    def __init__(self) -> None:
        self._classes: dict[str, type[LedgerEvent]] = {}
        self._lock = threading.Lock()

    def register(self, event_class: type[TEvent], event_type: str | None = None) -> type[TEvent]:
        name = event_type or event_class.__name__
        with self._lock:
            existing = self._classes.setdefault(name, event_class)
        if existing is not event_class:
            raise DuplicateEventTypeError(name, existing, event_class)
        logger.debug("Registered event type '%s'", name)
        return event_class

    def get(self, event_type: str) -> type[LedgerEvent]:
        """
        Raises:
            EventTypeNotFoundError: If ``event_type`` was never registered
        """
        event_class = self.get_or_none(event_type)
        if event_class is None:
            raise EventTypeNotFoundError(event_type, self.list_types())
        return event_class

    def get_or_none(self, event_type: str) -> type[LedgerEvent] | None:
        with self._lock:
            return self._classes.get(event_type)

    def list_types(self) -> list[str]:
        with self._lock:
            return sorted(self._classes)

    def __contains__(self, event_type: object) -> bool:
        with self._lock:
            return event_type in self._classes

    def __len__(self) -> int:
        with self._lock:
            return len(self._classes)


default_registry = EventRegistry()


def register_event(
    event_class: type[TEvent] | None = None,
    *,
    registry: EventRegistry | None = None,
) -> type[TEvent] | Callable[[type[TEvent]], type[TEvent]]:
    """
    Class decorator adding an event to ``registry`` (the default registry if omitted).

    Usable bare (``@register_event``) or configured
    (``@register_event(registry=isolated)``).
    """
    target = registry if registry is not None else default_registry
    if event_class is not None:
        return target.register(event_class)
    return target.register


def get_event_class(event_type: str) -> type[LedgerEvent]:
    return default_registry.get(event_type)
