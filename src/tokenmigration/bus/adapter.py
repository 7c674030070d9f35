"""
Uniform async wrapper around whatever a subscriber hands the bus.

Accepted handlers are objects with a ``handle(event)`` method and plain
callables; either may be sync or async.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from tokenmigration.events.base import LedgerEvent

AsyncHandlerFunc = Callable[[LedgerEvent], Awaitable[None]]


def get_handler_name(handler: Any) -> str:
    if inspect.isfunction(handler) or inspect.ismethod(handler):
        return str(handler.__qualname__)
    return type(handler).__name__


def _as_coroutine_function(handler: Any) -> AsyncHandlerFunc:
    target = getattr(handler, "handle", None)
    if target is None:
        if not callable(handler):
            raise TypeError(f"{type(handler).__name__} has no handle() method and is not callable")
        target = handler

    if inspect.iscoroutinefunction(target):
        return target  # type: ignore[no-any-return]

    async def call(event: LedgerEvent) -> None:
        outcome = target(event)
        if inspect.isawaitable(outcome):
            await outcome

    return call


class HandlerAdapter:
    """
    A subscribed handler. Two adapters are equal when they wrap equal
    handlers, which is what ``InMemoryEventBus.unsubscribe`` matches on.
    """

    def __init__(self, handler: Any) -> None:
        """
        Raises:
            TypeError: If ``handler`` is neither callable nor has ``handle``
        """
        self.original = handler
        self.name = get_handler_name(handler)
        self._call = _as_coroutine_function(handler)

    async def handle(self, event: LedgerEvent) -> None:
        await self._call(event)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HandlerAdapter):
            return NotImplemented
        return bool(self.original == other.original)

    def __repr__(self) -> str:
        return f"HandlerAdapter({self.name})"


__all__ = ["HandlerAdapter", "get_handler_name"]
