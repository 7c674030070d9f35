"""
The @handles decorator for declarative event application.

Contracts mark their state-transition methods with ``@handles(EventType)``;
``Contract.__init_subclass__`` discovers them and routes replayed and newly
raised events to the matching method.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from tokenmigration.events.base import LedgerEvent

F = TypeVar("F", bound=Callable[..., Any])


def handles(event_type: type[LedgerEvent]) -> Callable[[F], F]:
    """
    Mark a method as the state transition for ``event_type``.

    Handler signature:
        def handler(self, event: EventType) -> None

    Example:
        >>> class FungibleToken(Contract[TokenState]):
        ...     @handles(Transfer)
        ...     def _on_transfer(self, event: Transfer) -> None:
        ...         ...
    """

    def decorator(func: F) -> F:
        func._handles_event_type = event_type  # type: ignore[attr-defined]
        return func

    return decorator


def get_handled_event_type(func: Callable[..., Any]) -> type[LedgerEvent] | None:
    """Return the event type a function was decorated with, or None."""
    return getattr(func, "_handles_event_type", None)


__all__ = ["handles", "get_handled_event_type"]
