from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol, TypeAlias, runtime_checkable

Listener: TypeAlias = Callable[..., Any]
EventKey: TypeAlias = "str | type[Any]"


@runtime_checkable
class IEventDispatcher(Protocol):
    """Protocol for synchronous publish/subscribe dispatchers.

    ``TransactionalDispatcher`` decorates any implementation of this
    protocol, intercepting ``dispatch`` and forwarding everything else.
    """

    def dispatch(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Call the listeners of *event* and return their responses."""
        ...

    def until(self, event: Any, payload: Any = None) -> Any:
        """Dispatch until the first non-``None`` response."""
        ...

    def listen(self, events: EventKey | Sequence[EventKey], listener: Listener) -> None:
        """Register *listener* for one or more event names or patterns."""
        ...

    def has_listeners(self, event_name: str) -> bool:
        ...

    def subscribe(self, subscriber: Any) -> None:
        """Let *subscriber* register its own listeners."""
        ...

    def push(self, event: str, payload: Any = None) -> None:
        """Queue *event* to be dispatched on the next ``flush``."""
        ...

    def flush(self, event: str) -> None:
        ...

    def forget(self, event: str) -> None:
        """Remove every listener registered under *event*."""
        ...

    def forget_pushed(self) -> None:
        ...
