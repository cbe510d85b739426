"""EventDispatcher — synchronous publish/subscribe with wildcard listeners."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..primitives.exceptions import ListenerRegistrationError, SubscriberError
from ..utils import WILDCARD, event_name, wildcard_match

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..ports.event_dispatcher import EventKey, Listener

logger = logging.getLogger("txevents.events")

PUSHED_SUFFIX = "_pushed"


class EventDispatcher:
    """Plain, non-transactional event dispatcher.

    Listeners are registered under an event name, an event class, or a
    wildcard pattern (``"orders.*"``). Dispatching an object event calls
    ``listener(event)``; dispatching a named event spreads the payload into
    the listener's positional arguments. Wildcard listeners always receive
    ``(event_name, args)``.

    **Architectural Role**:
    - Used directly when no transactional behaviour is wanted.
    - Used as the delivery channel of ``TransactionalDispatcher``, both for
      pass-through dispatches and for flushed buffered events.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._wildcards: dict[str, list[Listener]] = {}

    # ── Registration ─────────────────────────────────────────────

    def listen(
        self,
        events: EventKey | Sequence[EventKey],
        listener: Listener,
    ) -> None:
        """Register *listener* for one or more events or patterns."""
        keys = [events] if isinstance(events, str | type) else list(events)
        for key in keys:
            name = event_name(key)
            if not callable(listener):
                raise ListenerRegistrationError(name, listener)
            bucket = self._wildcards if WILDCARD in name else self._listeners
            bucket.setdefault(name, []).append(listener)

    def subscribe(self, subscriber: Any) -> None:
        """Let *subscriber* register its listeners.

        Accepts an instance or a class exposing ``subscribe(dispatcher)``;
        classes are instantiated without arguments.
        """
        if isinstance(subscriber, type):
            subscriber = subscriber()
        register = getattr(subscriber, "subscribe", None)
        if not callable(register):
            raise SubscriberError(
                f"{type(subscriber).__name__} does not define subscribe(dispatcher)"
            )
        register(self)

    # ── Dispatching ──────────────────────────────────────────────

    def dispatch(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Call every listener of *event*.

        Returns the list of listener responses, or with ``halt=True`` the
        first non-``None`` response. A listener returning ``False`` stops
        propagation to the remaining listeners.
        """
        name = event_name(event)
        args = (event,) if not isinstance(event, str) else _payload_args(payload)

        responses: list[Any] = []
        for listener, wildcard in self._resolve(name):
            call_args = (name, args) if wildcard else args
            response = self._invoke(listener, name, call_args)
            if halt and response is not None:
                return response
            if response is False:
                break
            responses.append(response)

        return None if halt else responses

    def until(self, event: Any, payload: Any = None) -> Any:
        """Dispatch *event* until the first non-``None`` response."""
        return self.dispatch(event, payload, halt=True)

    def _invoke(self, listener: Listener, name: str, args: tuple[Any, ...]) -> Any:
        """Invoke a single listener; failures are logged and re-raised."""
        try:
            return listener(*args)
        except Exception:
            logger.exception(
                "Error executing listener %s for event %s",
                getattr(listener, "__qualname__", type(listener).__name__),
                name,
            )
            raise

    # ── Deferred (pushed) events ─────────────────────────────────

    def push(self, event: str, payload: Any = None) -> None:
        """Queue *event* so that ``flush(event)`` dispatches it."""

        def _dispatch_pushed() -> None:
            self.dispatch(event, payload)

        self.listen(event + PUSHED_SUFFIX, _dispatch_pushed)

    def flush(self, event: str) -> None:
        """Dispatch and forget every event queued with ``push(event)``."""
        self.dispatch(event + PUSHED_SUFFIX)
        self.forget(event + PUSHED_SUFFIX)

    def forget(self, event: str) -> None:
        """Remove every listener registered under *event* (name or pattern)."""
        name = event_name(event)
        if WILDCARD in name:
            self._wildcards.pop(name, None)
        else:
            self._listeners.pop(name, None)

    def forget_pushed(self) -> None:
        """Forget every queue created by ``push``."""
        for name in [n for n in self._listeners if n.endswith(PUSHED_SUFFIX)]:
            self.forget(name)

    # ── Introspection ────────────────────────────────────────────

    def get_listeners(self, event: EventKey) -> list[Listener]:
        """Exact listeners of *event* followed by matching wildcard listeners."""
        return [listener for listener, _ in self._resolve(event_name(event))]

    def _resolve(self, name: str) -> list[tuple[Listener, bool]]:
        resolved = [(listener, False) for listener in self._listeners.get(name, [])]
        for pattern, listeners in self._wildcards.items():
            if wildcard_match(pattern, name):
                resolved.extend((listener, True) for listener in listeners)
        return resolved

    def has_listeners(self, name: str) -> bool:
        return name in self._listeners or self.has_wildcard_listeners(name)

    def has_wildcard_listeners(self, name: str) -> bool:
        return any(wildcard_match(pattern, name) for pattern in self._wildcards)

    def get_registered_listeners(self) -> dict[str, list[Listener]]:
        """Return all registrations, wildcard patterns included (debugging)."""
        registered = {k: list(v) for k, v in self._listeners.items()}
        registered.update({k: list(v) for k, v in self._wildcards.items()})
        return registered

    def clear(self) -> None:
        """Remove all listener registrations (testing utility)."""
        self._listeners.clear()
        self._wildcards.clear()


def _payload_args(payload: Any) -> tuple[Any, ...]:
    if payload is None:
        return ()
    if isinstance(payload, tuple | list):
        return tuple(payload)
    return (payload,)

