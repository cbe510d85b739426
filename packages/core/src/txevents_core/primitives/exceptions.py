"""Exceptions for txevents-core."""

from __future__ import annotations


class TransactionalEventsError(Exception):
    """Root exception for the entire txevents toolkit."""


class DispatcherError(TransactionalEventsError):
    """Base class for listener and subscriber registration errors."""


class ListenerRegistrationError(DispatcherError):
    """Raised when a listener cannot be registered.

    Usage: ``EventDispatcher.listen`` raises this when the listener is not
    callable.
    """

    def __init__(self, event_name: str, listener: object) -> None:
        self.event_name = event_name
        self.listener = listener
        super().__init__(
            f"Listener for {event_name!r} must be callable, "
            f"got {type(listener).__name__}"
        )


class SubscriberError(DispatcherError):
    """Raised when a subscriber does not expose ``subscribe(dispatcher)``."""
