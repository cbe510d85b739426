"""Primitives: exceptions."""

from __future__ import annotations

from .exceptions import (
    DispatcherError,
    ListenerRegistrationError,
    SubscriberError,
    TransactionalEventsError,
)

__all__ = [
    "DispatcherError",
    "ListenerRegistrationError",
    "SubscriberError",
    "TransactionalEventsError",
]
