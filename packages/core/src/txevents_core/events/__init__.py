"""Event dispatching: plain dispatcher, classifier, ledger and decorator."""

from __future__ import annotations

from .classifier import DEFAULT_TRANSACTIONAL_EVENTS, EventClassifier
from .dispatcher import EventDispatcher
from .ledger import PendingEvent, PendingLedger
from .transactional import TransactionalDispatcher

__all__ = [
    "DEFAULT_TRANSACTIONAL_EVENTS",
    "EventClassifier",
    "EventDispatcher",
    "PendingEvent",
    "PendingLedger",
    "TransactionalDispatcher",
]
