"""Transaction lifecycle notifications.

Hosts dispatch these after a transaction boundary has been crossed. Every
class in this module is excluded from buffering, whatever the configuration.
"""

from __future__ import annotations

from typing import Any

from .events import DomainEvent

LIFECYCLE_NAMESPACE = f"{__name__}."


class TransactionEvent(DomainEvent):
    """Base for lifecycle events; ``connection`` is the affected connection."""

    connection: Any


class TransactionBeginning(TransactionEvent):
    """A (possibly nested) transaction was opened."""


class TransactionCommitted(TransactionEvent):
    """A transaction was committed."""


class TransactionRolledBack(TransactionEvent):
    """A (possibly nested) transaction was rolled back."""
