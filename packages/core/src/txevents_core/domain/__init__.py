"""Domain layer: structured events and lifecycle notifications."""

from __future__ import annotations

from txevents_core.domain.events import DomainEvent, TransactionalDomainEvent
from txevents_core.domain.lifecycle import (
    LIFECYCLE_NAMESPACE,
    TransactionBeginning,
    TransactionCommitted,
    TransactionEvent,
    TransactionRolledBack,
)

__all__ = [
    "DomainEvent",
    "LIFECYCLE_NAMESPACE",
    "TransactionBeginning",
    "TransactionCommitted",
    "TransactionEvent",
    "TransactionRolledBack",
    "TransactionalDomainEvent",
]
