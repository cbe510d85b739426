"""txevents-core — transaction-aware event dispatching.

Zero infrastructure dependencies. Pydantic for events and configuration.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryConnection
from .bootstrap import install_transactional_dispatcher
from .config import TransactionalEventsConfig

# ── Domain ───────────────────────────────────────────────────────
from .domain import (
    LIFECYCLE_NAMESPACE,
    DomainEvent,
    TransactionalDomainEvent,
    TransactionBeginning,
    TransactionCommitted,
    TransactionEvent,
    TransactionRolledBack,
)

# ── Events ───────────────────────────────────────────────────────
from .events import (
    DEFAULT_TRANSACTIONAL_EVENTS,
    EventClassifier,
    EventDispatcher,
    PendingEvent,
    PendingLedger,
    TransactionalDispatcher,
)

# ── Ports ────────────────────────────────────────────────────────
from .ports import (
    ConnectionAware,
    ConnectionResolver,
    IEventDispatcher,
    ITransactionalConnection,
    TransactionalEvent,
    resolve_connection,
)

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    DispatcherError,
    ListenerRegistrationError,
    SubscriberError,
    TransactionalEventsError,
)
from .utils import event_name, pattern_matches, wildcard_match

__all__: list[str] = [
    # Domain
    "DomainEvent",
    "LIFECYCLE_NAMESPACE",
    "TransactionBeginning",
    "TransactionCommitted",
    "TransactionEvent",
    "TransactionRolledBack",
    "TransactionalDomainEvent",
    # Events
    "DEFAULT_TRANSACTIONAL_EVENTS",
    "EventClassifier",
    "EventDispatcher",
    "PendingEvent",
    "PendingLedger",
    "TransactionalDispatcher",
    "event_name",
    "pattern_matches",
    "wildcard_match",
    # Ports
    "ConnectionAware",
    "ConnectionResolver",
    "IEventDispatcher",
    "ITransactionalConnection",
    "TransactionalEvent",
    "resolve_connection",
    # Configuration
    "TransactionalEventsConfig",
    "install_transactional_dispatcher",
    # Primitives
    "DispatcherError",
    "ListenerRegistrationError",
    "SubscriberError",
    "TransactionalEventsError",
    # Adapters
    "InMemoryConnection",
]
