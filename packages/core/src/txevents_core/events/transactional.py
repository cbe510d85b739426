"""TransactionalDispatcher — holds events back until the outer commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..domain.lifecycle import TransactionCommitted, TransactionRolledBack
from ..ports.connection import TransactionalEvent, resolve_connection
from .classifier import EventClassifier
from .ledger import PendingLedger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ..ports.connection import ConnectionResolver, ITransactionalConnection
    from ..ports.event_dispatcher import EventKey, IEventDispatcher, Listener
    from .ledger import PendingEvent

logger = logging.getLogger("txevents.dispatcher")


class TransactionalDispatcher:
    """Event dispatcher decorator aware of database transactions.

    Events raised while their connection is inside a transaction are kept
    in a ``PendingLedger`` instead of reaching listeners. They are delivered,
    in dispatch order, once the outermost transaction commits, and dropped
    when the transaction (or the savepoint they were raised in) rolls back.

    Only ``dispatch`` is intercepted; every other ``IEventDispatcher``
    operation is forwarded to the wrapped dispatcher unchanged.

    Example::

        events = TransactionalDispatcher(EventDispatcher(), included=["order."])
        events.listen("order.created", send_confirmation)

        connection.begin()
        events.dispatch("order.created", order)   # buffered
        connection.commit()                       # send_confirmation(order)
    """

    def __init__(
        self,
        dispatcher: IEventDispatcher,
        ledger: PendingLedger | None = None,
        *,
        included: Iterable[str] | None = None,
        excluded: Iterable[str] | None = None,
        connection_resolver: ConnectionResolver = resolve_connection,
    ) -> None:
        self._dispatcher = dispatcher
        self._ledger = ledger if ledger is not None else PendingLedger()
        self._classifier = EventClassifier(included, excluded)
        self._resolve_connection = connection_resolver
        self._set_up_listeners()

    @property
    def dispatcher(self) -> IEventDispatcher:
        """The wrapped, non-transactional dispatcher."""
        return self._dispatcher

    @property
    def ledger(self) -> PendingLedger:
        return self._ledger

    @property
    def classifier(self) -> EventClassifier:
        return self._classifier

    # ── Configuration ────────────────────────────────────────────

    def set_transactional_events(self, patterns: Iterable[str]) -> None:
        """Set the patterns of events handled by the transactional layer."""
        self._classifier.set_included(patterns)

    def set_excluded_events(self, patterns: Iterable[str] = ()) -> None:
        """Set the patterns of events always dispatched immediately."""
        self._classifier.set_excluded(patterns)

    # ── Dispatching ──────────────────────────────────────────────

    def dispatch(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Dispatch *event* now, or buffer it until the outer commit.

        Returns the wrapped dispatcher's result for immediate dispatches and
        ``None`` for buffered ones.
        """
        connection = self._connection_of(event, payload)
        if connection is None:
            return self._dispatcher.dispatch(event, payload, halt)

        level = connection.transaction_level()
        if not self._classifier.should_buffer(event, level):
            return self._dispatcher.dispatch(event, payload, halt)

        self._ledger.enqueue(connection.connection_id, level, event, payload)
        logger.debug(
            "Buffered event %r on connection %r at level %d",
            event,
            connection.connection_id,
            level,
        )
        return None

    def fire(self, event: Any, payload: Any = None, halt: bool = False) -> Any:
        """Alias of :meth:`dispatch`."""
        return self.dispatch(event, payload, halt)

    def _connection_of(
        self, event: Any, payload: Any
    ) -> ITransactionalConnection | None:
        if not isinstance(event, str) and isinstance(event, TransactionalEvent):
            connection = event.get_connection()
            if connection is not None:
                return connection
        return self._resolve_connection(payload)

    # ── Transaction outcome ──────────────────────────────────────

    def commit(self, connection: ITransactionalConnection) -> None:
        """Deliver every buffered event of *connection*.

        Does nothing while the connection is still inside a transaction: a
        committed savepoint can still be undone by its enclosing transaction.
        Listener failures propagate; entries not yet delivered are lost.
        """
        if connection.transaction_level() > 0:
            return

        entries = self._ledger.take(connection.connection_id)
        if not entries:
            return

        logger.debug(
            "Flushing %d buffered event(s) for connection %r",
            len(entries),
            connection.connection_id,
        )
        for entry in entries:
            self._dispatcher.dispatch(entry.event, entry.payload)

    def rollback(self, connection: ITransactionalConnection) -> None:
        """Drop the events buffered in the transaction level just rolled back.

        Rolling back the outermost transaction drops every level.
        """
        level = connection.transaction_level() + 1
        if level > 1:
            self._ledger.discard(connection.connection_id, level)
        else:
            self._ledger.discard(connection.connection_id)

    def pending_events(
        self, connection: ITransactionalConnection
    ) -> list[PendingEvent]:
        return self._ledger.pending(connection.connection_id)

    def has_pending_events(self, connection: ITransactionalConnection) -> bool:
        return self._ledger.has_pending(connection.connection_id)

    def _set_up_listeners(self) -> None:
        def _on_commit(event: TransactionCommitted) -> None:
            self.commit(event.connection)

        def _on_rollback(event: TransactionRolledBack) -> None:
            self.rollback(event.connection)

        self._dispatcher.listen(TransactionCommitted, _on_commit)
        self._dispatcher.listen(TransactionRolledBack, _on_rollback)

    # ── Forwarded operations ─────────────────────────────────────

    def until(self, event: Any, payload: Any = None) -> Any:
        return self._dispatcher.until(event, payload)

    def listen(self, events: EventKey | Sequence[EventKey], listener: Listener) -> None:
        self._dispatcher.listen(events, listener)

    def has_listeners(self, name: str) -> bool:
        return self._dispatcher.has_listeners(name)

    def subscribe(self, subscriber: Any) -> None:
        self._dispatcher.subscribe(subscriber)

    def push(self, event: str, payload: Any = None) -> None:
        self._dispatcher.push(event, payload)

    def flush(self, event: str) -> None:
        self._dispatcher.flush(event)

    def forget(self, event: str) -> None:
        self._dispatcher.forget(event)

    def forget_pushed(self) -> None:
        self._dispatcher.forget_pushed()
