"""
Bridge SQLAlchemy session and mapper events to the transactional dispatcher.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import event, inspect
from sqlalchemy.orm import Mapper

from txevents_core.domain.lifecycle import (
    TransactionBeginning,
    TransactionCommitted,
    TransactionRolledBack,
)
from txevents_core.ports.connection import resolve_connection
from txevents_core.utils import event_name

from .connection import SessionConnection

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.engine import Connection
    from sqlalchemy.orm import Session, SessionTransaction

    from txevents_core.ports.event_dispatcher import IEventDispatcher

logger = logging.getLogger("txevents.sqlalchemy")

ORM_EVENT_PREFIX = "orm."

#: SQLAlchemy mapper event -> verb used in the dispatched event name.
MAPPER_EVENTS: dict[str, str] = {
    "after_insert": "inserted",
    "after_update": "updated",
    "after_delete": "deleted",
}


def orm_event_name(verb: str, entity: Any) -> str:
    """Name of an ORM lifecycle event, e.g. ``"orm.inserted: app.Order"``."""
    return f"{ORM_EVENT_PREFIX}{verb}: {event_name(type(entity))}"


def resolve_session_connection(value: Any) -> SessionConnection | None:
    """Connection resolver for ORM instances attached to an instrumented session.

    Values exposing ``get_connection()`` keep precedence.
    """
    connection = resolve_connection(value)
    if connection is not None:
        return connection  # type: ignore[return-value]
    if value is None or isinstance(value, str | int | float | bool):
        return None

    state = inspect(value, raiseerr=False)
    session = getattr(state, "session", None)
    if session is None:
        return None
    return SessionConnection.lookup(session)


class SessionEventBridge:
    """Announces session transaction boundaries as lifecycle events.

    For every root transaction and SAVEPOINT of an instrumented session:

    - opening it dispatches ``TransactionBeginning``;
    - ending it after a commit dispatches ``TransactionCommitted``, once the
      transaction is closed, so the outermost commit is seen at level 0;
    - rolling back a SAVEPOINT dispatches ``TransactionRolledBack`` for its
      level;
    - ending the root transaction any other way (rollback,
      ``Session.close()``) dispatches ``TransactionRolledBack``.

    Optionally dispatches ``orm.inserted|updated|deleted: <module.Class>``
    from mapper events, with the entity as payload.

    Usage::

        events = install_transactional_dispatcher(
            EventDispatcher(), connection_resolver=resolve_session_connection
        )
        bridge = SessionEventBridge(events)
        bridge.install(SessionFactory)       # Session, sessionmaker or class
        bridge.install_mapper_events(Base)   # declarative base or mapped class

    For ``AsyncSession`` install on its ``sync_session_class``.
    """

    def __init__(self, dispatcher: IEventDispatcher) -> None:
        self._dispatcher = dispatcher
        self._registrations: list[tuple[Any, str, Callable[..., None]]] = []
        self._committing_key = f"txevents.committing.{id(self)}"

    # ── Installation ─────────────────────────────────────────────

    def install(self, target: Any) -> None:
        """Listen to transaction events of a session, sessionmaker or class."""
        for identifier, fn in (
            ("after_transaction_create", self._after_transaction_create),
            ("after_commit", self._after_commit),
            ("after_transaction_end", self._after_transaction_end),
            ("after_soft_rollback", self._after_soft_rollback),
        ):
            self._listen(target, identifier, fn)

    def install_mapper_events(self, target: Any = Mapper) -> None:
        """Dispatch ORM lifecycle events for *target* and its subclasses."""
        for identifier, verb in MAPPER_EVENTS.items():
            self._listen(
                target,
                identifier,
                self._mapper_listener(verb),
                propagate=True,
            )

    def uninstall(self) -> None:
        """Remove every listener this bridge installed."""
        while self._registrations:
            target, identifier, fn = self._registrations.pop()
            event.remove(target, identifier, fn)

    def _listen(
        self,
        target: Any,
        identifier: str,
        fn: Callable[..., None],
        *,
        propagate: bool = False,
    ) -> None:
        event.listen(target, identifier, fn, propagate=propagate)
        self._registrations.append((target, identifier, fn))

    # ── Session events ───────────────────────────────────────────

    @staticmethod
    def _is_boundary(transaction: SessionTransaction) -> bool:
        return transaction.nested or transaction.parent is None

    def _after_transaction_create(
        self, session: Session, transaction: SessionTransaction
    ) -> None:
        if not self._is_boundary(transaction):
            return
        connection = SessionConnection.for_session(session)
        self._dispatcher.dispatch(TransactionBeginning(connection=connection))

    def _after_commit(self, session: Session) -> None:
        session.info[self._committing_key] = True

    def _after_transaction_end(
        self, session: Session, transaction: SessionTransaction
    ) -> None:
        if not self._is_boundary(transaction):
            return
        committed = session.info.pop(self._committing_key, False)
        connection = SessionConnection.lookup(session)
        if connection is None:
            return

        if committed:
            logger.debug(
                "Session %r committed (level now %d)",
                connection.connection_id,
                connection.transaction_level(),
            )
            self._dispatcher.dispatch(TransactionCommitted(connection=connection))
        elif transaction.parent is None:
            self._rolled_back(connection)

    def _after_soft_rollback(
        self, session: Session, previous_transaction: SessionTransaction
    ) -> None:
        # Root rollbacks are announced when the root transaction ends.
        if not previous_transaction.nested:
            return
        connection = SessionConnection.lookup(session)
        if connection is not None:
            self._rolled_back(connection)

    def _rolled_back(self, connection: SessionConnection) -> None:
        logger.debug(
            "Session %r rolled back (level now %d)",
            connection.connection_id,
            connection.transaction_level(),
        )
        self._dispatcher.dispatch(TransactionRolledBack(connection=connection))

    # ── Mapper events ────────────────────────────────────────────

    def _mapper_listener(
        self, verb: str
    ) -> Callable[[Mapper[Any], Connection, Any], None]:
        def _on_mapper_event(
            mapper: Mapper[Any], connection: Connection, target: Any
        ) -> None:
            self._dispatcher.dispatch(orm_event_name(verb, target), target)

        _on_mapper_event.__qualname__ = f"SessionEventBridge.on_{verb}"
        return _on_mapper_event
