"""
SessionConnection — adapts a SQLAlchemy ``Session`` to ITransactionalConnection.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from .exceptions import SessionNotInstrumentedError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

INFO_KEY = "txevents.connection"

_ids = itertools.count(1)


class SessionConnection:
    """Transactional view of a ``Session``.

    The nesting level is read from the session itself: the root transaction
    and each active SAVEPOINT (``begin_nested``) count as one level, internal
    subtransactions and SAVEPOINTs already being rolled back do not. The
    identifier is a process-wide sequence number assigned when the adapter is
    created.
    """

    def __init__(self, session: Session) -> None:
        self._session = session
        self._connection_id = next(_ids)

    @classmethod
    def for_session(cls, session: Session) -> SessionConnection:
        """Return the adapter attached to *session*, attaching one if needed."""
        connection = session.info.get(INFO_KEY)
        if connection is None:
            connection = cls(session)
            session.info[INFO_KEY] = connection
        return connection

    @classmethod
    def lookup(cls, session: Session) -> SessionConnection | None:
        return session.info.get(INFO_KEY)

    @property
    def connection_id(self) -> int:
        return self._connection_id

    @property
    def session(self) -> Session:
        return self._session

    def transaction_level(self) -> int:
        if self._session.get_transaction() is None:
            return 0
        level = 1
        transaction = self._session.get_nested_transaction()
        while transaction is not None:
            if transaction.nested and transaction.is_active:
                level += 1
            transaction = transaction.parent
        return level

    def __repr__(self) -> str:
        level = self.transaction_level()
        return f"SessionConnection({self._connection_id}, level={level})"


def connection_for(session: Session) -> SessionConnection:
    """Return the connection of an instrumented *session*.

    Raises:
        SessionNotInstrumentedError: If no bridge has seen this session.
    """
    connection = SessionConnection.lookup(session)
    if connection is None:
        raise SessionNotInstrumentedError(
            "Session has no transactional connection. Install a "
            "SessionEventBridge on it (or its sessionmaker) before use."
        )
    return connection
