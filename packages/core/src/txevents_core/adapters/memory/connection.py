"""InMemoryConnection — a transaction-nesting counter for unit tests."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from ...domain.lifecycle import (
    TransactionBeginning,
    TransactionCommitted,
    TransactionRolledBack,
)

if TYPE_CHECKING:
    from ...ports.event_dispatcher import IEventDispatcher

_ids = itertools.count(1)


class InMemoryConnection:
    """In-memory implementation of ITransactionalConnection.

    ``begin``/``commit``/``rollback`` maintain the nesting level the way a
    database connection with savepoints would, then announce the boundary
    on the attached dispatcher (if any) with the lifecycle events.
    Records commit/rollback calls for assertions.
    """

    def __init__(
        self,
        dispatcher: IEventDispatcher | None = None,
        *,
        name: str = "memory",
    ) -> None:
        self.name = name
        self._connection_id = f"{name}-{next(_ids)}"
        self._level = 0
        self._dispatcher = dispatcher
        self.commit_count: int = 0
        self.rollback_count: int = 0

    @property
    def connection_id(self) -> str:
        return self._connection_id

    def transaction_level(self) -> int:
        return self._level

    def attach(self, dispatcher: IEventDispatcher) -> None:
        """Announce future transaction boundaries on *dispatcher*."""
        self._dispatcher = dispatcher

    def begin(self) -> None:
        self._level += 1
        if self._dispatcher is not None:
            self._dispatcher.dispatch(TransactionBeginning(connection=self))

    def commit(self) -> None:
        if self._level == 0:
            return
        self._level -= 1
        self.commit_count += 1
        if self._dispatcher is not None:
            self._dispatcher.dispatch(TransactionCommitted(connection=self))

    def rollback(self) -> None:
        if self._level == 0:
            return
        self._level -= 1
        self.rollback_count += 1
        if self._dispatcher is not None:
            self._dispatcher.dispatch(TransactionRolledBack(connection=self))

    # ── Test helpers ─────────────────────────────────────────────

    def set_level(self, level: int) -> None:
        """Force the nesting level without announcing anything."""
        self._level = level

    def __repr__(self) -> str:
        return f"InMemoryConnection({self._connection_id!r}, level={self._level})"
