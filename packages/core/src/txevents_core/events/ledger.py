"""PendingLedger — buffered events per connection and transaction level."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Hashable

logger = logging.getLogger("txevents.ledger")


@dataclass(frozen=True, slots=True)
class PendingEvent:
    """An event whose delivery waits on a transaction outcome."""

    event: Any
    payload: Any = None


class PendingLedger:
    """In-memory ledger of events awaiting commit or rollback.

    Layout: ``{connection_id: {level: [PendingEvent, ...]}}``.

    Invariants:
    - A connection key exists only while it holds at least one entry.
    - Entries of one ``(connection, level)`` bucket keep dispatch order and
      are only ever removed as a whole bucket.

    The ledger is shared by every connection of a dispatcher. Each operation
    holds the internal lock only for a dictionary update, so connections
    used from different threads never wait on each other's listeners.
    """

    def __init__(self) -> None:
        self._pending: dict[Hashable, dict[int, list[PendingEvent]]] = {}
        self._lock = threading.Lock()

    def enqueue(
        self,
        connection_id: Hashable,
        level: int,
        event: Any,
        payload: Any = None,
    ) -> PendingEvent:
        """Append an entry to the ``(connection_id, level)`` bucket."""
        entry = PendingEvent(event=event, payload=payload)
        with self._lock:
            levels = self._pending.setdefault(connection_id, {})
            levels.setdefault(level, []).append(entry)
        return entry

    def take(self, connection_id: Hashable) -> list[PendingEvent]:
        """Remove and return every entry of a connection.

        Buckets come out in the order they were first opened, entries in
        enqueue order within each bucket.
        """
        with self._lock:
            levels = self._pending.pop(connection_id, None)
        if not levels:
            return []
        return [entry for bucket in levels.values() for entry in bucket]

    def discard(self, connection_id: Hashable, level: int | None = None) -> int:
        """Drop one level's bucket, or the whole connection when *level* is None.

        Returns the number of entries discarded.
        """
        with self._lock:
            levels = self._pending.get(connection_id)
            if levels is None:
                return 0
            if level is None:
                del self._pending[connection_id]
                dropped = list(levels.values())
            else:
                bucket = levels.pop(level, None)
                dropped = [bucket] if bucket else []
                if not levels:
                    del self._pending[connection_id]
        count = sum(len(bucket) for bucket in dropped)
        if count:
            logger.debug(
                "Discarded %d pending event(s) for connection %r (level=%s)",
                count,
                connection_id,
                "all" if level is None else level,
            )
        return count

    # ── Introspection ────────────────────────────────────────────

    def pending(self, connection_id: Hashable) -> list[PendingEvent]:
        """Snapshot of a connection's entries, in flush order."""
        with self._lock:
            levels = self._pending.get(connection_id, {})
            return [entry for bucket in levels.values() for entry in bucket]

    def levels(self, connection_id: Hashable) -> list[int]:
        with self._lock:
            return list(self._pending.get(connection_id, {}))

    def has_pending(self, connection_id: Hashable) -> bool:
        with self._lock:
            return connection_id in self._pending

    def connections(self) -> list[Hashable]:
        with self._lock:
            return list(self._pending)

    def __len__(self) -> int:
        with self._lock:
            return sum(
                len(bucket)
                for levels in self._pending.values()
                for bucket in levels.values()
            )

    def clear(self) -> None:
        """Drop every pending entry (testing utility)."""
        with self._lock:
            self._pending.clear()
