"""Connection ports — what the transactional layer needs from a database host."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any, Protocol, TypeAlias, runtime_checkable


@runtime_checkable
class ITransactionalConnection(Protocol):
    """A logical database connection as seen by the transactional dispatcher.

    The dispatcher never inspects connection internals: it only reads a
    stable identifier (used as the ledger key) and asks for the current
    transaction nesting level (``0`` means no open transaction).
    """

    @property
    def connection_id(self) -> Hashable:
        """Stable identifier of this connection."""
        ...

    def transaction_level(self) -> int:
        """Number of currently open (possibly nested) transactions."""
        ...


@runtime_checkable
class ConnectionAware(Protocol):
    """Any value that knows the connection it was produced on."""

    def get_connection(self) -> ITransactionalConnection | None:
        ...


@runtime_checkable
class TransactionalEvent(ConnectionAware, Protocol):
    """An event that carries its originating connection.

    Such events are always buffered while their connection is inside a
    transaction, even when no configured pattern includes them.
    """

    def set_connection(self, connection: ITransactionalConnection) -> None:
        ...


ConnectionResolver: TypeAlias = Callable[[Any], "ITransactionalConnection | None"]


def resolve_connection(value: Any) -> ITransactionalConnection | None:
    """Return the connection exposed by *value*, if it exposes one."""
    if isinstance(value, ConnectionAware):
        return value.get_connection()
    return None
