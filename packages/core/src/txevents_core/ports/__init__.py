from .connection import (
    ConnectionAware,
    ConnectionResolver,
    ITransactionalConnection,
    TransactionalEvent,
    resolve_connection,
)
from .event_dispatcher import EventKey, IEventDispatcher, Listener

__all__ = [
    "ConnectionAware",
    "ConnectionResolver",
    "EventKey",
    "IEventDispatcher",
    "ITransactionalConnection",
    "Listener",
    "TransactionalEvent",
    "resolve_connection",
]
