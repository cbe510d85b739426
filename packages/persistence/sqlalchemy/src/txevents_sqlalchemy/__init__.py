"""SQLAlchemy integration for txevents."""

from __future__ import annotations

from .bridge import (
    MAPPER_EVENTS,
    ORM_EVENT_PREFIX,
    SessionEventBridge,
    orm_event_name,
    resolve_session_connection,
)
from .connection import SessionConnection, connection_for
from .exceptions import SessionNotInstrumentedError, SQLAlchemyIntegrationError

__all__ = [
    "MAPPER_EVENTS",
    "ORM_EVENT_PREFIX",
    "SessionConnection",
    "SessionEventBridge",
    "SessionNotInstrumentedError",
    "SQLAlchemyIntegrationError",
    "connection_for",
    "orm_event_name",
    "resolve_session_connection",
]
