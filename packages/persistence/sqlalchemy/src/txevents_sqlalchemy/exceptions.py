"""Exceptions for the SQLAlchemy integration."""

from __future__ import annotations

from txevents_core.primitives.exceptions import TransactionalEventsError


class SQLAlchemyIntegrationError(TransactionalEventsError):
    """Base exception for all SQLAlchemy-specific errors."""


class SessionNotInstrumentedError(SQLAlchemyIntegrationError):
    """Raised when a session has no transactional connection attached.

    Usage: ``connection_for(session)`` raises this for sessions whose events
    were never routed through a ``SessionEventBridge``.
    """


__all__: list[str] = [
    "SQLAlchemyIntegrationError",
    "SessionNotInstrumentedError",
]
