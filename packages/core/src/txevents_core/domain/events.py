"""Domain Event base classes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..ports.connection import ITransactionalConnection


class DomainEvent(BaseModel):
    """Base class for structured events.

    Events are immutable. Listeners for a structured event are registered
    under its class (or its ``module.QualName``), and the transactional layer
    classifies it by that same name.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, object] = Field(default_factory=dict)
    correlation_id: str | None = None


class TransactionalDomainEvent(DomainEvent):
    """A domain event bound to the connection it was raised on.

    Implements the ``TransactionalEvent`` port: the dispatcher buffers it
    while that connection has an open transaction, whether or not any
    configured pattern includes it.

    Example::

        class OrderPlaced(TransactionalDomainEvent):
            order_id: int

        dispatcher.dispatch(OrderPlaced(order_id=1).bind(connection))
    """

    _connection: ITransactionalConnection | None = PrivateAttr(default=None)

    def get_connection(self) -> ITransactionalConnection | None:
        return self._connection

    def set_connection(self, connection: ITransactionalConnection) -> None:
        self._connection = connection

    def bind(self, connection: ITransactionalConnection) -> TransactionalDomainEvent:
        """Set the connection and return the event (fluent helper)."""
        self.set_connection(connection)
        return self
