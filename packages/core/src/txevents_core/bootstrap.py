"""Wire a transactional dispatcher around an application's dispatcher."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import TransactionalEventsConfig
from .events.transactional import TransactionalDispatcher
from .ports.connection import resolve_connection

if TYPE_CHECKING:
    from .events.ledger import PendingLedger
    from .ports.connection import ConnectionResolver
    from .ports.event_dispatcher import IEventDispatcher

logger = logging.getLogger("txevents.bootstrap")


def install_transactional_dispatcher(
    dispatcher: IEventDispatcher,
    config: TransactionalEventsConfig | None = None,
    *,
    ledger: PendingLedger | None = None,
    connection_resolver: ConnectionResolver = resolve_connection,
) -> IEventDispatcher:
    """Return the dispatcher the application should publish through.

    When the layer is disabled this is *dispatcher* itself; otherwise a
    ``TransactionalDispatcher`` configured from *config* that wraps it.
    """
    config = config or TransactionalEventsConfig()
    if not config.enabled:
        logger.info("Transactional events disabled; using plain dispatcher")
        return dispatcher

    transactional = TransactionalDispatcher(
        dispatcher,
        ledger,
        included=config.events,
        excluded=config.excluded,
        connection_resolver=connection_resolver,
    )
    logger.info(
        "Transactional events enabled (events: %s, excluded: %s)",
        config.events,
        config.excluded,
    )
    return transactional
