from txevents_core.adapters.memory import InMemoryConnection
from txevents_core.domain.lifecycle import (
    TransactionBeginning,
    TransactionCommitted,
    TransactionRolledBack,
)
from txevents_core.events import EventDispatcher
from txevents_core.ports.connection import ITransactionalConnection


def test_nesting_levels() -> None:
    connection = InMemoryConnection()

    connection.begin()
    connection.begin()
    assert connection.transaction_level() == 2

    connection.rollback()
    connection.commit()
    assert connection.transaction_level() == 0
    assert connection.commit_count == 1
    assert connection.rollback_count == 1


def test_commit_and_rollback_outside_transactions_are_ignored() -> None:
    connection = InMemoryConnection()

    connection.commit()
    connection.rollback()

    assert connection.transaction_level() == 0
    assert connection.commit_count == 0
    assert connection.rollback_count == 0


def test_identifiers_are_stable_and_distinct() -> None:
    first = InMemoryConnection(name="primary")
    second = InMemoryConnection(name="primary")

    assert first.connection_id == first.connection_id
    assert first.connection_id != second.connection_id
    assert first.connection_id.startswith("primary-")


def test_announces_boundaries_on_attached_dispatcher() -> None:
    dispatcher = EventDispatcher()
    seen: list[tuple[str, int]] = []
    lifecycle = (TransactionBeginning, TransactionCommitted, TransactionRolledBack)
    for event_type in lifecycle:
        dispatcher.listen(
            event_type,
            lambda event: seen.append(
                (type(event).__name__, event.connection.transaction_level())
            ),
        )
    connection = InMemoryConnection(dispatcher)

    connection.begin()
    connection.begin()
    connection.rollback()
    connection.commit()

    assert seen == [
        ("TransactionBeginning", 1),
        ("TransactionBeginning", 2),
        ("TransactionRolledBack", 1),
        ("TransactionCommitted", 0),
    ]


def test_set_level_is_silent() -> None:
    dispatcher = EventDispatcher()
    seen: list[object] = []
    dispatcher.listen(TransactionBeginning, seen.append)
    connection = InMemoryConnection()
    connection.attach(dispatcher)

    connection.set_level(3)

    assert connection.transaction_level() == 3
    assert seen == []


def test_satisfies_connection_port() -> None:
    assert isinstance(InMemoryConnection(), ITransactionalConnection)
