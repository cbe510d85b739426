from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
from sqlalchemy import Engine, String, create_engine, event, select
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    sessionmaker,
)

from txevents_core.bootstrap import install_transactional_dispatcher
from txevents_core.config import TransactionalEventsConfig
from txevents_core.domain.events import TransactionalDomainEvent
from txevents_core.domain.lifecycle import TransactionCommitted, TransactionRolledBack
from txevents_core.events import EventDispatcher, TransactionalDispatcher
from txevents_sqlalchemy import (
    SessionConnection,
    SessionEventBridge,
    SessionNotInstrumentedError,
    connection_for,
    orm_event_name,
    resolve_session_connection,
)


class Base(DeclarativeBase):
    pass


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    reference: Mapped[str] = mapped_column(String(50))


class OrderConfirmed(TransactionalDomainEvent):
    reference: str


INSERTED = f"orm.inserted: {__name__}.Order"
UPDATED = f"orm.updated: {__name__}.Order"
DELETED = f"orm.deleted: {__name__}.Order"


class Recorder:
    """Collects every ORM event a wildcard listener receives."""

    def __init__(self) -> None:
        self.records: list[tuple[str, tuple[Any, ...]]] = []

    def __call__(self, name: str, args: tuple[Any, ...]) -> None:
        self.records.append((name, args))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.records]

    @property
    def references(self) -> list[str]:
        return [args[0].reference for _, args in self.records]


@pytest.fixture()
def engine() -> Iterator[Engine]:
    eng = create_engine("sqlite://")

    # pysqlite needs an explicit BEGIN for SAVEPOINT support
    @event.listens_for(eng, "connect")
    def _do_connect(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(eng, "begin")
    def _do_begin(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def events() -> TransactionalDispatcher:
    dispatcher = install_transactional_dispatcher(
        EventDispatcher(),
        TransactionalEventsConfig(),
        connection_resolver=resolve_session_connection,
    )
    assert isinstance(dispatcher, TransactionalDispatcher)
    return dispatcher


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
def bridge(
    events: TransactionalDispatcher, session_factory: sessionmaker[Session]
) -> Iterator[SessionEventBridge]:
    bridge = SessionEventBridge(events)
    bridge.install(session_factory)
    bridge.install_mapper_events(Base)
    yield bridge
    bridge.uninstall()


@pytest.fixture()
def recorder(events: TransactionalDispatcher) -> Recorder:
    recorder = Recorder()
    events.listen("orm.*", recorder)
    return recorder


# ── Commit / rollback ───────────────────────────────────────────


def test_insert_is_delivered_after_commit(
    bridge, events, session_factory, recorder
) -> None:
    with session_factory() as session:
        with session.begin():
            session.add(Order(reference="A-1"))
            session.flush()

            assert recorder.records == []
            assert events.has_pending_events(connection_for(session))

        assert recorder.names == [INSERTED]
        assert recorder.references == ["A-1"]
        assert len(events.ledger) == 0


def test_rollback_discards_events(bridge, events, session_factory, recorder) -> None:
    with session_factory() as session:
        session.add(Order(reference="A-1"))
        session.flush()
        session.rollback()

    assert recorder.records == []
    assert len(events.ledger) == 0


def test_close_without_commit_discards_events(
    bridge, events, session_factory, recorder
) -> None:
    session = session_factory()
    session.add(Order(reference="A-1"))
    session.flush()

    session.close()

    assert recorder.records == []
    assert len(events.ledger) == 0


def test_update_and_delete_events(bridge, session_factory, recorder) -> None:
    with session_factory() as session:
        with session.begin():
            order = Order(reference="A-1")
            session.add(order)

        with session.begin():
            order.reference = "A-2"

        with session.begin():
            session.delete(order)

    assert recorder.names == [INSERTED, UPDATED, DELETED]


# ── Savepoints ──────────────────────────────────────────────────


def test_savepoint_release_waits_for_outer_commit(
    bridge, session_factory, recorder
) -> None:
    with session_factory() as session:
        with session.begin():
            session.add(Order(reference="outer"))
            session.flush()
            with session.begin_nested():
                session.add(Order(reference="inner"))
                session.flush()

            assert recorder.records == []

    assert recorder.references == ["outer", "inner"]


def test_savepoint_rollback_only_discards_its_level(
    bridge, events, session_factory, recorder
) -> None:
    with session_factory() as session:
        with session.begin():
            session.add(Order(reference="kept"))
            session.flush()
            with pytest.raises(RuntimeError, match="undo"):
                with session.begin_nested():
                    session.add(Order(reference="undone"))
                    session.flush()
                    raise RuntimeError("undo")

            assert [
                entry.payload.reference
                for entry in events.pending_events(connection_for(session))
            ] == ["kept"]

        rows = session.scalars(select(Order.reference)).all()

    assert rows == ["kept"]
    assert recorder.references == ["kept"]


# ── Session connection ──────────────────────────────────────────


def test_transaction_level_follows_session(bridge, session_factory) -> None:
    with session_factory() as session:
        connection = SessionConnection.for_session(session)
        assert connection.transaction_level() == 0

        with session.begin():
            assert connection.transaction_level() == 1
            with session.begin_nested():
                assert connection.transaction_level() == 2
            assert connection.transaction_level() == 1

        assert connection.transaction_level() == 0


def test_connection_identity_is_stable_per_session(bridge, session_factory) -> None:
    with session_factory() as first, session_factory() as second:
        assert SessionConnection.for_session(first) is SessionConnection.for_session(
            first
        )
        assert (
            SessionConnection.for_session(first).connection_id
            != SessionConnection.for_session(second).connection_id
        )


def test_connection_for_uninstrumented_session(engine) -> None:
    with Session(engine) as session, pytest.raises(SessionNotInstrumentedError):
        connection_for(session)


def test_lifecycle_events_are_announced(bridge, events, session_factory) -> None:
    seen: list[tuple[str, int]] = []

    def record(event: TransactionCommitted | TransactionRolledBack) -> None:
        seen.append((type(event).__name__, event.connection.transaction_level()))

    events.listen([TransactionCommitted, TransactionRolledBack], record)

    with session_factory() as session:
        with session.begin():
            session.add(Order(reference="A-1"))
        session.add(Order(reference="A-2"))
        session.flush()
        session.rollback()

    assert seen == [("TransactionCommitted", 0), ("TransactionRolledBack", 0)]


# ── Resolution ──────────────────────────────────────────────────


def test_resolve_session_connection(bridge, session_factory) -> None:
    detached = Order(reference="detached")

    assert resolve_session_connection(None) is None
    assert resolve_session_connection("orders") is None
    assert resolve_session_connection({"id": 1}) is None
    assert resolve_session_connection(detached) is None
    assert resolve_session_connection(Order) is None

    with session_factory() as session, session.begin():
        order = Order(reference="A-1")
        session.add(order)
        assert resolve_session_connection(order) is connection_for(session)


def test_detached_entities_dispatch_immediately(
    bridge, events, session_factory, recorder
) -> None:
    with session_factory() as session:
        with session.begin():
            order = Order(reference="A-1")
            session.add(order)
    recorder.records.clear()

    events.dispatch(orm_event_name("touched", order), order)

    assert recorder.names == [f"orm.touched: {__name__}.Order"]


def test_transactional_domain_event_bound_to_session(
    bridge, events, session_factory
) -> None:
    received: list[OrderConfirmed] = []
    events.listen(OrderConfirmed, received.append)

    with session_factory() as session:
        with session.begin():
            session.add(Order(reference="A-1"))
            session.flush()
            events.dispatch(
                OrderConfirmed(reference="A-1").bind(connection_for(session))
            )
            assert received == []

    assert [event.reference for event in received] == ["A-1"]


def test_uninstall_removes_listeners(events, session_factory, recorder) -> None:
    bridge = SessionEventBridge(events)
    bridge.install(session_factory)
    bridge.install_mapper_events(Base)
    bridge.uninstall()

    with session_factory() as session, session.begin():
        session.add(Order(reference="A-1"))

    assert recorder.records == []
    assert len(events.ledger) == 0
