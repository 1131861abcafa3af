from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session  # noqa: TC002

from datacontext.adapters.memory import InMemoryStoreDriver
from datacontext.adapters.sqlalchemy import SqlAlchemyStoreDriver, create_session_factory
from datacontext.domain import PersistenceContext
from tests.helpers.fakes import ManualClock, RecordingCommandExecutor
from tests.helpers.mapped import start_mappers

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def executor() -> RecordingCommandExecutor:
    return RecordingCommandExecutor()


@pytest.fixture
def memory_store() -> InMemoryStoreDriver:
    return InMemoryStoreDriver()


@pytest.fixture
def context(
    memory_store: InMemoryStoreDriver,
    clock: ManualClock,
    executor: RecordingCommandExecutor,
) -> PersistenceContext:
    return PersistenceContext(
        memory_store,
        clock=clock,
        command_executor_resolver=lambda: executor,
    )


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    registry = start_mappers()
    registry.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session = create_session_factory(sqlite_engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_context(
    sqlite_session: Session,
    clock: ManualClock,
    executor: RecordingCommandExecutor,
) -> PersistenceContext:
    return PersistenceContext(
        SqlAlchemyStoreDriver(sqlite_session),
        clock=clock,
        command_executor_resolver=lambda: executor,
    )
