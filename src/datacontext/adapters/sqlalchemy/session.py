"""Process-wide engine binding and the persistence contexts opened on it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from datacontext.adapters.sqlalchemy.store import SqlAlchemyStoreDriver
from datacontext.config import get_context_config, get_database_config
from datacontext.domain import PersistenceContext

if TYPE_CHECKING:
    from sqlalchemy import MetaData
    from sqlalchemy.engine import Engine

    from datacontext.domain import EntityFactory
    from datacontext.domain.ports import Clock, CommandExecutorResolver

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """The adapter was used before ``startup`` or bound a second time without ``force``."""


class _Binding(NamedTuple):
    engine: Engine
    sessions: sessionmaker[Session]


class _AdapterState:
    __slots__ = ("binding",)

    def __init__(self) -> None:
        self.binding: _Binding | None = None

    def require(self) -> _Binding:
        if self.binding is None:
            raise StartupError(
                "No engine bound. Call datacontext.adapters.sqlalchemy.startup() "
                "before opening a persistence context."
            )
        return self.binding


_STATE = _AdapterState()


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions only write inside ``save``: no autoflush, no expiry on commit."""

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    metadata: MetaData | None = None,
    force: bool = False,
) -> Engine:
    """Bind the adapter to an engine, creating the tables of ``metadata`` if given.

    Without an explicit ``engine`` one is created from ``database_uri`` or, failing
    that, from ``DATABASE_URI`` and the data directory settings.
    """

    if _STATE.binding is not None and not force:
        raise StartupError(
            f"Already bound to {_STATE.binding.engine.url}; pass force=True to rebind."
        )

    bound = engine or create_engine(
        database_uri or get_database_config().uri,
        echo=get_context_config().echo_sql,
    )
    if metadata is not None:
        log.info("Creating %d tables", len(metadata.tables))
        metadata.create_all(bound)

    _STATE.binding = _Binding(bound, create_session_factory(bound))
    log.info("Persistence adapter bound to %s", bound.url)
    return bound


def configured_engine() -> Engine | None:
    binding = _STATE.binding
    return binding.engine if binding is not None else None


def is_started() -> bool:
    return _STATE.binding is not None


def shutdown() -> None:
    """Dispose the bound engine and forget it."""

    binding, _STATE.binding = _STATE.binding, None
    if binding is not None:
        binding.engine.dispose()
        log.debug("Persistence adapter unbound from %s", binding.engine.url)


def open_context(
    *,
    clock: Clock | None = None,
    command_executor_resolver: CommandExecutorResolver | None = None,
    entity_factory: EntityFactory | None = None,
) -> PersistenceContext:
    """Open a persistence context over a fresh session of the bound engine."""

    return PersistenceContext(
        SqlAlchemyStoreDriver(_STATE.require().sessions()),
        clock=clock,
        command_executor_resolver=command_executor_resolver,
        entity_factory=entity_factory,
    )
