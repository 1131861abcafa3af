"""Persistence context: lifecycle, validation, audit stamping and atomic commit."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal, TypeVar, cast

from datacontext.domain.audit import stamp_actor, stamp_timestamps
from datacontext.domain.errors import InvalidKeyError
from datacontext.domain.factory import EntityFactory
from datacontext.domain.model import EntityState, Validatable
from datacontext.domain.ports import ChangesSaved, SystemClock, null_command_executor
from datacontext.domain.transaction import AmbientTransaction, TransactionScope

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from datacontext.domain.model import TrackedEntry
    from datacontext.domain.ports import Clock, CommandExecutorResolver, StoreDriver

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")


class PersistenceContext:
    """Typed facade over one store session, scoped to a single unit of work.

    Not safe for concurrent use: callers must not share a context across threads.
    """

    def __init__(
        self,
        store: StoreDriver,
        *,
        clock: Clock | None = None,
        command_executor_resolver: CommandExecutorResolver | None = None,
        entity_factory: EntityFactory | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._resolve_command_executor = command_executor_resolver or null_command_executor
        self._entity_factory = entity_factory or EntityFactory()
        self._ambient = AmbientTransaction()
        self._closed = False

    @property
    def store(self) -> StoreDriver:
        return self._store

    @property
    def in_transaction(self) -> bool:
        return self._ambient.active

    def __enter__(self) -> PersistenceContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self._store.rollback()
        self.close()
        return False  # don't swallow exceptions

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._store.close()

    # Entity lifecycle ------------------------------------------------------------

    def create_entity(self, entity_type: type[TEntity]) -> TEntity:
        """Return a new, untracked default instance of ``entity_type``."""
        return self._entity_factory.create(entity_type)

    def add(self, item: TEntity | None, actor: str | None = None) -> TEntity | None:
        if item is None:
            stamp_actor(item, actor)
            return None

        if self._store.state_of(item) is EntityState.DETACHED:
            item = cast("TEntity", self._store.track(item))
        stamp_actor(item, actor)
        return item

    def update(self, item: TEntity | None, actor: str | None = None) -> TEntity | None:
        """Attach ``item`` and mark it modified, whatever its current state."""
        if item is None:
            return None

        attached = cast("TEntity", self._store.attach(item))
        stamp_actor(attached, actor)
        self._store.mark_modified(attached)
        return attached

    def get(self, entity_type: type[TEntity], keys: Sequence[object]) -> TEntity | None:
        key = tuple(keys)
        arity = self._store.key_arity(entity_type)
        if len(key) != arity:
            raise InvalidKeyError(
                f"{entity_type.__name__} has {arity} key component(s), got {len(key)}"
            )
        return self._store.get(entity_type, key)

    def remove(self, item: TEntity | None) -> TEntity | None:
        if item is None:
            return None
        self._store.remove(item)
        return item

    def entries(self) -> tuple[TrackedEntry, ...]:
        return tuple(self._store.entries())

    # Commit pipeline -------------------------------------------------------------

    def transaction(self) -> TransactionScope:
        """Open an explicit scope that subsequent saves on this context join."""
        return TransactionScope(self._store, self._ambient)

    def save(self) -> int:
        """Validate, stamp and write every pending change as one atomic batch."""
        entries = tuple(self._store.entries())
        command_executor = self._resolve_command_executor()
        log.debug("Saving %d tracked entries", len(entries))

        now = self._clock.now()
        try:
            for entry in entries:
                if not entry.state.is_dirty:
                    continue
                if isinstance(entry.entity, Validatable):
                    entry.entity.validate()
                stamp_timestamps(entry.entity, now)
        except BaseException:
            # a failed batch rolls back the enclosing transaction
            self._ambient.doom()
            raise

        with self.transaction() as scope:
            affected = self._store.flush()
            scope.complete()

        log.debug("Saved %d entities", affected)
        command_executor.execute(
            ChangesSaved(affected=affected, entries=entries, committed=not scope.joined)
        )
        return affected
