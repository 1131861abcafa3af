"""Ports for the store driver behind a persistence context."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from datacontext.domain.model import EntityState, TrackedEntry


TEntity = TypeVar("TEntity")


@runtime_checkable
class ChangeTracker(Protocol):
    """Lifecycle bookkeeping for entity instances known to a store session."""

    def state_of(self, entity: object) -> EntityState: ...

    def track(self, entity: object) -> object:
        """Register a detached instance as ``ADDED`` and return the tracked instance."""
        ...

    def attach(self, entity: object) -> object:
        """Register an instance with existing identity and return the tracked instance."""
        ...

    def mark_modified(self, entity: object) -> None: ...

    def remove(self, entity: object) -> None: ...

    def entries(self) -> Sequence[TrackedEntry]:
        """Return every tracked instance with its current state, detecting changes."""
        ...


@runtime_checkable
class TransactionalStore(Protocol):
    """Transaction control of the underlying store."""

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@runtime_checkable
class StoreDriver(ChangeTracker, TransactionalStore, Protocol):
    """Typed lookup, change tracking, flushing and transactions in one session."""

    def key_arity(self, entity_type: type) -> int: ...

    def get(self, entity_type: type[TEntity], key: tuple[object, ...]) -> TEntity | None: ...

    def flush(self) -> int:
        """Write pending changes and return the number of entities affected."""
        ...

    def close(self) -> None: ...
