"""Dictionary-backed store driver.

Tracks instances in registration order, detects modifications by comparing field
snapshots and keeps "rows" as shallow copies keyed by ``(type, key)``. Transactions
snapshot rows and tracker state on ``begin`` and restore them on ``rollback``.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias, TypeVar, cast

from datacontext.domain.errors import InvalidKeyError, StoreWriteError
from datacontext.domain.model import EntityState, TrackedEntry, key_fields_of, key_of

if TYPE_CHECKING:
    from collections.abc import Iterator

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")

RowKey: TypeAlias = tuple[type, tuple[object, ...]]


def _field_values(entity: object) -> dict[str, object]:
    if dataclasses.is_dataclass(entity):
        return {f.name: getattr(entity, f.name) for f in dataclasses.fields(entity) if f.compare}
    return dict(vars(entity))


def _row_key(entity: object) -> RowKey:
    return (type(entity), key_of(entity))


def _has_complete_key(entity: object) -> bool:
    return all(component is not None for component in key_of(entity))


@dataclass(slots=True)
class _Tracked:
    entity: object
    state: EntityState
    original: dict[str, object] | None = None

    def current_state(self) -> EntityState:
        if self.state is EntityState.UNCHANGED and _field_values(self.entity) != self.original:
            return EntityState.MODIFIED
        return self.state


@dataclass(slots=True)
class _Savepoint:
    rows: dict[RowKey, object]
    tracked: dict[int, _Tracked]


class InMemoryStoreDriver:
    def __init__(self) -> None:
        self._rows: dict[RowKey, object] = {}
        self._tracked: dict[int, _Tracked] = {}
        self._savepoint: _Savepoint | None = None
        self.flush_count = 0
        self.closed = False

    # Inspection helpers ----------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._savepoint is not None

    def stored(self, entity_type: type, *key: object) -> object | None:
        """Return a copy of the persisted row, bypassing the tracker."""
        row = self._rows.get((entity_type, key))
        return copy.copy(row) if row is not None else None

    def row_count(self, entity_type: type | None = None) -> int:
        return sum(1 for row_type, _ in self._rows if entity_type in (None, row_type))

    # Change tracking -------------------------------------------------------------

    def state_of(self, entity: object) -> EntityState:
        tracked = self._tracked.get(id(entity))
        if tracked is None:
            return EntityState.DETACHED
        return tracked.current_state()

    def track(self, entity: object) -> object:
        if id(entity) not in self._tracked:
            self._tracked[id(entity)] = _Tracked(entity, EntityState.ADDED)
        return entity

    def attach(self, entity: object) -> object:
        if id(entity) in self._tracked:
            return entity
        if not _has_complete_key(entity):
            raise InvalidKeyError(
                f"Cannot attach {type(entity).__name__} without a complete key"
            )
        if self._find_tracked(type(entity), key_of(entity)) is not None:
            raise InvalidKeyError(
                f"Another {type(entity).__name__} with key {key_of(entity)!r} is already tracked"
            )
        self._tracked[id(entity)] = _Tracked(
            entity, EntityState.UNCHANGED, original=_field_values(entity)
        )
        return entity

    def mark_modified(self, entity: object) -> None:
        tracked = self._require_tracked(entity)
        # pending inserts stay inserts
        if tracked.state is not EntityState.ADDED:
            tracked.state = EntityState.MODIFIED

    def remove(self, entity: object) -> None:
        tracked = self._tracked.get(id(entity))
        if tracked is None:
            self.attach(entity)
            tracked = self._require_tracked(entity)
        if tracked.state is EntityState.ADDED:
            del self._tracked[id(entity)]
            return
        tracked.state = EntityState.DELETED

    def entries(self) -> list[TrackedEntry]:
        return [
            TrackedEntry(entity=tracked.entity, state=tracked.current_state())
            for tracked in self._tracked.values()
        ]

    # Lookup ----------------------------------------------------------------------

    def key_arity(self, entity_type: type) -> int:
        return len(key_fields_of(entity_type))

    def get(self, entity_type: type[TEntity], key: tuple[object, ...]) -> TEntity | None:
        tracked = self._find_tracked(entity_type, key)
        if tracked is not None:
            if tracked.state is EntityState.DELETED:
                return None
            return cast("TEntity", tracked.entity)

        row = self._rows.get((entity_type, key))
        if row is None:
            return None
        entity = copy.copy(row)
        self._tracked[id(entity)] = _Tracked(
            entity, EntityState.UNCHANGED, original=_field_values(entity)
        )
        return cast("TEntity", entity)

    # Writing ---------------------------------------------------------------------

    def flush(self) -> int:
        self.flush_count += 1
        pending = [
            (tracked, tracked.current_state())
            for tracked in self._tracked.values()
            if tracked.current_state() is not EntityState.UNCHANGED
        ]
        inserted: set[RowKey] = set()
        for tracked, state in pending:
            self._check_writable(tracked.entity, state)
            if state is EntityState.ADDED:
                row_key = _row_key(tracked.entity)
                if row_key in inserted:
                    raise StoreWriteError(
                        f"Duplicate key {row_key[1]!r} for {row_key[0].__name__} in batch"
                    )
                inserted.add(row_key)

        for tracked, state in pending:
            row_key = _row_key(tracked.entity)
            if state is EntityState.DELETED:
                del self._rows[row_key]
                del self._tracked[id(tracked.entity)]
                continue
            self._rows[row_key] = copy.copy(tracked.entity)
            tracked.state = EntityState.UNCHANGED
            tracked.original = _field_values(tracked.entity)

        log.debug("Flushed %d entities", len(pending))
        return len(pending)

    def _check_writable(self, entity: object, state: EntityState) -> None:
        name = type(entity).__name__
        if not _has_complete_key(entity):
            raise StoreWriteError(f"{name} has an incomplete key {key_of(entity)!r}")
        exists = _row_key(entity) in self._rows
        if state is EntityState.ADDED and exists:
            raise StoreWriteError(f"Duplicate key {key_of(entity)!r} for {name}")
        if state in (EntityState.MODIFIED, EntityState.DELETED) and not exists:
            raise StoreWriteError(f"No stored {name} with key {key_of(entity)!r}")

    # Transactions ----------------------------------------------------------------

    def begin(self) -> None:
        if self._savepoint is not None:
            return
        self._savepoint = _Savepoint(
            rows=dict(self._rows),
            tracked={
                identity: dataclasses.replace(
                    tracked,
                    original=dict(tracked.original) if tracked.original is not None else None,
                )
                for identity, tracked in self._tracked.items()
            },
        )

    def commit(self) -> None:
        self._savepoint = None

    def rollback(self) -> None:
        if self._savepoint is None:
            return
        self._rows = self._savepoint.rows
        self._tracked = self._savepoint.tracked
        self._savepoint = None

    def close(self) -> None:
        self.rollback()
        self._tracked.clear()
        self.closed = True

    # Internals -------------------------------------------------------------------

    def _iter_tracked(self, entity_type: type) -> Iterator[_Tracked]:
        return (t for t in self._tracked.values() if type(t.entity) is entity_type)

    def _find_tracked(self, entity_type: type, key: tuple[object, ...]) -> _Tracked | None:
        return next((t for t in self._iter_tracked(entity_type) if key_of(t.entity) == key), None)

    def _require_tracked(self, entity: object) -> _Tracked:
        tracked = self._tracked.get(id(entity))
        if tracked is None:
            raise ValueError(f"{type(entity).__name__} instance is not tracked")
        return tracked
