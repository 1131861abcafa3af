"""Store driver backed by a SQLAlchemy ORM session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import inspect
from sqlalchemy.exc import InvalidRequestError, NoInspectionAvailable, SQLAlchemyError
from sqlalchemy.orm import make_transient, make_transient_to_detached
from sqlalchemy.orm.attributes import flag_dirty, flag_modified

from datacontext.domain.errors import InvalidKeyError, StoreWriteError
from datacontext.domain.model import EntityState, TrackedEntry

if TYPE_CHECKING:
    from sqlalchemy.orm import InstanceState, Mapper, Session

log = logging.getLogger(__name__)

TEntity = TypeVar("TEntity")


def _mapper_for(entity_type: type) -> Mapper[object]:
    try:
        return inspect(entity_type)
    except NoInspectionAvailable as exc:
        raise InvalidKeyError(f"{entity_type.__name__} is not a mapped entity type") from exc


def _instance_state(entity: object) -> InstanceState[object]:
    try:
        return inspect(entity)
    except NoInspectionAvailable as exc:
        raise InvalidKeyError(f"{type(entity).__name__} is not a mapped entity type") from exc


class SqlAlchemyStoreDriver:
    """Exposes session bookkeeping as persistence-context lifecycle states.

    ``transient`` instances are detached, ``pending`` ones added; persistent instances
    are deleted, modified or unchanged depending on the session's pending work.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _belongs_here(self, state: InstanceState[object]) -> bool:
        return state.session is self.session

    # Change tracking -------------------------------------------------------------

    def state_of(self, entity: object) -> EntityState:
        state = _instance_state(entity)
        if state.pending and self._belongs_here(state):
            return EntityState.ADDED
        if not state.persistent or not self._belongs_here(state):
            return EntityState.DETACHED
        if entity in self.session.deleted:
            return EntityState.DELETED
        if self.session.is_modified(entity):
            return EntityState.MODIFIED
        return EntityState.UNCHANGED

    def track(self, entity: object) -> object:
        state = _instance_state(entity)
        if state.detached:
            # Add means insert, even for instances loaded by another session
            make_transient(entity)
        self.session.add(entity)
        return entity

    def attach(self, entity: object) -> object:
        state = _instance_state(entity)
        if state.transient:
            identity = state.mapper.primary_key_from_instance(entity)
            if any(component is None for component in identity):
                raise InvalidKeyError(
                    f"Cannot attach {type(entity).__name__} without a complete key"
                )
            make_transient_to_detached(entity)
        if not self._belongs_here(state):
            try:
                self.session.add(entity)
            except InvalidRequestError as exc:
                raise InvalidKeyError(f"Cannot attach {type(entity).__name__}: {exc}") from exc
        return entity

    def mark_modified(self, entity: object) -> None:
        state = _instance_state(entity)
        # pending inserts stay inserts
        if state.pending:
            return
        if entity in self.session.deleted:
            self.session.expunge(entity)
            self.session.add(entity)
        if state.expired_attributes:
            # expired columns carry no history to flag, e.g. after a rollback
            try:
                self.session.refresh(entity, attribute_names=list(state.expired_attributes))
            except SQLAlchemyError as exc:
                raise StoreWriteError(
                    f"Cannot reload {type(entity).__name__} before update: {exc}"
                ) from exc

        flagged = False
        for attribute in state.mapper.column_attrs:
            if any(column.primary_key for column in attribute.columns):
                continue
            if attribute.key in state.dict:
                flag_modified(entity, attribute.key)
                flagged = True
        if not flagged:
            flag_dirty(entity)

    def remove(self, entity: object) -> None:
        state = _instance_state(entity)
        if state.pending:
            self.session.expunge(entity)
            return
        if state.transient:
            self.attach(entity)
        self.session.delete(entity)

    def entries(self) -> list[TrackedEntry]:
        deleted = self.session.deleted
        tracked: list[TrackedEntry] = []
        for entity in list(self.session.identity_map.values()):
            if entity in deleted:
                lifecycle = EntityState.DELETED
            elif self.session.is_modified(entity):
                lifecycle = EntityState.MODIFIED
            else:
                lifecycle = EntityState.UNCHANGED
            tracked.append(TrackedEntry(entity=entity, state=lifecycle))
        tracked.extend(
            TrackedEntry(entity=entity, state=EntityState.ADDED) for entity in self.session.new
        )
        return tracked

    # Lookup ----------------------------------------------------------------------

    def key_arity(self, entity_type: type) -> int:
        return len(_mapper_for(entity_type).primary_key)

    def get(self, entity_type: type[TEntity], key: tuple[object, ...]) -> TEntity | None:
        _mapper_for(entity_type)
        entity = self.session.get(entity_type, key)
        if entity is not None and entity in self.session.deleted:
            return None
        return entity

    # Writing ---------------------------------------------------------------------

    def flush(self) -> int:
        session = self.session
        affected = (
            len(session.new)
            + len(session.deleted)
            + sum(1 for entity in session.dirty if session.is_modified(entity))
        )
        try:
            session.flush()
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Flush failed: {exc}") from exc
        log.debug("Flushed %d entities", affected)
        return affected

    # Transactions ----------------------------------------------------------------

    def begin(self) -> None:
        if not self.session.in_transaction():
            self.session.begin()

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise StoreWriteError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()

    def close(self) -> None:
        self.session.close()
