"""Audit stamping applied by persistence contexts.

Actors are stamped when an entity is registered through ``add``/``update``;
timestamps are stamped during ``save`` for entries that are about to be written.
Entities without the :class:`Auditable` capability are skipped silently.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from datacontext.domain.model import Auditable

if TYPE_CHECKING:
    from datetime import datetime


def _stampable(entity: object) -> Auditable | None:
    if isinstance(entity, Auditable) and not entity.ignore_audit_on_commit:
        return entity
    return None


def stamp_actor(entity: object, actor: str | None) -> None:
    """Record ``actor`` as modifier, and as creator when none is set yet."""

    if actor is None or not actor.strip():
        return
    auditable = _stampable(entity)
    if auditable is None:
        return
    if not auditable.created_by:
        auditable.created_by = actor
    auditable.modified_by = actor


def stamp_timestamps(entity: object, now: datetime) -> None:
    """Record ``now`` as modification time, and as creation time when unset."""

    auditable = _stampable(entity)
    if auditable is None:
        return
    if auditable.created_on is None:
        auditable.created_on = now
    auditable.modified_on = now
