"""Lifecycle states reported by change trackers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EntityState(StrEnum):
    DETACHED = "detached"
    ADDED = "added"
    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    DELETED = "deleted"

    @property
    def is_dirty(self) -> bool:
        """Whether entries in this state are validated and stamped on save."""
        return self in (EntityState.ADDED, EntityState.MODIFIED)


@dataclass(frozen=True, slots=True)
class TrackedEntry:
    """Point-in-time view of one tracked instance."""

    entity: object
    state: EntityState
