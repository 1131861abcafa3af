"""Public domain model surface."""

from __future__ import annotations

from datacontext.domain.model.capabilities import Auditable, AuditableMixin, Validatable
from datacontext.domain.model.entity import Entity, key_fields_of, key_of, new_id
from datacontext.domain.model.state import EntityState, TrackedEntry

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "key_fields_of",
    "key_of",
    "new_id",
    # capabilities
    "Auditable",
    "AuditableMixin",
    "Validatable",
    # tracking
    "EntityState",
    "TrackedEntry",
]
