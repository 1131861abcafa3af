"""
Base building blocks:
identity and key declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


def key_fields_of(entity_type: type) -> tuple[str, ...]:
    """Return the declared key fields of an entity class (``("id",)`` by default)."""

    return tuple(getattr(entity_type, "KEY_FIELDS", ("id",)))


def key_of(entity: object) -> tuple[object, ...]:
    return tuple(getattr(entity, name, None) for name in key_fields_of(type(entity)))


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain."""

    id: UUID = field(default_factory=new_id)

    # ordered key components; composite keys override this
    KEY_FIELDS: ClassVar[tuple[str, ...]] = ("id",)

    @property
    def key(self) -> tuple[object, ...]:
        return key_of(self)
