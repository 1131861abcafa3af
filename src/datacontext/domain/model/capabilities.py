"""Optional entity capabilities, detected structurally at runtime."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime


@runtime_checkable
class Auditable(Protocol):
    """Carries created/modified timestamps and actors."""

    created_on: datetime | None
    modified_on: datetime | None
    created_by: str | None
    modified_by: str | None
    # suppresses every audit stamp for this instance
    ignore_audit_on_commit: bool


@runtime_checkable
class Validatable(Protocol):
    """Checks its own invariants before commit.

    ``validate`` raises ``ValidationError`` when the entity must not be written.
    """

    def validate(self) -> None: ...


@dataclass(eq=False, kw_only=True)
class AuditableMixin:
    """Capability: audit fields with unset defaults."""

    created_on: datetime | None = None
    modified_on: datetime | None = None
    created_by: str | None = None
    modified_by: str | None = None
    ignore_audit_on_commit: bool = field(default=False, repr=False, compare=False)
