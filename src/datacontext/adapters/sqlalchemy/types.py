"""Column types and helpers for mapping auditable entities."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, DateTime, String, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy import Dialect

ACTOR_LENGTH = 255


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def audit_columns() -> list[Column[Any]]:
    """Return fresh columns for the ``Auditable`` fields, to splat into a ``Table``.

    ``ignore_audit_on_commit`` is runtime-only and has no column.
    """

    return [
        Column("created_on", UTCDateTime(), nullable=True),
        Column("modified_on", UTCDateTime(), nullable=True),
        Column("created_by", String(ACTOR_LENGTH), nullable=True),
        Column("modified_by", String(ACTOR_LENGTH), nullable=True),
    ]
