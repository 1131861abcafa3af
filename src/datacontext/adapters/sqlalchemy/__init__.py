"""SQLAlchemy adapter package."""

from __future__ import annotations

from .session import (
    StartupError,
    configured_engine,
    create_session_factory,
    is_started,
    open_context,
    shutdown,
    startup,
)
from .store import SqlAlchemyStoreDriver
from .types import UTCDateTime, audit_columns

__all__ = [
    "SqlAlchemyStoreDriver",
    "StartupError",
    "UTCDateTime",
    "audit_columns",
    "configured_engine",
    "create_session_factory",
    "is_started",
    "open_context",
    "shutdown",
    "startup",
]
