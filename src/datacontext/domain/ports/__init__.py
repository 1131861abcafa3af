"""Ports consumed by persistence contexts."""

from __future__ import annotations

from .clock import Clock, SystemClock
from .commands import (
    ChangesSaved,
    CommandExecutor,
    CommandExecutorResolver,
    NullCommandExecutor,
    null_command_executor,
)
from .store import ChangeTracker, StoreDriver, TransactionalStore

__all__ = [
    "ChangeTracker",
    "ChangesSaved",
    "Clock",
    "CommandExecutor",
    "CommandExecutorResolver",
    "NullCommandExecutor",
    "StoreDriver",
    "SystemClock",
    "TransactionalStore",
    "null_command_executor",
]
