"""Exceptions raised by persistence contexts."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class DataContextError(Exception):
    """Base class for all persistence context failures."""


class ValidationError(DataContextError, ValueError):
    """Raised by an entity's ``validate`` when its invariants do not hold."""

    def __init__(self, entity: object, messages: Iterable[str] | str) -> None:
        self.entity = entity
        self.messages: tuple[str, ...] = (
            (messages,) if isinstance(messages, str) else tuple(messages)
        )
        summary = "; ".join(self.messages) or "invalid entity"
        super().__init__(f"{type(entity).__name__}: {summary}")


class InvalidKeyError(DataContextError, LookupError):
    """Raised when a key does not match the entity type's declared key."""


class InstantiationError(DataContextError, TypeError):
    """Raised when an entity type cannot be default-constructed."""


class StoreWriteError(DataContextError):
    """Raised when the underlying store fails to write a batch.

    The driver exception is available as ``__cause__``.
    """


class TransactionAbortedError(DataContextError):
    """Raised when an outer transaction completes after a joined scope failed."""
