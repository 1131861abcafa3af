"""Persistence context core: entity lifecycle and the commit pipeline."""

from __future__ import annotations

from datacontext.domain.context import PersistenceContext
from datacontext.domain.errors import (
    DataContextError,
    InstantiationError,
    InvalidKeyError,
    StoreWriteError,
    TransactionAbortedError,
    ValidationError,
)
from datacontext.domain.factory import EntityFactory
from datacontext.domain.transaction import AmbientTransaction, TransactionScope

__all__ = [
    "AmbientTransaction",
    "DataContextError",
    "EntityFactory",
    "InstantiationError",
    "InvalidKeyError",
    "PersistenceContext",
    "StoreWriteError",
    "TransactionAbortedError",
    "TransactionScope",
    "ValidationError",
]
