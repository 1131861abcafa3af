"""Required-style transaction scopes.

A scope opened while another scope of the same :class:`AmbientTransaction` is
active joins it instead of starting a new transaction. Only the outermost scope
commits; a joined scope that exits without ``complete()`` dooms the whole
transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from datacontext.domain.errors import TransactionAbortedError

if TYPE_CHECKING:
    from types import TracebackType

    from datacontext.domain.ports import TransactionalStore

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AmbientTransaction:
    """Request-scoped handle to the currently open scope (if any)."""

    current: TransactionScope | None = None

    @property
    def active(self) -> bool:
        return self.current is not None

    def doom(self) -> None:
        """Make the open transaction, if any, roll back when its outermost scope exits."""
        if self.current is not None:
            self.current.doom()


class TransactionScope:
    def __init__(self, store: TransactionalStore, ambient: AmbientTransaction) -> None:
        self._store = store
        self._ambient = ambient
        self._parent: TransactionScope | None = None
        self._completed = False
        self._doomed = False
        self._entered = False

    @property
    def joined(self) -> bool:
        return self._parent is not None

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def root(self) -> TransactionScope:
        scope = self
        while scope._parent is not None:  # noqa: SLF001
            scope = scope._parent  # noqa: SLF001
        return scope

    def complete(self) -> None:
        """Vote to commit; without this the transaction rolls back on exit."""
        self._completed = True

    def doom(self) -> None:
        self.root._doomed = True  # noqa: SLF001

    def __enter__(self) -> TransactionScope:
        if self._entered:
            raise RuntimeError("Transaction scope cannot be entered twice")
        self._entered = True
        self._parent = self._ambient.current
        if self._parent is None:
            log.debug("Beginning transaction")
            self._store.begin()
        self._ambient.current = self
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self._ambient.current = self._parent
        succeeded = self._completed and exc_type is None

        if self._parent is not None:
            if not succeeded:
                self.doom()
            return False

        if succeeded and not self._doomed:
            self._store.commit()
            log.debug("Committed transaction")
            return False

        self._store.rollback()
        log.debug("Rolled back transaction")
        if succeeded:
            raise TransactionAbortedError(
                "Transaction rolled back because a joined scope did not complete"
            )
        return False
