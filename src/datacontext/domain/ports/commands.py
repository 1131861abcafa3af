"""Command executor port for commit-time side effects."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from datacontext.domain.model import TrackedEntry


@dataclass(frozen=True, slots=True)
class ChangesSaved:
    """Dispatched after a save has written its batch.

    ``committed`` is false when the save joined an outer transaction that is still open.
    """

    affected: int
    entries: tuple[TrackedEntry, ...]
    committed: bool = True


@runtime_checkable
class CommandExecutor(Protocol):
    def execute(self, command: object) -> None: ...


class NullCommandExecutor:
    def execute(self, command: object) -> None:
        _ = command


CommandExecutorResolver: TypeAlias = Callable[[], CommandExecutor]


def null_command_executor() -> CommandExecutor:
    return NullCommandExecutor()
