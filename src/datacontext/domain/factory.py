"""Default construction of entities keyed by type."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar, cast

from datacontext.domain.errors import InstantiationError

if TYPE_CHECKING:
    from collections.abc import Callable


TEntity = TypeVar("TEntity")


class EntityFactory:
    """Registry of zero-argument factories.

    Types without a registered factory are built by calling the class with no
    arguments.
    """

    def __init__(self) -> None:
        self._factories: dict[type, Callable[[], object]] = {}

    def register(self, entity_type: type[TEntity], factory: Callable[[], TEntity]) -> None:
        self._factories[entity_type] = factory

    def is_registered(self, entity_type: type) -> bool:
        return entity_type in self._factories

    def create(self, entity_type: type[TEntity]) -> TEntity:
        factory = self._factories.get(entity_type, entity_type)
        try:
            instance = factory()
        except TypeError as exc:
            raise InstantiationError(
                f"Cannot create a default {entity_type.__name__}: {exc}"
            ) from exc
        if not isinstance(instance, entity_type):
            raise InstantiationError(
                f"Factory for {entity_type.__name__} returned {type(instance).__name__}"
            )
        return cast("TEntity", instance)
