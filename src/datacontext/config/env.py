"""Typed readers for environment variables."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import InvalidConfigurationError, MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def require_env_vars(names: Iterable[str]) -> dict[str, str]:
    """Read required variables, failing once with every unset or blank name."""

    found = {name: os.getenv(name, "") for name in names}
    missing = sorted(name for name, value in found.items() if not value.strip())
    if missing:
        raise MissingConfigurationError(f"Missing configuration for: {', '.join(missing)}")
    return found


def env_flag(name: str, *, default: bool = False) -> bool:
    """Read a boolean switch such as ``DATACONTEXT_ECHO_SQL=1``."""

    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(name, value, "a boolean such as 1/0 or yes/no")
