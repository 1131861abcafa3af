"""Runtime switches for persistence contexts."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .env import env_flag
from .errors import InvalidConfigurationError


LOG_LEVEL_VAR = "DATACONTEXT_LOG_LEVEL"
ECHO_SQL_VAR = "DATACONTEXT_ECHO_SQL"


@dataclass(frozen=True, slots=True)
class ContextConfig:
    echo_sql: bool = False
    log_level: int = logging.INFO


def _parse_log_level(value: str) -> int:
    candidate = value.strip().upper()
    if candidate.isdigit():
        return int(candidate)
    level = logging.getLevelNamesMapping().get(candidate)
    if level is None:
        raise InvalidConfigurationError(LOG_LEVEL_VAR, value, "a logging level name")
    return level


def get_context_config() -> ContextConfig:
    raw_level = os.getenv(LOG_LEVEL_VAR)
    return ContextConfig(
        echo_sql=env_flag(ECHO_SQL_VAR),
        log_level=_parse_log_level(raw_level) if raw_level else logging.INFO,
    )
