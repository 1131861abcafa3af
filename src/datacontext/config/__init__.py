"""Application configuration helpers."""

from __future__ import annotations

from .context import ContextConfig, get_context_config
from .env import env_flag, require_env_vars
from .errors import (
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "ContextConfig",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_context_config",
    "get_database_config",
    "get_storage_config",
    "require_env_vars",
]
