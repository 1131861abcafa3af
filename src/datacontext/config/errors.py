"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for problems with environment-provided settings."""


class MissingConfigurationError(ConfigurationError):
    """One or more required variables are unset or blank."""


class InvalidConfigurationError(ConfigurationError):
    """A variable is set to a value that cannot be interpreted."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
        self.name = name
        self.value = value
