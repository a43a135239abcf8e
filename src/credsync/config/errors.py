"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for credsync configuration problems."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required environment variables are absent or blank."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when an environment variable holds a value that cannot be parsed."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
        self.name = name
        self.value = value
