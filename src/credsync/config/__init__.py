"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_float, optional_env_var, require_env_vars
from .errors import ConfigurationError, InvalidConfigurationError, MissingConfigurationError
from .keys import get_schema_keys
from .kubernetes import KubernetesConfig, get_kubernetes_config
from .logging import configure_logging
from .storage import DatabaseConfig, StoreBackend, get_database_config, get_store_backend

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "InvalidConfigurationError",
    "KubernetesConfig",
    "MissingConfigurationError",
    "StoreBackend",
    "configure_logging",
    "env_flag",
    "env_float",
    "get_database_config",
    "get_kubernetes_config",
    "get_schema_keys",
    "get_store_backend",
    "optional_env_var",
    "require_env_vars",
]
