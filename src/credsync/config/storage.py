"""Object store selection and database configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Final

from .env import optional_env_var
from .errors import InvalidConfigurationError

APP_DIR_NAME: Final[str] = "credsync"
DEFAULT_DB_FILENAME: Final[str] = "credsync.db"


class StoreBackend(StrEnum):
    KUBERNETES = "kubernetes"
    DATABASE = "database"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_store_backend() -> StoreBackend:
    value = optional_env_var("CREDSYNC_STORE")
    if value is None:
        return StoreBackend.KUBERNETES
    try:
        return StoreBackend(value.lower())
    except ValueError as exc:
        expected = " or ".join(backend.value for backend in StoreBackend)
        raise InvalidConfigurationError("CREDSYNC_STORE", value, expected) from exc


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_database_config() -> DatabaseConfig:
    env_uri = optional_env_var("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    env_dir = optional_env_var("CREDSYNC_DATA_DIR")
    data_dir = Path(env_dir).expanduser().resolve() if env_dir else _default_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{data_dir / DEFAULT_DB_FILENAME}")
