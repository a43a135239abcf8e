"""Schema key configuration."""

from __future__ import annotations

import os
from dataclasses import fields
from typing import Final

from credsync.domain.schema import DEFAULT_SCHEMA_KEYS, SchemaKeys

_ENV_PREFIX: Final[str] = "CREDSYNC_"


def _env_name(field_name: str) -> str:
    return f"{_ENV_PREFIX}{field_name.upper()}_KEY"


def get_schema_keys() -> SchemaKeys:
    """Return the schema keys, overriding defaults with ``CREDSYNC_<FIELD>_KEY`` variables."""

    overrides: dict[str, str] = {}
    for field in fields(SchemaKeys):
        value = os.getenv(_env_name(field.name))
        if value is not None and value.strip():
            overrides[field.name] = value.strip()
    if not overrides:
        return DEFAULT_SCHEMA_KEYS
    return SchemaKeys(**overrides)
