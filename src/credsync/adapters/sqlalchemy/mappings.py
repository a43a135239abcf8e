"""SQLAlchemy table metadata for credential objects."""

from __future__ import annotations

import base64
import json
import logging
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, TypeDecorator

if TYPE_CHECKING:
    from sqlalchemy import Dialect
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StringMapType(TypeDecorator[dict[str, str]]):
    """Label/annotation maps stored as sorted JSON objects."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, str] | None, dialect: Dialect) -> str:
        _ = dialect
        return json.dumps(value or {}, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, str]:
        _ = dialect
        if not value:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        return {str(key): str(item) for key, item in cast(dict[Any, Any], loaded).items()}


class PayloadType(TypeDecorator[dict[str, bytes]]):
    """Byte-map payloads stored as JSON objects of base64 strings."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, bytes] | None, dialect: Dialect) -> str:
        _ = dialect
        encoded = {
            key: base64.b64encode(item).decode("ascii") for key, item in (value or {}).items()
        }
        return json.dumps(encoded, sort_keys=True)

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, bytes]:
        _ = dialect
        if not value:
            return {}
        loaded = cast(dict[str, str], json.loads(value))
        return {key: base64.b64decode(item) for key, item in loaded.items()}


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "pk": "pk_%(table_name)s",
    }
)

credential_object_table = Table(
    "credential_object",
    metadata,
    Column("namespace", String(253), primary_key=True),
    Column("name", String(253), primary_key=True),
    Column("data", PayloadType, nullable=False),
    Column("labels", StringMapType, nullable=False),
    Column("annotations", StringMapType, nullable=False),
    Column("resource_version", Integer, nullable=False, default=1),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the credential store."""

    log.info("Creating all tables")
    metadata.create_all(engine)
