"""SQLAlchemy adapter package for credsync."""

from __future__ import annotations

from .mappings import create_all_tables, credential_object_table, metadata
from .store import SqlAlchemyCredentialStore

__all__ = [
    "SqlAlchemyCredentialStore",
    "create_all_tables",
    "credential_object_table",
    "metadata",
]
