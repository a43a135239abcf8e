"""Credential store backed by a relational database."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import and_, create_engine, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from credsync.config.storage import get_database_config
from credsync.domain.errors import (
    ConflictError,
    ObjectNotFoundError,
    StoreError,
    StoreWriteError,
)
from credsync.domain.model import CredentialObject, ObjectRef

from .mappings import create_all_tables, credential_object_table

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import ColumnElement, Row
    from sqlalchemy.engine import Engine

log = getLogger(__name__)

_table = credential_object_table


def _to_object(row: Row[tuple[object, ...]]) -> CredentialObject:
    mapping = row._mapping  # noqa: SLF001
    return CredentialObject(
        namespace=mapping["namespace"],
        name=mapping["name"],
        data=dict(mapping["data"]),
        labels=dict(mapping["labels"]),
        annotations=dict(mapping["annotations"]),
        resource_version=str(mapping["resource_version"]),
    )


def _by_ref(ref: ObjectRef) -> ColumnElement[bool]:
    return and_(_table.c.namespace == ref.namespace, _table.c.name == ref.name)


class SqlAlchemyCredentialStore:
    """``CredentialStore`` keeping one row per credential object.

    Each write bumps an integer resource version; updates only apply when the
    caller's version is still current.
    """

    def __init__(self, engine: Engine | None = None, *, create_tables: bool = True) -> None:
        self.engine = engine or create_engine(get_database_config().uri, future=True)
        if create_tables:
            create_all_tables(self.engine)
        self.session_factory: sessionmaker[Session] = sessionmaker(bind=self.engine)

    def create(self, obj: CredentialObject) -> CredentialObject:
        """Insert a new object; used for seeding and by the owning system."""

        try:
            with self.session_factory.begin() as session:
                session.execute(
                    insert(_table).values(
                        namespace=obj.namespace,
                        name=obj.name,
                        data=obj.data,
                        labels=obj.labels,
                        annotations=obj.annotations,
                        resource_version=1,
                    )
                )
        except IntegrityError as exc:
            raise StoreWriteError(obj.ref, f"Credential object {obj.ref} already exists") from exc
        except SQLAlchemyError as exc:
            raise StoreWriteError(obj.ref) from exc
        return self.get(obj.ref)

    def get(self, ref: ObjectRef) -> CredentialObject:
        try:
            with self.session_factory() as session:
                row = session.execute(select(_table).where(_by_ref(ref))).one_or_none()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to read credential object {ref}") from exc
        if row is None:
            raise ObjectNotFoundError(ref)
        return _to_object(row)

    def list_objects(
        self,
        selector: Mapping[str, str],
        *,
        namespace: str | None = None,
    ) -> list[CredentialObject]:
        stmt = select(_table).order_by(_table.c.namespace, _table.c.name)
        if namespace is not None:
            stmt = stmt.where(_table.c.namespace == namespace)
        try:
            with self.session_factory() as session:
                rows = session.execute(stmt).all()
        except SQLAlchemyError as exc:
            raise StoreError("Failed to list credential objects") from exc
        objects = [_to_object(row) for row in rows]
        return [
            obj
            for obj in objects
            if all(obj.labels.get(key) == value for key, value in selector.items())
        ]

    def update(self, obj: CredentialObject) -> CredentialObject:
        ref = obj.ref
        stmt = update(_table).where(_by_ref(ref))
        if obj.resource_version is not None:
            if not obj.resource_version.isdigit():
                raise ConflictError(ref)
            stmt = stmt.where(_table.c.resource_version == int(obj.resource_version))
        stmt = stmt.values(
            data=obj.data,
            labels=obj.labels,
            annotations=obj.annotations,
            resource_version=_table.c.resource_version + 1,
        )
        try:
            with self.session_factory.begin() as session:
                matched = session.execute(stmt).rowcount
        except SQLAlchemyError as exc:
            raise StoreWriteError(ref) from exc
        if not matched:
            self.get(ref)  # raises ObjectNotFoundError when the row is gone
            raise ConflictError(ref)
        log.debug("Updated credential object %s", ref)
        return self.get(ref)

    def patch_annotations(self, ref: ObjectRef, annotations: Mapping[str, str]) -> None:
        try:
            with self.session_factory.begin() as session:
                current = session.execute(
                    select(_table.c.annotations).where(_by_ref(ref)).with_for_update()
                ).scalar_one_or_none()
                if current is None:
                    raise ObjectNotFoundError(ref)
                session.execute(
                    update(_table)
                    .where(_by_ref(ref))
                    .values(
                        annotations={**current, **annotations},
                        resource_version=_table.c.resource_version + 1,
                    )
                )
        except SQLAlchemyError as exc:
            raise StoreWriteError(ref) from exc
        log.debug("Patched annotations %s on %s", sorted(annotations), ref)
