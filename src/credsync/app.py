"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from credsync.adapters.kubernetes import KubernetesCredentialStore
from credsync.adapters.sqlalchemy import SqlAlchemyCredentialStore
from credsync.config import StoreBackend, get_schema_keys, get_store_backend
from credsync.domain.admission import ChangeEvent, admit
from credsync.domain.errors import CredentialSyncError
from credsync.domain.legacy import migrate_legacy_object
from credsync.domain.model import EventKind
from credsync.domain.propagation import PropagationEngine, ReconcileResult

if TYPE_CHECKING:
    from credsync.domain.model import ObjectRef
    from credsync.domain.ports import CredentialStore
    from credsync.domain.schema import SchemaKeys


log = getLogger(__name__)


@dataclass(slots=True)
class ResyncSummary:
    """Outcome of reconciling every credential object in scope."""

    admitted: int = 0
    rejected: int = 0
    results: list[ReconcileResult] = field(default_factory=list)
    errors: dict[ObjectRef, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors and not any(result.failed for result in self.results)


@dataclass(slots=True)
class MigrationSummary:
    migrated: list[ObjectRef] = field(default_factory=list)
    errors: dict[ObjectRef, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def build_store() -> CredentialStore:
    """Return the object store selected by ``CREDSYNC_STORE``."""

    backend = get_store_backend()
    log.debug("Using %s credential store", backend)
    if backend is StoreBackend.DATABASE:
        return SqlAlchemyCredentialStore()
    return KubernetesCredentialStore()


def handle_change_event(
    event: ChangeEvent, *, engine: PropagationEngine
) -> ReconcileResult | None:
    """Reconcile the object behind ``event`` if the admission filter lets it through."""

    if not admit(event, keys=engine.keys, extractors=engine.extractors):
        return None
    return engine.reconcile(event.obj.ref)


def reconcile_credential(
    ref: ObjectRef,
    *,
    store: CredentialStore | None = None,
    keys: SchemaKeys | None = None,
) -> ReconcileResult:
    """Reconcile a single upstream credential object."""

    engine = PropagationEngine(store=store or build_store(), keys=keys or get_schema_keys())
    result = engine.reconcile(ref)
    log.info(
        "Reconciled %s: outcome=%s, updated=%d, skipped=%d, failed=%d",
        ref,
        result.outcome,
        len(result.updated),
        len(result.skipped),
        len(result.failed),
    )
    return result


def resync_credentials(
    *,
    store: CredentialStore | None = None,
    keys: SchemaKeys | None = None,
    namespace: str | None = None,
) -> ResyncSummary:
    """Reconcile every object carrying the credential marker label, one at a time."""

    effective_keys = keys or get_schema_keys()
    engine = PropagationEngine(store=store or build_store(), keys=effective_keys)
    summary = ResyncSummary()

    candidates = engine.store.list_objects(
        {effective_keys.credential_marker: ""}, namespace=namespace
    )
    log.info("Resyncing %d credential objects", len(candidates))
    for obj in sorted(candidates, key=lambda candidate: candidate.ref):
        try:
            result = handle_change_event(ChangeEvent(EventKind.UPDATE, obj), engine=engine)
        except CredentialSyncError as exc:
            log.exception("Failed to reconcile %s", obj.ref)
            summary.errors[obj.ref] = str(exc)
            continue
        if result is None:
            summary.rejected += 1
            continue
        summary.admitted += 1
        summary.results.append(result)

    log.info(
        "Finished resync: admitted=%d, rejected=%d, errors=%d",
        summary.admitted,
        summary.rejected,
        len(summary.errors),
    )
    return summary


def migrate_legacy_credentials(
    *,
    store: CredentialStore | None = None,
    keys: SchemaKeys | None = None,
) -> MigrationSummary:
    """Convert every legacy provider-connection object to the current format."""

    effective_keys = keys or get_schema_keys()
    effective_store = store or build_store()
    summary = MigrationSummary()

    candidates = effective_store.list_objects({effective_keys.legacy_connection: ""})
    if not candidates:
        log.info("Did not find objects labelled %s", effective_keys.legacy_connection)
    for obj in candidates:
        try:
            effective_store.update(migrate_legacy_object(obj, keys=effective_keys))
        except CredentialSyncError as exc:
            log.exception("Failed to migrate legacy credential %s", obj.ref)
            summary.errors[obj.ref] = str(exc)
            continue
        log.info("Migrated legacy credential %s", obj.ref)
        summary.migrated.append(obj.ref)

    return summary
