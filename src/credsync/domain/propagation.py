"""Propagation engine: fan out upstream credential changes to trusted copies.

One reconcile runs the following state machine for a single upstream object::

    Start -> Loaded -> {Unchanged, FirstSeen, Changed} -> Done

``Changed`` visits every linked copy. A copy is overwritten only when its current
payload still hashes to the upstream's previous fingerprint, i.e. it is an untouched
copy of the last known-good state. Copies that fail that check are left alone.

The new fingerprint is written to the upstream object after the fan-out. If the
process dies half way, the stored fingerprint is still the old one and the next
reconcile takes the ``Changed`` branch again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from credsync.domain.errors import (
    ObjectNotFoundError,
    StoreError,
    UpstreamPersistError,
)
from credsync.domain.extraction import ExtractorRegistry, default_registry
from credsync.domain.fingerprint import Fingerprint, fingerprint, matches, read_fingerprint
from credsync.domain.schema import DEFAULT_SCHEMA_KEYS, SchemaKeys

if TYPE_CHECKING:
    from credsync.domain.model import CanonicalPayload, CredentialObject, ObjectRef
    from credsync.domain.ports import CredentialStore

log = getLogger(__name__)


class ReconcileOutcome(StrEnum):
    NOT_FOUND = "not_found"
    UNCHANGED = "unchanged"
    FIRST_SEEN = "first_seen"
    CHANGED = "changed"


class ChildStatus(StrEnum):
    UPDATED = "updated"
    SKIPPED = "skipped"  # does not hash to the previous fingerprint
    CURRENT = "current"  # already carries the new payload
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ChildResult:
    ref: ObjectRef
    status: ChildStatus
    error: str | None = None


@dataclass(slots=True)
class ReconcileResult:
    """Outcome of one reconcile of an upstream credential object."""

    ref: ObjectRef
    outcome: ReconcileOutcome
    fingerprint: Fingerprint | None = None
    previous: Fingerprint | None = None
    children: list[ChildResult] = field(default_factory=list)

    def _with_status(self, status: ChildStatus) -> tuple[ObjectRef, ...]:
        return tuple(child.ref for child in self.children if child.status is status)

    @property
    def updated(self) -> tuple[ObjectRef, ...]:
        return self._with_status(ChildStatus.UPDATED)

    @property
    def skipped(self) -> tuple[ObjectRef, ...]:
        return self._with_status(ChildStatus.SKIPPED)

    @property
    def failed(self) -> tuple[ObjectRef, ...]:
        return self._with_status(ChildStatus.FAILED)

    @property
    def fingerprint_written(self) -> bool:
        return self.outcome in (ReconcileOutcome.FIRST_SEEN, ReconcileOutcome.CHANGED)


@dataclass(slots=True)
class PropagationEngine:
    """Reconcile upstream credential objects against their linked copies."""

    store: CredentialStore
    keys: SchemaKeys = DEFAULT_SCHEMA_KEYS
    extractors: ExtractorRegistry = default_registry

    def reconcile(self, ref: ObjectRef) -> ReconcileResult:
        """Run one reconcile for the upstream object at ``ref``.

        Extraction, fingerprint decoding, listing and upstream persistence failures
        propagate to the caller, who is expected to requeue. Per-copy write failures
        are logged and recorded in the result.
        """

        log.debug("Reconciling credential %s", ref)
        try:
            upstream = self.store.get(ref)
        except ObjectNotFoundError:
            log.info("Credential %s no longer exists, nothing to do", ref)
            return ReconcileResult(ref=ref, outcome=ReconcileOutcome.NOT_FOUND)

        previous = read_fingerprint(upstream.annotations, self.keys.fingerprint, ref=ref)
        canonical = self.extractors.extract(
            upstream.labels.get(self.keys.provider_type),
            upstream.data,
            ignored_keys=(self.keys.fingerprint,),
        )
        current = fingerprint(canonical)
        log.debug("Fingerprints for %s: stored=%s current=%s", ref, previous, current)

        if previous is None:
            log.info("Storing initial fingerprint for %s", ref)
            result = ReconcileResult(
                ref=ref, outcome=ReconcileOutcome.FIRST_SEEN, fingerprint=current
            )
        elif previous == current:
            log.info("Credential %s has not changed", ref)
            return ReconcileResult(
                ref=ref,
                outcome=ReconcileOutcome.UNCHANGED,
                fingerprint=current,
                previous=previous,
            )
        else:
            log.info("Credential %s has changed, propagating to linked copies", ref)
            result = ReconcileResult(
                ref=ref,
                outcome=ReconcileOutcome.CHANGED,
                fingerprint=current,
                previous=previous,
                children=self._propagate(upstream, canonical, previous, current),
            )

        self._persist_fingerprint(ref, current)
        return result

    def _propagate(
        self,
        upstream: CredentialObject,
        canonical: CanonicalPayload,
        previous: Fingerprint,
        current: Fingerprint,
    ) -> list[ChildResult]:
        selector = self.keys.link_selector(upstream.namespace, upstream.name)
        children = [
            child for child in self.store.list_objects(selector) if child.ref != upstream.ref
        ]
        log.info("Found %d linked copies of %s", len(children), upstream.ref)
        return [
            self._propagate_to(child, canonical, previous, current)
            for child in sorted(children, key=lambda child: child.ref)
        ]

    def _propagate_to(
        self,
        child: CredentialObject,
        canonical: CanonicalPayload,
        previous: Fingerprint,
        current: Fingerprint,
    ) -> ChildResult:
        if not matches(previous, child.data):
            if matches(current, child.data):
                log.info("Copy %s already carries the new credential", child.ref)
                return ChildResult(ref=child.ref, status=ChildStatus.CURRENT)
            log.warning(
                "Did not update copy %s: its content does not match the last trusted "
                "fingerprint %s (got %s)",
                child.ref,
                previous,
                fingerprint(child.data),
            )
            return ChildResult(ref=child.ref, status=ChildStatus.SKIPPED)

        try:
            self.store.update(child.with_data(canonical))
        except (StoreError, ObjectNotFoundError) as exc:
            log.exception("Failed to update copy %s", child.ref)
            return ChildResult(ref=child.ref, status=ChildStatus.FAILED, error=str(exc))
        log.info("Updated copy %s", child.ref)
        return ChildResult(ref=child.ref, status=ChildStatus.UPDATED)

    def _persist_fingerprint(self, ref: ObjectRef, current: Fingerprint) -> None:
        try:
            self.store.patch_annotations(ref, {self.keys.fingerprint: current.encode()})
        except (StoreError, ObjectNotFoundError) as exc:
            log.exception("Failed to persist fingerprint on %s", ref)
            raise UpstreamPersistError(ref) from exc
        log.info("Stored fingerprint %s on %s", current, ref)
