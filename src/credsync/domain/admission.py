"""Gate deciding which change notifications reach the propagation engine."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from credsync.domain.extraction import ExtractorRegistry, default_registry
from credsync.domain.model import EventKind
from credsync.domain.schema import DEFAULT_SCHEMA_KEYS, SchemaKeys

if TYPE_CHECKING:
    from credsync.domain.model import CredentialObject

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    kind: EventKind
    obj: CredentialObject


def admit(
    event: ChangeEvent,
    *,
    keys: SchemaKeys = DEFAULT_SCHEMA_KEYS,
    extractors: ExtractorRegistry = default_registry,
) -> bool:
    """Accept creates and updates of objects tagged with a recognised provider type.

    Deletes never trigger propagation. Objects without a recognised tag are rejected
    silently; most objects in the store have nothing to do with credentials.
    """

    if event.kind is EventKind.DELETE:
        return False
    provider_type = event.obj.labels.get(keys.provider_type)
    if not extractors.supports(provider_type):
        return False
    log.debug("Admitted %s event for %s (%s)", event.kind, event.obj.ref, provider_type)
    return True
