"""Domain core: canonical extraction, fingerprinting and propagation."""

from __future__ import annotations

from .admission import ChangeEvent, admit
from .extraction import ExtractorRegistry, default_registry, extract_canonical_payload
from .fingerprint import Fingerprint, fingerprint, matches
from .propagation import (
    ChildResult,
    ChildStatus,
    PropagationEngine,
    ReconcileOutcome,
    ReconcileResult,
)
from .schema import DEFAULT_SCHEMA_KEYS, SchemaKeys

__all__ = [
    "DEFAULT_SCHEMA_KEYS",
    "ChangeEvent",
    "ChildResult",
    "ChildStatus",
    "ExtractorRegistry",
    "Fingerprint",
    "PropagationEngine",
    "ReconcileOutcome",
    "ReconcileResult",
    "SchemaKeys",
    "admit",
    "default_registry",
    "extract_canonical_payload",
    "fingerprint",
    "matches",
]
