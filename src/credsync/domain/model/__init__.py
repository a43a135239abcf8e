"""Domain model for credential propagation."""

from __future__ import annotations

from .credentials import CanonicalPayload, CredentialObject, ObjectRef, Payload
from .enums import EventKind, ProviderType

__all__ = [
    "CanonicalPayload",
    "CredentialObject",
    "EventKind",
    "ObjectRef",
    "Payload",
    "ProviderType",
]
