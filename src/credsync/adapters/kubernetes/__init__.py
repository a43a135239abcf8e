"""Public interface for the Kubernetes adapter."""

from __future__ import annotations

from .client import KubernetesCredentialStore, format_label_selector
from .schema import SecretListPayload, SecretPayload
from .translator import to_credential_object

__all__ = [
    "KubernetesCredentialStore",
    "SecretListPayload",
    "SecretPayload",
    "format_label_selector",
    "to_credential_object",
]
