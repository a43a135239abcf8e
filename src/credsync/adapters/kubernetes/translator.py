"""Translate Secret payloads to and from credential objects."""

from __future__ import annotations

import base64
import binascii
import copy
from typing import TYPE_CHECKING, Any

from credsync.domain.errors import StoreError
from credsync.domain.model import CredentialObject

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .schema import SecretPayload


def decode_data(data: Mapping[str, str], *, owner: str) -> dict[str, bytes]:
    decoded: dict[str, bytes] = {}
    for key, value in data.items():
        try:
            decoded[key] = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise StoreError(f"Secret {owner} holds non-base64 data under {key!r}") from exc
    return decoded


def encode_data(data: Mapping[str, bytes]) -> dict[str, str]:
    return {key: base64.b64encode(value).decode("ascii") for key, value in data.items()}


def to_credential_object(payload: SecretPayload) -> CredentialObject:
    meta = payload.metadata
    return CredentialObject(
        namespace=meta.namespace,
        name=meta.name,
        data=decode_data(payload.data, owner=f"{meta.namespace}/{meta.name}"),
        labels=dict(meta.labels),
        annotations=dict(meta.annotations),
        resource_version=meta.resource_version,
    )


def apply_to_secret(raw: Mapping[str, Any], obj: CredentialObject) -> dict[str, Any]:
    """Return a copy of the raw Secret ``raw`` carrying ``obj``'s data and metadata.

    Fields the domain does not model (type, owner references, finalizers, ...) are
    kept as the server returned them.
    """

    body = copy.deepcopy(dict(raw))
    metadata = body.setdefault("metadata", {})
    metadata["labels"] = dict(obj.labels)
    metadata["annotations"] = dict(obj.annotations)
    if obj.resource_version is not None:
        metadata["resourceVersion"] = obj.resource_version
    body["data"] = encode_data(obj.data)
    body.pop("stringData", None)
    return body


def annotation_merge_patch(annotations: Mapping[str, str]) -> dict[str, Any]:
    return {"metadata": {"annotations": dict(annotations)}}
