"""Credential store backed by core/v1 Secrets on a Kubernetes API server."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, Literal, Self

import httpx
from pydantic import ValidationError

from credsync.config.kubernetes import KubernetesConfig, get_kubernetes_config
from credsync.domain.errors import (
    ConflictError,
    ObjectNotFoundError,
    StoreError,
    StoreWriteError,
)
from credsync.domain.model import CredentialObject, ObjectRef

from .schema import SecretListPayload, SecretPayload, StatusPayload
from .translator import annotation_merge_patch, apply_to_secret, to_credential_object

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from types import TracebackType

log = getLogger(__name__)

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"
DEFAULT_PAGE_SIZE = 500


def format_label_selector(selector: Mapping[str, str]) -> str:
    """Render an exact-match selector in the API server's ``labelSelector`` syntax."""

    return ",".join(f"{key}={value}" for key, value in sorted(selector.items()))


def _status_message(response: httpx.Response) -> str:
    try:
        status = StatusPayload.model_validate(response.json())
    except (ValueError, ValidationError):
        return response.text or response.reason_phrase
    return status.message or status.reason or response.reason_phrase


def _secret_path(ref: ObjectRef) -> str:
    return f"/api/v1/namespaces/{ref.namespace}/secrets/{ref.name}"


def _build_client(config: KubernetesConfig) -> httpx.Client:
    headers = {"Accept": "application/json"}
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return httpx.Client(
        base_url=config.api_url,
        headers=headers,
        verify=config.verify,
        timeout=config.timeout_seconds,
    )


class KubernetesCredentialStore:
    """``CredentialStore`` over the Secret REST API.

    Updates are read-modify-write on the raw Secret so that fields the domain does
    not model survive, and carry the caller's resource version so the API server
    rejects stale writes with 409.
    """

    def __init__(
        self,
        config: KubernetesConfig | None = None,
        *,
        client: httpx.Client | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if client is None:
            client = _build_client(config or get_kubernetes_config())
        self._client = client
        self._page_size = page_size

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False

    def close(self) -> None:
        self._client.close()

    def get(self, ref: ObjectRef) -> CredentialObject:
        return to_credential_object(self._parse_secret(self._get_raw(ref), ref))

    def list_objects(
        self,
        selector: Mapping[str, str],
        *,
        namespace: str | None = None,
    ) -> list[CredentialObject]:
        path = f"/api/v1/namespaces/{namespace}/secrets" if namespace else "/api/v1/secrets"
        return [to_credential_object(item) for item in self._iter_pages(path, selector)]

    def update(self, obj: CredentialObject) -> CredentialObject:
        ref = obj.ref
        try:
            raw = self._get_raw(ref)
        except StoreError as exc:
            raise StoreWriteError(ref, str(exc)) from exc
        current = raw.get("metadata", {}).get("resourceVersion")
        if obj.resource_version is not None and current != obj.resource_version:
            raise ConflictError(ref)

        response = self._send("PUT", _secret_path(ref), ref=ref, json=apply_to_secret(raw, obj))
        log.debug("Replaced secret %s", ref)
        try:
            stored = to_credential_object(self._parse_secret(response.json(), ref))
        except (StoreError, ValueError) as exc:
            message = f"Replaced secret {ref} but could not read the response"
            raise StoreWriteError(ref, message) from exc
        return stored

    def patch_annotations(self, ref: ObjectRef, annotations: Mapping[str, str]) -> None:
        self._send(
            "PATCH",
            _secret_path(ref),
            ref=ref,
            json=annotation_merge_patch(annotations),
            headers={"Content-Type": MERGE_PATCH_CONTENT_TYPE},
        )
        log.debug("Patched annotations %s on secret %s", sorted(annotations), ref)

    def _get_raw(self, ref: ObjectRef) -> dict[str, Any]:
        try:
            response = self._client.get(_secret_path(ref))
        except httpx.TransportError as exc:
            raise StoreError(f"Failed to read secret {ref}: {exc}") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ObjectNotFoundError(ref)
        if response.is_error:
            raise StoreError(f"Failed to read secret {ref}: {_status_message(response)}")
        try:
            return response.json()
        except ValueError as exc:
            raise StoreError(f"API server returned a non-JSON body for secret {ref}") from exc

    def _iter_pages(self, path: str, selector: Mapping[str, str]) -> Iterator[SecretPayload]:
        params: dict[str, str | int] = {"limit": self._page_size}
        if selector:
            params["labelSelector"] = format_label_selector(selector)
        while True:
            try:
                response = self._client.get(path, params=params)
            except httpx.TransportError as exc:
                raise StoreError(f"Failed to list secrets: {exc}") from exc
            if response.is_error:
                raise StoreError(f"Failed to list secrets: {_status_message(response)}")
            try:
                page = SecretListPayload.model_validate(response.json())
            except ValidationError as exc:
                raise StoreError("API server returned a malformed secret list") from exc
            yield from page.items
            if not page.metadata.continue_token:
                return
            params["continue"] = page.metadata.continue_token

    def _send(
        self,
        method: str,
        path: str,
        *,
        ref: ObjectRef,
        json: object,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as exc:
            raise StoreWriteError(ref, f"Failed to write secret {ref}: {exc}") from exc
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ObjectNotFoundError(ref)
        if response.status_code == httpx.codes.CONFLICT:
            raise ConflictError(ref)
        if response.is_error:
            raise StoreWriteError(
                ref, f"Failed to write secret {ref}: {_status_message(response)}"
            )
        return response

    @staticmethod
    def _parse_secret(payload: object, ref: ObjectRef) -> SecretPayload:
        try:
            return SecretPayload.model_validate(payload)
        except ValidationError as exc:
            raise StoreError(f"API server returned a malformed secret for {ref}") from exc
