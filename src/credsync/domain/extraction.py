"""Canonical extraction of provider credential payloads.

Each provider type maps to a pure rule that reduces a raw payload to the fields that
matter for that provider. Rules never mutate their input. New providers are added by
registering a rule; nothing else needs to change.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Collection, Mapping
from dataclasses import dataclass
from typing import Final

from credsync.domain.errors import (
    ExtractionError,
    MissingCredentialDataError,
    UnsupportedProviderTypeError,
)
from credsync.domain.model import CanonicalPayload, ProviderType
from credsync.domain.schema import FINGERPRINT_ANNOTATION

type ExtractionRule = Callable[[Mapping[str, bytes]], CanonicalPayload]

SERVICE_PRINCIPAL_KEY: Final[str] = "osServicePrincipal.json"
SERVICE_PRINCIPAL_FIELDS: Final[tuple[str, ...]] = (
    "clientId",
    "clientSecret",
    "tenantId",
    "subscriptionId",
)
OVIRT_CONFIG_KEY: Final[str] = "ovirt-config.yaml"
OVIRT_FIELDS: Final[tuple[str, ...]] = (
    "ovirt_url",
    "ovirt_username",
    "ovirt_password",
    "ovirt_ca_bundle",
)

_OVIRT_CONFIG_TEMPLATE: Final[str] = (
    "ovirt_url: {url}\n"
    "ovirt_username: {username}\n"
    "ovirt_password: {password}\n"
    "ovirt_ca_bundle: |+\n"
    "  {ca_bundle}"
)


def _sorted_payload(items: Mapping[str, bytes]) -> CanonicalPayload:
    return {key: items[key] for key in sorted(items)}


def _require(
    provider: ProviderType, payload: Mapping[str, bytes], keys: Collection[str]
) -> None:
    missing = [key for key in keys if key not in payload]
    if missing:
        raise MissingCredentialDataError(provider.value, missing)


def render_scalar(value: object) -> str:
    """Render a credential field value as text."""

    if isinstance(value, bytes):
        return value.decode("utf-8")
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def service_principal_json(fields: Mapping[str, object]) -> bytes:
    """Assemble the four discrete Azure service principal fields into one JSON blob."""

    document = {name: render_scalar(fields.get(name)) for name in SERVICE_PRINCIPAL_FIELDS}
    return json.dumps(document).encode("utf-8")


def indent_block(value: str, width: int) -> str:
    """Indent every continuation line of ``value`` by ``width`` spaces."""

    return value.replace("\n", "\n" + " " * width)


@dataclass(frozen=True, slots=True)
class FieldSelection:
    """Declarative rule keeping exactly ``keys`` from the raw payload."""

    provider: ProviderType
    keys: tuple[str, ...]

    def __call__(self, payload: Mapping[str, bytes]) -> CanonicalPayload:
        _require(self.provider, payload, self.keys)
        return _sorted_payload({key: payload[key] for key in self.keys})


def _extract_ansible(payload: Mapping[str, bytes]) -> CanonicalPayload:
    return _sorted_payload(payload)


def _extract_azure(payload: Mapping[str, bytes]) -> CanonicalPayload:
    if SERVICE_PRINCIPAL_KEY in payload:
        return {SERVICE_PRINCIPAL_KEY: payload[SERVICE_PRINCIPAL_KEY]}
    if all(name in payload for name in SERVICE_PRINCIPAL_FIELDS):
        return {SERVICE_PRINCIPAL_KEY: service_principal_json(payload)}
    raise MissingCredentialDataError(ProviderType.AZURE.value, [SERVICE_PRINCIPAL_KEY])


def _extract_ovirt(payload: Mapping[str, bytes]) -> CanonicalPayload:
    _require(ProviderType.OVIRT, payload, OVIRT_FIELDS)
    try:
        document = _OVIRT_CONFIG_TEMPLATE.format(
            url=render_scalar(payload["ovirt_url"]),
            username=render_scalar(payload["ovirt_username"]),
            password=render_scalar(payload["ovirt_password"]),
            ca_bundle=indent_block(render_scalar(payload["ovirt_ca_bundle"]), 2),
        )
    except UnicodeDecodeError as exc:
        raise ExtractionError("oVirt credential fields must be UTF-8 text") from exc
    return {OVIRT_CONFIG_KEY: document.encode("utf-8")}


class ExtractorRegistry:
    """Lookup table from provider type to extraction rule."""

    def __init__(self, rules: Mapping[ProviderType, ExtractionRule] | None = None) -> None:
        self._rules: dict[ProviderType, ExtractionRule] = dict(rules or {})

    def register(self, provider: ProviderType, rule: ExtractionRule) -> None:
        self._rules[provider] = rule

    def supports(self, provider_type: str | None) -> bool:
        provider = ProviderType.parse(provider_type)
        return provider is not None and provider in self._rules

    @property
    def providers(self) -> frozenset[ProviderType]:
        return frozenset(self._rules)

    def extract(
        self,
        provider_type: str | None,
        payload: Mapping[str, bytes],
        *,
        ignored_keys: Collection[str] = (FINGERPRINT_ANNOTATION,),
    ) -> CanonicalPayload:
        """Return the canonical payload of ``payload`` for ``provider_type``.

        ``ignored_keys`` are bookkeeping entries that never count as credential data.
        """

        provider = ProviderType.parse(provider_type)
        rule = self._rules.get(provider) if provider is not None else None
        if rule is None:
            raise UnsupportedProviderTypeError(provider_type)
        visible = {key: value for key, value in payload.items() if key not in ignored_keys}
        return rule(visible)


default_registry = ExtractorRegistry(
    {
        ProviderType.ANSIBLE: _extract_ansible,
        ProviderType.AWS: FieldSelection(
            ProviderType.AWS, ("aws_access_key_id", "aws_secret_access_key")
        ),
        ProviderType.AZURE: _extract_azure,
        ProviderType.GCP: FieldSelection(ProviderType.GCP, ("osServiceAccount.json",)),
        ProviderType.VMWARE: FieldSelection(ProviderType.VMWARE, ("username", "password")),
        ProviderType.OPENSTACK: FieldSelection(ProviderType.OPENSTACK, ("cloud", "clouds.yaml")),
        ProviderType.OVIRT: _extract_ovirt,
    }
)


def extract_canonical_payload(
    provider_type: str | None,
    payload: Mapping[str, bytes],
    *,
    ignored_keys: Collection[str] = (FINGERPRINT_ANNOTATION,),
) -> CanonicalPayload:
    """Extract with the default registry."""

    return default_registry.extract(provider_type, payload, ignored_keys=ignored_keys)
