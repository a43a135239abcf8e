from __future__ import annotations

import json

import pytest

from credsync.domain.errors import (
    ExtractionError,
    MissingCredentialDataError,
    UnsupportedProviderTypeError,
)
from credsync.domain.extraction import (
    OVIRT_CONFIG_KEY,
    SERVICE_PRINCIPAL_KEY,
    ExtractorRegistry,
    FieldSelection,
    default_registry,
    extract_canonical_payload,
)
from credsync.domain.model import ProviderType


def test_aws_keeps_only_access_keys() -> None:
    payload = {
        "aws_access_key_id": b"A1",
        "aws_secret_access_key": b"S1",
        "baseDomain": b"example.com",
        "pullSecret": b"{}",
    }

    result = extract_canonical_payload("aws", payload)

    assert result == {"aws_access_key_id": b"A1", "aws_secret_access_key": b"S1"}
    assert "baseDomain" in payload


def test_canonical_keys_are_sorted() -> None:
    result = extract_canonical_payload("ans", {"token": b"t", "host": b"h", "extra": b"e"})

    assert list(result) == ["extra", "host", "token"]


def test_ansible_ignores_fingerprint_entry() -> None:
    result = extract_canonical_payload("ans", {"host": b"h", "credential-hash": b"abc"})

    assert result == {"host": b"h"}


@pytest.mark.parametrize(
    ("provider_type", "payload", "expected"),
    [
        (
            "gcp",
            {"osServiceAccount.json": b"{}", "projectID": b"p"},
            {"osServiceAccount.json": b"{}"},
        ),
        (
            "vmw",
            {"username": b"u", "password": b"p", "vCenter": b"vc"},
            {"password": b"p", "username": b"u"},
        ),
        (
            "ost",
            {"cloud": b"c", "clouds.yaml": b"y", "baseDomain": b"d"},
            {"cloud": b"c", "clouds.yaml": b"y"},
        ),
    ],
)
def test_field_selection_providers(
    provider_type: str, payload: dict[str, bytes], expected: dict[str, bytes]
) -> None:
    assert extract_canonical_payload(provider_type, payload) == expected


def test_missing_field_lists_every_missing_key() -> None:
    with pytest.raises(MissingCredentialDataError) as excinfo:
        extract_canonical_payload("vmw", {"vCenter": b"vc"})

    assert excinfo.value.missing_keys == ("password", "username")
    assert excinfo.value.provider_type == "vmw"


def test_azure_prefers_existing_service_principal_blob() -> None:
    payload = {SERVICE_PRINCIPAL_KEY: b'{"clientId":"x"}', "clientId": b"y"}

    result = extract_canonical_payload("azr", payload)

    assert result == {SERVICE_PRINCIPAL_KEY: b'{"clientId":"x"}'}


def test_azure_assembles_blob_from_discrete_fields() -> None:
    payload = {
        "clientId": b"cid",
        "clientSecret": b"secret",
        "tenantId": b"tid",
        "subscriptionId": b"sid",
    }

    result = extract_canonical_payload("azure", payload)

    assert json.loads(result[SERVICE_PRINCIPAL_KEY]) == {
        "clientId": "cid",
        "clientSecret": "secret",
        "tenantId": "tid",
        "subscriptionId": "sid",
    }


def test_azure_without_any_credential_is_missing_data() -> None:
    with pytest.raises(MissingCredentialDataError):
        extract_canonical_payload("azr", {"clientId": b"cid"})


def test_ovirt_renders_config_document() -> None:
    payload = {
        "ovirt_url": b"https://engine",
        "ovirt_username": b"admin",
        "ovirt_password": b"pw",
        "ovirt_ca_bundle": b"line1\nline2",
    }

    result = extract_canonical_payload("redhatvirtualization", payload)

    assert result == {
        OVIRT_CONFIG_KEY: (
            b"ovirt_url: https://engine\n"
            b"ovirt_username: admin\n"
            b"ovirt_password: pw\n"
            b"ovirt_ca_bundle: |+\n"
            b"  line1\n"
            b"  line2"
        )
    }


def test_ovirt_rejects_non_utf8_fields() -> None:
    payload = {
        "ovirt_url": b"\xff",
        "ovirt_username": b"admin",
        "ovirt_password": b"pw",
        "ovirt_ca_bundle": b"ca",
    }

    with pytest.raises(ExtractionError):
        extract_canonical_payload("redhatvirtualization", payload)


@pytest.mark.parametrize("provider_type", [None, "", "nutanix"])
def test_unknown_provider_is_unsupported(provider_type: str | None) -> None:
    with pytest.raises(UnsupportedProviderTypeError):
        extract_canonical_payload(provider_type, {"key": b"value"})


_FULL_PAYLOADS: dict[str, dict[str, bytes]] = {
    "ans": {"host": b"h", "token": b"t"},
    "aws": {"aws_access_key_id": b"A", "aws_secret_access_key": b"S"},
    "azr": {"clientId": b"c", "clientSecret": b"s", "tenantId": b"t", "subscriptionId": b"i"},
    "gcp": {"osServiceAccount.json": b"{}"},
    "vmw": {"username": b"u", "password": b"p"},
    "ost": {"cloud": b"c", "clouds.yaml": b"y"},
    "redhatvirtualization": {
        "ovirt_url": b"https://engine",
        "ovirt_username": b"admin",
        "ovirt_password": b"pw",
        "ovirt_ca_bundle": b"ca",
    },
}


@pytest.mark.parametrize("provider_type", sorted(_FULL_PAYLOADS))
def test_extraction_leaves_input_untouched(provider_type: str) -> None:
    payload = {**_FULL_PAYLOADS[provider_type], "credential-hash": b"stored", "extra": b"x"}
    snapshot = dict(payload)

    result = extract_canonical_payload(provider_type, payload)

    assert payload == snapshot
    assert result is not payload
    assert "credential-hash" not in result


def test_extraction_covers_every_provider() -> None:
    assert {ProviderType.parse(name) for name in _FULL_PAYLOADS} == set(ProviderType)


def test_extraction_is_deterministic() -> None:
    payload = {"aws_access_key_id": b"A1", "aws_secret_access_key": b"S1"}

    assert extract_canonical_payload("aws", payload) == extract_canonical_payload("aws", payload)


def test_registry_accepts_new_provider_rules() -> None:
    registry = ExtractorRegistry()
    assert not registry.supports("aws")

    registry.register(ProviderType.AWS, FieldSelection(ProviderType.AWS, ("token",)))

    assert registry.supports("aws")
    assert registry.providers == frozenset({ProviderType.AWS})
    assert registry.extract("aws", {"token": b"t", "other": b"o"}) == {"token": b"t"}


def test_default_registry_covers_every_provider() -> None:
    assert default_registry.providers == frozenset(ProviderType)


def test_provider_type_parses_long_names() -> None:
    assert ProviderType.parse("VMware") is ProviderType.VMWARE
    assert ProviderType.parse(" aws ") is ProviderType.AWS
    assert ProviderType.parse("unknown") is None
