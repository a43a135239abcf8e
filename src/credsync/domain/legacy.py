"""Conversion of legacy provider-connection objects to the current credential format.

Legacy objects keep their credentials in a single YAML document under the
``metadata`` payload key, use camel-cased field names, and are tagged with the old
provider label. Migration flattens the document into payload entries, renames the
fields and moves the object onto the current labels.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Final, cast

import yaml

from credsync.domain.errors import ExtractionError, MissingCredentialDataError
from credsync.domain.extraction import (
    SERVICE_PRINCIPAL_FIELDS,
    SERVICE_PRINCIPAL_KEY,
    render_scalar,
    service_principal_json,
)
from credsync.domain.model import ProviderType
from credsync.domain.schema import DEFAULT_SCHEMA_KEYS, SchemaKeys

if TYPE_CHECKING:
    from credsync.domain.model import CredentialObject

LEGACY_FIELD_NAMES: Final[dict[str, str]] = {
    "awsAccessKeyID": "aws_access_key_id",
    "awsSecretAccessKeyID": "aws_secret_access_key",
    "sshPrivatekey": "ssh-privatekey",
    "sshPublickey": "ssh-publickey",
    "gcServiceAccountKey": "osServiceAccount.json",
    "gcProjectID": "projectID",
    "openstackCloudsYaml": "clouds.yaml",
    "openstackCloud": "cloud",
    "vcenter": "vCenter",
    "vmClusterName": "cluster",
    "datastore": "defaultDatastore",
}
KNOWN_HOSTS_FIELD: Final[str] = "sshKnownHosts"


def parse_legacy_metadata(raw: bytes | None, *, provider_type: str = "") -> dict[str, object]:
    """Load the legacy YAML credential document into a mapping."""

    if not raw:
        raise MissingCredentialDataError(provider_type, ["metadata"])
    try:
        loaded = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ExtractionError("Failed to parse the legacy credential metadata") from exc
    if not isinstance(loaded, dict):
        raise ExtractionError("Legacy credential metadata must be a YAML mapping")
    return {str(key): value for key, value in cast(dict[object, object], loaded).items()}


def _render_field(name: str, value: object) -> bytes:
    if name == KNOWN_HOSTS_FIELD and isinstance(value, list):
        hosts = cast(list[object], value)
        return "\n".join(render_scalar(host) for host in hosts).encode("utf-8")
    return render_scalar(value).encode("utf-8")


def _migrate_labels(labels: dict[str, str], keys: SchemaKeys) -> dict[str, str]:
    migrated = {
        key: value
        for key, value in labels.items()
        if key not in (keys.legacy_connection, keys.legacy_provider)
    }
    if keys.legacy_provider in labels:
        migrated[keys.provider_type] = labels[keys.legacy_provider]
    migrated[keys.credential_marker] = ""
    return migrated


def migrate_legacy_object(
    obj: CredentialObject, *, keys: SchemaKeys = DEFAULT_SCHEMA_KEYS
) -> CredentialObject:
    """Return ``obj`` converted to the current credential format; ``obj`` is untouched."""

    provider_type = obj.labels.get(keys.legacy_provider, "")
    fields = parse_legacy_metadata(
        obj.data.get(keys.legacy_metadata), provider_type=provider_type
    )

    data = {key: value for key, value in obj.data.items() if key != keys.legacy_metadata}
    if ProviderType.parse(provider_type) is ProviderType.AZURE:
        data[SERVICE_PRINCIPAL_KEY] = service_principal_json(fields)
        fields = {
            name: value for name, value in fields.items() if name not in SERVICE_PRINCIPAL_FIELDS
        }

    for name, value in fields.items():
        data[LEGACY_FIELD_NAMES.get(name, name)] = _render_field(name, value)

    return replace(
        obj,
        data=data,
        labels=_migrate_labels(obj.labels, keys),
        annotations=dict(obj.annotations),
    )
