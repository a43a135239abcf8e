"""Label and annotation keys that make up the credential object schema."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

PROVIDER_TYPE_LABEL: Final[str] = "cluster.open-cluster-management.io/type"
LINK_NAMESPACE_LABEL: Final[str] = "cluster.open-cluster-management.io/copiedFromNamespace"
LINK_NAME_LABEL: Final[str] = "cluster.open-cluster-management.io/copiedFromSecretName"
CREDENTIAL_MARKER_LABEL: Final[str] = "cluster.open-cluster-management.io/credentials"
FINGERPRINT_ANNOTATION: Final[str] = "credential-hash"

LEGACY_PROVIDER_LABEL: Final[str] = "cluster.open-cluster-management.io/provider"
LEGACY_CONNECTION_LABEL: Final[str] = "cluster.open-cluster-management.io/cloudconnection"
LEGACY_METADATA_KEY: Final[str] = "metadata"


@dataclass(frozen=True, slots=True)
class SchemaKeys:
    """Every key string the engine reads or writes on credential objects."""

    provider_type: str = PROVIDER_TYPE_LABEL
    link_namespace: str = LINK_NAMESPACE_LABEL
    link_name: str = LINK_NAME_LABEL
    credential_marker: str = CREDENTIAL_MARKER_LABEL
    fingerprint: str = FINGERPRINT_ANNOTATION
    legacy_provider: str = LEGACY_PROVIDER_LABEL
    legacy_connection: str = LEGACY_CONNECTION_LABEL
    legacy_metadata: str = LEGACY_METADATA_KEY

    def link_selector(self, namespace: str, name: str) -> dict[str, str]:
        """Label selector matching every copy linked to ``namespace/name``."""

        return {self.link_namespace: namespace, self.link_name: name}


DEFAULT_SCHEMA_KEYS: Final[SchemaKeys] = SchemaKeys()
