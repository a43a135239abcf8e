"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ProviderType(StrEnum):
    """Provider tag carried in the provider-type label of an upstream credential.

    Values are the label values written by the owning system.
    """

    ANSIBLE = "ans"
    AWS = "aws"
    AZURE = "azr"
    GCP = "gcp"
    VMWARE = "vmw"
    OPENSTACK = "ost"
    OVIRT = "redhatvirtualization"

    @classmethod
    def parse(cls, value: str | None) -> ProviderType | None:
        """Return the provider for a label value or long name, ``None`` if unrecognised."""

        if value is None:
            return None
        normalized = value.strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return _LONG_NAMES.get(normalized)


_LONG_NAMES: dict[str, ProviderType] = {
    "ansible": ProviderType.ANSIBLE,
    "azure": ProviderType.AZURE,
    "vmware": ProviderType.VMWARE,
    "openstack": ProviderType.OPENSTACK,
    "ovirt": ProviderType.OVIRT,
}


class EventKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
