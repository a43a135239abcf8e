"""Error taxonomy for credential propagation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from credsync.domain.model import ObjectRef


class CredentialSyncError(RuntimeError):
    """Base class for all propagation errors."""


class ObjectNotFoundError(CredentialSyncError):
    """Raised by stores when a credential object does not exist."""

    def __init__(self, ref: ObjectRef) -> None:
        super().__init__(f"Credential object not found: {ref}")
        self.ref = ref


class ExtractionError(CredentialSyncError):
    """Raised when a canonical payload cannot be derived from a raw payload."""


class UnsupportedProviderTypeError(ExtractionError):
    def __init__(self, provider_type: str | None) -> None:
        super().__init__(f"Provider type is not supported: {provider_type!r}")
        self.provider_type = provider_type


class MissingCredentialDataError(ExtractionError):
    def __init__(self, provider_type: str, missing_keys: Iterable[str]) -> None:
        self.provider_type = provider_type
        self.missing_keys = tuple(sorted(missing_keys))
        super().__init__(
            f"Missing credential data for provider {provider_type!r}: "
            + ", ".join(self.missing_keys)
        )


class CorruptFingerprintError(CredentialSyncError):
    """Raised when a stored fingerprint annotation cannot be decoded."""

    def __init__(self, ref: ObjectRef, value: str) -> None:
        super().__init__(f"Stored fingerprint on {ref} is not a valid digest: {value!r}")
        self.ref = ref
        self.value = value


class StoreError(CredentialSyncError):
    """Raised by object-store adapters for transport or backend failures."""


class StoreWriteError(StoreError):
    def __init__(self, ref: ObjectRef, message: str | None = None) -> None:
        super().__init__(message or f"Failed to write credential object {ref}")
        self.ref = ref


class ConflictError(StoreWriteError):
    """Raised when an update carries a stale resource version."""

    def __init__(self, ref: ObjectRef) -> None:
        super().__init__(ref, f"Credential object {ref} was modified concurrently")


class UpstreamPersistError(CredentialSyncError):
    """Raised when the new fingerprint cannot be persisted on the upstream object."""

    def __init__(self, ref: ObjectRef) -> None:
        super().__init__(f"Failed to persist fingerprint on {ref}")
        self.ref = ref
