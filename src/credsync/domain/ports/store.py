"""Port for the object store holding credential objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from credsync.domain.model import CredentialObject, ObjectRef


@runtime_checkable
class CredentialStore(Protocol):
    """Get/list/update/patch contract of the generic object store.

    Implementations raise ``ObjectNotFoundError`` for missing objects,
    ``ConflictError`` for stale resource versions and ``StoreWriteError`` /
    ``StoreError`` for any other backend failure.
    """

    def get(self, ref: ObjectRef) -> CredentialObject: ...

    def list_objects(
        self,
        selector: Mapping[str, str],
        *,
        namespace: str | None = None,
    ) -> list[CredentialObject]:
        """Return objects whose labels match every ``selector`` entry exactly."""
        ...

    def update(self, obj: CredentialObject) -> CredentialObject:
        """Replace ``obj`` guarded by its resource version; return the stored state."""
        ...

    def patch_annotations(self, ref: ObjectRef, annotations: Mapping[str, str]) -> None:
        """Merge ``annotations`` into the object's metadata, leaving everything else."""
        ...
