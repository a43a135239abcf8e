"""Credential objects as seen by the propagation engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


type Payload = dict[str, bytes]
type CanonicalPayload = dict[str, bytes]


@dataclass(frozen=True, slots=True, order=True)
class ObjectRef:
    """(namespace, name) identity of a credential object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> ObjectRef:
        namespace, sep, name = value.strip().partition("/")
        if not sep or not namespace or not name or "/" in name:
            raise ValueError(f"Expected NAMESPACE/NAME, got: {value!r}")
        return cls(namespace=namespace, name=name)


@dataclass(slots=True, kw_only=True)
class CredentialObject:
    """Named, namespaced byte-map plus labels and annotations.

    ``resource_version`` is the store's optimistic-concurrency token; ``None`` means
    the object has not been read from a store.
    """

    namespace: str
    name: str
    data: Payload = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    resource_version: str | None = None

    @property
    def ref(self) -> ObjectRef:
        return ObjectRef(namespace=self.namespace, name=self.name)

    def with_data(self, data: Mapping[str, bytes]) -> CredentialObject:
        """Return a copy carrying ``data`` as its payload; metadata is preserved."""

        return replace(
            self,
            data=dict(data),
            labels=dict(self.labels),
            annotations=dict(self.annotations),
        )
