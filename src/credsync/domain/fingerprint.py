"""Content fingerprints of canonical payloads and the tamper check built on them."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from credsync.domain.errors import CorruptFingerprintError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from credsync.domain.model import ObjectRef

DIGEST_SIZE: Final[int] = hashlib.sha256().digest_size


@dataclass(frozen=True, slots=True)
class Fingerprint:
    """SHA-256 digest of a payload's canonical serialization."""

    digest: bytes

    def __post_init__(self) -> None:
        if len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"Fingerprint must be {DIGEST_SIZE} bytes, got {len(self.digest)}")

    def encode(self) -> str:
        """Text form stored in the fingerprint annotation."""

        return base64.b64encode(self.digest).decode("ascii")

    @classmethod
    def decode(cls, value: str, *, ref: ObjectRef) -> Fingerprint:
        try:
            digest = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CorruptFingerprintError(ref, value) from exc
        if len(digest) != DIGEST_SIZE:
            raise CorruptFingerprintError(ref, value)
        return cls(digest)

    def __str__(self) -> str:
        return self.encode()


def canonical_bytes(payload: Mapping[str, bytes]) -> bytes:
    """Serialize ``payload`` deterministically: sorted keys, base64 values, compact JSON."""

    document = {key: base64.b64encode(payload[key]).decode("ascii") for key in sorted(payload)}
    return json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")


def fingerprint(payload: Mapping[str, bytes]) -> Fingerprint:
    # a fresh hash context per call; nothing is shared between invocations
    return Fingerprint(hashlib.sha256(canonical_bytes(payload)).digest())


def matches(trusted: Fingerprint, candidate: Mapping[str, bytes]) -> bool:
    """Return whether ``candidate`` still hashes to the ``trusted`` fingerprint."""

    return hmac.compare_digest(trusted.digest, fingerprint(candidate).digest)


def read_fingerprint(
    annotations: Mapping[str, str], key: str, *, ref: ObjectRef
) -> Fingerprint | None:
    """Decode the stored fingerprint; ``None`` when the object was never fingerprinted."""

    value = annotations.get(key)
    if not value:
        return None
    return Fingerprint.decode(value, ref=ref)
