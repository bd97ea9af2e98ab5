# src/dualpin/contracts/storage.py
"""StorageAdapter protocol and the value types that cross it.

This protocol defines the interface every storage backend implements:
- stores/arweave.py (ArweaveStore, the primary)
- stores/ipfs.py (IpfsStore, the mirror)

The orchestrator depends only on this protocol, never on a concrete
backend, so both networks are interchangeable behind it.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Protocol, Self, runtime_checkable

from dualpin.contracts.enums import Backend

# Payload accepted by adapters. str is UTF-8 encoded before hashing/upload.
ContentLike = bytes | bytearray | memoryview | str

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class PutOptions:
    """Options for a single store / dual-pin call.

    Attributes:
        content_type: MIME type, e.g. "application/pdf". Advisory.
        filename: Filename hint for backends that accept one.
        tags: Free-form key/value tags. Ignored by backends without tagging.
        expected_digest: SHA-256 hex the payload must hash to. A mismatch
            fails the store with IntegrityError.
    """

    content_type: str | None = None
    filename: str | None = None
    tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    expected_digest: str | None = None

    def with_expected_digest(self, digest: str) -> Self:
        """Copy of these options with expected_digest replaced."""
        return replace(self, expected_digest=digest)


@dataclass(frozen=True)
class StoredRef:
    """Canonical reference to content stored on one backend.

    cid is backend-native: a CID for IPFS, a transaction id for Arweave.
    url is a best-effort public gateway URL for reads.
    """

    cid: str
    backend: Backend
    url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"cid": self.cid, "backend": str(self.backend), "url": self.url}


@dataclass(frozen=True)
class ProbeResult:
    """Metadata from a lightweight existence check."""

    content_type: str | None = None
    size: int | None = None


@dataclass(frozen=True)
class IntegritySummary:
    """Digest computed for a dual-pin call.

    matches reports whether the computed digest equals the expected digest
    the stores enforced. A mismatch aborts the call before a result exists,
    so a returned summary always carries matches=True.
    """

    computed_sha256: str
    matches: bool


@dataclass(frozen=True)
class DualPinResult:
    """Outcome of pinning one payload to both backends.

    audit_recorded is True only when an evidence row was written. A skipped
    or failed audit write leaves it False; the pins themselves still stand.
    """

    primary: StoredRef
    mirror: StoredRef
    integrity: IntegritySummary
    audit_recorded: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation."""
        return {
            "primary": self.primary.to_dict(),
            "mirror": self.mirror.to_dict(),
            "integrity": {
                "computed_sha256": self.integrity.computed_sha256,
                "matches": self.integrity.matches,
            },
            "audit_recorded": self.audit_recorded,
        }


@dataclass(frozen=True)
class VerificationReport:
    """Per-backend outcome of re-downloading and re-hashing a pinned payload."""

    primary: bool
    mirror: bool

    @property
    def ok(self) -> bool:
        return self.primary and self.mirror


@runtime_checkable
class StorageAdapter(Protocol):
    """Protocol for storage backends.

    Every backend exposes exactly these four operations. Transport shapes
    differ per network; return types do not.
    """

    backend: Backend

    async def store(self, content: ContentLike, options: PutOptions | None = None) -> StoredRef:
        """Upload content.

        Computes the SHA-256 of content and compares it against
        options.expected_digest when set.

        Returns:
            StoredRef with the backend-assigned identifier and gateway URL

        Raises:
            IntegrityError: If content doesn't hash to options.expected_digest
            TransportError: On non-2xx responses or connectivity failures
        """
        ...

    async def fetch(self, cid: str) -> bytes:
        """Download the full object addressed by cid.

        Raises:
            TransportError: On non-2xx responses or connectivity failures
        """
        ...

    async def probe(self, cid: str) -> ProbeResult | None:
        """Lightweight metadata check that does not download the body.

        Returns:
            ProbeResult, or None when the gateway answers with a non-2xx
            status (unknown or not yet propagated identifier)

        Raises:
            TransportError: If no response could be obtained
        """
        ...

    async def verify(self, cid: str, expected_sha256: str) -> bool:
        """Download content and compare its SHA-256 to expected_sha256.

        Returns:
            True on exact match. False on mismatch or when the gateway
            answers with a non-2xx status.

        Raises:
            TransportError: If no response could be obtained
        """
        ...

    async def aclose(self) -> None:
        """Release the adapter's HTTP connections."""
        ...
