# src/dualpin/core/hashing.py
"""SHA-256 digest engine.

Every digest in dualpin (the one embedded in a DualPinResult, the one an
adapter enforces on store, the one re-computed during verify) goes through
this module, so text and bytes forms of the same content always agree.
"""

import hashlib
import hmac
import re

from dualpin.contracts.storage import ContentLike

__all__ = ["digests_match", "is_sha256_hex", "sha256_bytes", "sha256_hex", "to_bytes"]

# SHA-256 hex digest: exactly 64 lowercase hex characters
_SHA256_HEX_PATTERN = re.compile(r"^[a-f0-9]{64}$")


def to_bytes(content: ContentLike) -> bytes:
    """Normalize a payload to bytes (UTF-8 for text)."""
    if isinstance(content, str):
        return content.encode("utf-8")
    return bytes(content)


def sha256_hex(content: ContentLike) -> str:
    """Compute SHA-256 and return the 64-char lowercase hex digest."""
    return hashlib.sha256(to_bytes(content)).hexdigest()


def sha256_bytes(content: ContentLike) -> bytes:
    """Compute SHA-256 and return the 32 raw digest bytes."""
    return hashlib.sha256(to_bytes(content)).digest()


def is_sha256_hex(value: str) -> bool:
    """Check that value is a well-formed lowercase SHA-256 hex digest."""
    return bool(_SHA256_HEX_PATTERN.match(value))


def digests_match(expected: str, actual: str) -> bool:
    """Timing-safe digest comparison.

    expected is caller-supplied and may be uppercase hex; actual always
    comes from sha256_hex().
    """
    return hmac.compare_digest(expected.strip().lower().encode("ascii", "replace"), actual.encode("ascii"))
