# src/dualpin/contracts/errors.py
"""Exception taxonomy for dual-pin storage.

Every failure the core surfaces is one of three kinds:

- TransportError: a remote call failed or returned a non-success status
- IntegrityError: a computed digest disagreed with an expected digest
- ValidationError: bad configuration, or an audit row the store rejected

Audit failures after a successful dual-pin are logged, never raised; see
DualPinResult.audit_recorded.

The core never retries. Callers own retry/backoff policy and can tell from
the error which backend and which operation failed.
"""

from __future__ import annotations

# Longest response body carried on a TransportError. Gateways sometimes answer
# with full HTML error pages; keep messages readable.
MAX_ERROR_BODY_CHARS = 240


def clip(text: str, max_chars: int = MAX_ERROR_BODY_CHARS) -> str:
    """Truncate text for inclusion in error messages."""
    return text if len(text) <= max_chars else f"{text[:max_chars]}…"


class DualPinError(Exception):
    """Base class for all dualpin errors."""

    pass


class TransportError(DualPinError):
    """A remote call could not complete successfully.

    status_code is None when no HTTP response was received at all
    (DNS failure, refused connection, timeout, truncated body).

    Attributes:
        backend: Backend name ("arweave" or "ipfs")
        operation: Adapter operation that failed (store, fetch, probe)
        status_code: HTTP status, or None for connectivity failures
        reason: HTTP reason phrase or exception description
        body: Response body, already clipped for diagnostics
    """

    def __init__(
        self,
        backend: str,
        operation: str,
        *,
        status_code: int | None = None,
        reason: str = "",
        body: str | None = None,
    ) -> None:
        self.backend = backend
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        self.body = clip(body) if body else None

        if status_code is None:
            message = f"{backend} {operation} failed: {reason or 'no response'}"
        else:
            message = f"{backend} {operation} failed: {status_code} {reason}".rstrip()
        if self.body:
            message = f"{message} - {self.body}"
        super().__init__(message)

    @property
    def is_connectivity_failure(self) -> bool:
        """True when the remote never produced an HTTP response."""
        return self.status_code is None


class IntegrityError(DualPinError):
    """Raised when payload content doesn't match the expected digest.

    Always fatal to the store call that raised it. The error reports the
    mismatch; it never attempts to undo a remote write.
    """

    def __init__(self, backend: str, expected: str, actual: str) -> None:
        self.backend = backend
        self.expected = expected
        self.actual = actual
        super().__init__(f"Integrity mismatch ({backend}): expected {expected}, got {actual}")


class ValidationError(DualPinError, ValueError):
    """Malformed configuration, or a value the audit store refused."""

    pass

