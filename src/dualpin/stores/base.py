# src/dualpin/stores/base.py
"""Shared HTTP mechanics for gateway-backed storage adapters.

Both networks read the same way - GET/HEAD against <public-gateway>/<cid> -
and differ only in how an upload is sent and how its identifier comes back.
HTTPGatewayStore implements fetch/probe/verify once and leaves store() to
each backend.

Retries/backoff are intentionally not built in. Every failure surfaces as a
TransportError naming the backend and operation, so callers can centralize
rate-limit and circuit-breaker policy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Self

import httpx
import structlog

from dualpin.contracts.enums import Backend
from dualpin.contracts.errors import IntegrityError, TransportError
from dualpin.contracts.storage import ContentLike, ProbeResult, PutOptions, StoredRef
from dualpin.core.config import BackendSettings
from dualpin.core.hashing import digests_match, sha256_hex

logger = structlog.get_logger(__name__)


def normalize_endpoint(url: str) -> str:
    """Trim trailing slashes from an upload endpoint."""
    return url.rstrip("/")


def normalize_gateway(url: str) -> str:
    """Ensure a gateway base ends with exactly one slash."""
    return url.rstrip("/") + "/"


def authorization_header(token: str | None) -> dict[str, str]:
    """Build the Authorization header for an optional token.

    The configured value is the complete header value and is sent verbatim:
    "Bearer <jwt>" for most pinning services, "Basic <b64>" for Infura, or a
    raw API key for uploaders that expect one.
    """
    if not token:
        return {}
    return {"Authorization": token}


def _safe_text(response: httpx.Response) -> str | None:
    """Response body for diagnostics, or None if it can't be decoded."""
    try:
        return response.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return None


class HTTPGatewayStore(ABC):
    """Base class for StorageAdapter implementations over HTTP.

    Each instance owns one configured transport: its own endpoint, auth
    token, public gateway, and httpx.AsyncClient. An injected client is
    shared, not owned, and is left open by aclose().
    """

    backend: Backend

    def __init__(
        self,
        *,
        endpoint: str,
        public_gateway: str,
        auth_token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize adapter transport.

        Args:
            endpoint: Upload endpoint (trailing slashes are trimmed)
            public_gateway: Base URL for GET/HEAD reads (slash-terminated)
            auth_token: Optional Authorization value for uploads
            timeout: Request timeout in seconds (default: 30.0)
            client: Optional shared AsyncClient (caller keeps ownership)
        """
        self.endpoint = normalize_endpoint(endpoint)
        self.public_gateway = normalize_gateway(public_gateway)
        self._auth_headers = authorization_header(auth_token)
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    @classmethod
    def from_settings(cls, settings: BackendSettings, *, client: httpx.AsyncClient | None = None) -> Self:
        return cls(
            endpoint=settings.endpoint,
            public_gateway=settings.public_gateway,
            auth_token=settings.auth_token,
            timeout=settings.timeout_seconds,
            client=client,
        )

    def __repr__(self) -> str:
        # Never include the auth token
        return f"{type(self).__name__}(endpoint={self.endpoint!r}, public_gateway={self.public_gateway!r})"

    def url_for(self, cid: str) -> str:
        """Public gateway URL for an identifier."""
        return self.public_gateway + cid

    # --- StorageAdapter -----------------------------------------------------

    async def store(self, content: ContentLike, options: PutOptions | None = None) -> StoredRef:
        """Upload content, enforcing options.expected_digest first.

        The digest is checked BEFORE the upload is sent, so a known mismatch
        never reaches the remote network.

        Raises:
            IntegrityError: If content doesn't hash to options.expected_digest
            TransportError: On non-2xx responses, connectivity failures, or a
                success response that carries no identifier
        """
        opts = options if options is not None else PutOptions()
        computed = sha256_hex(content)
        if opts.expected_digest is not None and not digests_match(opts.expected_digest, computed):
            logger.warning(
                "integrity_mismatch",
                backend=str(self.backend),
                expected=opts.expected_digest,
                computed=computed,
            )
            raise IntegrityError(str(self.backend), opts.expected_digest, computed)

        cid = await self._upload(content, opts)
        logger.info("store_completed", backend=str(self.backend), cid=cid, sha256=computed)
        return StoredRef(cid=cid, backend=self.backend, url=self.url_for(cid))

    async def fetch(self, cid: str) -> bytes:
        """Download the full object via the public gateway.

        Raises:
            TransportError: On non-2xx responses or connectivity failures
        """
        response = await self._request("fetch", "GET", self.url_for(cid))
        if not response.is_success:
            raise self._status_error("fetch", response)
        return response.content

    async def probe(self, cid: str) -> ProbeResult | None:
        """HEAD probe for content-type and content-length.

        Returns:
            ProbeResult, or None on a non-2xx answer (missing object or
            gateway that hasn't seen it yet)

        Raises:
            TransportError: If no response could be obtained
        """
        response = await self._request("probe", "HEAD", self.url_for(cid))
        if not response.is_success:
            logger.debug("probe_absent", backend=str(self.backend), cid=cid, status_code=response.status_code)
            return None

        length = response.headers.get("content-length")
        size = int(length) if length is not None and length.strip().isdigit() else None
        return ProbeResult(content_type=response.headers.get("content-type"), size=size)

    async def verify(self, cid: str, expected_sha256: str) -> bool:
        """Read bytes back and compare their SHA-256 to expected_sha256.

        A mismatch and a non-2xx gateway answer both return False. This
        cannot distinguish "doesn't exist" from "tampered"; use probe()
        for existence.

        Raises:
            TransportError: If no response could be obtained at all
        """
        try:
            data = await self.fetch(cid)
        except TransportError as e:
            if e.is_connectivity_failure:
                raise
            logger.info("verify_unreadable", backend=str(self.backend), cid=cid, status_code=e.status_code)
            return False

        actual = sha256_hex(data)
        matched = digests_match(expected_sha256, actual)
        if not matched:
            logger.warning("verify_mismatch", backend=str(self.backend), cid=cid, expected=expected_sha256, actual=actual)
        return matched

    async def aclose(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- Backend hooks and helpers --------------------------------------------

    @abstractmethod
    async def _upload(self, content: ContentLike, options: PutOptions) -> str:
        """Send content to the network and return its identifier."""
        ...

    async def _request(self, operation: str, method: str, url: str, **kwargs: object) -> httpx.Response:
        """Issue one request, mapping httpx failures to TransportError."""
        try:
            return await self._client.request(method, url, **kwargs)  # type: ignore[arg-type]
        except httpx.HTTPError as e:
            raise TransportError(
                str(self.backend),
                operation,
                reason=f"{type(e).__name__}: {e}" if str(e) else type(e).__name__,
            ) from e

    def _status_error(self, operation: str, response: httpx.Response) -> TransportError:
        return TransportError(
            str(self.backend),
            operation,
            status_code=response.status_code,
            reason=response.reason_phrase,
            body=_safe_text(response),
        )
