# src/dualpin/stores/ipfs.py
"""IPFS implementation of StorageAdapter (the MIRROR backend).

Pins evidence on an IPFS node or pinning service via the HTTP RPC API and
reads it back through a public gateway.

Upload shape: multipart POST with a single "file" field to
<endpoint>/api/v0/add?pin=true&wrap-with-directory=false. The node answers
with newline-delimited JSON (one object per added entry, progress objects
included); the LAST non-empty line carries the final CID.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from dualpin.contracts.enums import Backend
from dualpin.contracts.errors import TransportError
from dualpin.contracts.storage import DEFAULT_CONTENT_TYPE, ContentLike, PutOptions
from dualpin.core.config import DEFAULT_MIRROR_ENDPOINT, DEFAULT_MIRROR_GATEWAY
from dualpin.core.hashing import to_bytes
from dualpin.stores.base import HTTPGatewayStore

ADD_PATH = "/api/v0/add"
ADD_PARAMS = {"pin": "true", "wrap-with-directory": "false"}
DEFAULT_FILENAME = "blob"

# Field names seen across kubo and pinning-service gateways, in preference order
_CID_FIELDS = ("Hash", "Cid", "cid")


def parse_add_response(text: str) -> str | None:
    """Extract the CID from an /api/v0/add NDJSON response.

    Returns:
        The CID from the last non-empty line, or None if that line has none

    Raises:
        ValueError: If the last non-empty line is not a JSON object
    """
    lines = [line for line in text.strip().splitlines() if line.strip()]
    if not lines:
        return None

    entry: Any = json.loads(lines[-1])
    if not isinstance(entry, dict):
        raise ValueError(f"expected a JSON object, got {type(entry).__name__}")

    for field_name in _CID_FIELDS:
        value = entry.get(field_name)
        # Some services return DAG-JSON links: {"Cid": {"/": "bafy..."}}
        if isinstance(value, dict):
            value = value.get("/")
        if isinstance(value, str) and value:
            return value
    return None


class IpfsStore(HTTPGatewayStore):
    """Multipart /api/v0/add adapter returning a CID.

    options.filename names the multipart part (default "blob"); tags are
    not supported by the add API and are ignored.
    """

    backend = Backend.IPFS

    def __init__(
        self,
        *,
        endpoint: str = DEFAULT_MIRROR_ENDPOINT,
        public_gateway: str = DEFAULT_MIRROR_GATEWAY,
        auth_token: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(
            endpoint=endpoint,
            public_gateway=public_gateway,
            auth_token=auth_token,
            timeout=timeout,
            client=client,
        )

    @property
    def add_url(self) -> str:
        return self.endpoint + ADD_PATH

    async def _upload(self, content: ContentLike, options: PutOptions) -> str:
        files = {
            "file": (
                options.filename or DEFAULT_FILENAME,
                to_bytes(content),
                options.content_type or DEFAULT_CONTENT_TYPE,
            )
        }
        response = await self._request(
            "store",
            "POST",
            self.add_url,
            params=ADD_PARAMS,
            files=files,
            headers=self._auth_headers,
        )
        if not response.is_success:
            raise self._status_error("store", response)

        try:
            cid = parse_add_response(response.text)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError subclass
            raise TransportError(
                str(self.backend),
                "store",
                status_code=response.status_code,
                reason=f"malformed add response: {e}",
                body=response.text,
            ) from e

        if cid is None:
            raise TransportError(
                str(self.backend),
                "store",
                status_code=response.status_code,
                reason="missing CID in add response",
                body=response.text,
            )
        return cid
