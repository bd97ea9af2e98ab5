# src/dualpin/stores/arweave.py
"""Arweave implementation of StorageAdapter (the PRIMARY backend).

Persists evidence bytes on Arweave for immutability/finality and reads them
back through a public gateway.

Upload shape: raw POST of the payload to an upload-accepting endpoint
(Bundlr-compatible node or custom gateway) that answers with the
transaction id as plain text. Teams that sign transactions server-side
should point the endpoint at their signing service; the contract is the
same.

Do NOT upload plaintext PII/secrets to public Arweave. Encrypt client-side
and upload ciphertext; size limits and scanning belong to the caller.
"""

from __future__ import annotations

import httpx

from dualpin.contracts.enums import Backend
from dualpin.contracts.errors import TransportError
from dualpin.contracts.storage import DEFAULT_CONTENT_TYPE, ContentLike, PutOptions
from dualpin.core.config import DEFAULT_PRIMARY_ENDPOINT, DEFAULT_PRIMARY_GATEWAY
from dualpin.core.hashing import to_bytes
from dualpin.stores.base import HTTPGatewayStore


class ArweaveStore(HTTPGatewayStore):
    """Raw-POST adapter returning an Arweave transaction id.

    Filename and tags are not sent; the endpoint receives bytes plus a
    content-type header only.
    """

    backend = Backend.ARWEAVE

    def __init__(
        self,
        *,
        endpoint: str = DEFAULT_PRIMARY_ENDPOINT,
        public_gateway: str = DEFAULT_PRIMARY_GATEWAY,
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

    async def _upload(self, content: ContentLike, options: PutOptions) -> str:
        headers = {"content-type": options.content_type or DEFAULT_CONTENT_TYPE, **self._auth_headers}
        response = await self._request("store", "POST", self.endpoint, content=to_bytes(content), headers=headers)
        if not response.is_success:
            raise self._status_error("store", response)

        tx_id = response.text.strip()
        if not tx_id:
            raise TransportError(
                str(self.backend),
                "store",
                status_code=response.status_code,
                reason="empty transaction id in upload response",
            )
        return tx_id
