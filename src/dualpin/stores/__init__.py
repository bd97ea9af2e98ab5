"""Storage adapters for the two pinning networks.

ArweaveStore is the primary (durability), IpfsStore the mirror
(distribution). Both implement dualpin.contracts.StorageAdapter.
"""

from dualpin.stores.arweave import ArweaveStore
from dualpin.stores.base import HTTPGatewayStore
from dualpin.stores.ipfs import IpfsStore, parse_add_response

__all__ = ["ArweaveStore", "HTTPGatewayStore", "IpfsStore", "parse_add_response"]
