"""Closed value sets shared across subsystem boundaries."""

from enum import StrEnum


class Backend(StrEnum):
    """Storage network a StoredRef points into.

    Serialized into results and CLI output.
    """

    ARWEAVE = "arweave"
    IPFS = "ipfs"


class EvidenceRole(StrEnum):
    """Party that submitted a piece of evidence.

    Stored in the database (evidence_records.role). The table's CHECK
    constraint is the authority on this set; keep both in sync.
    """

    BUYER = "buyer"
    SELLER = "seller"
    SYSTEM = "system"
