"""Audit trail contracts for the evidence_records table.

EvidenceRecord is what callers hand to the recorder. The role it carries is
deliberately not validated here: the table's CHECK constraint is the single
authority, and a rejected insert surfaces as ValidationError.

StoredEvidenceRecord is what comes back out. The audit table is OUR data, so
reads are strict - an unknown role in the database crashes the read.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from dualpin.contracts.enums import EvidenceRole


@dataclass(frozen=True)
class EvidenceRecord:
    """One evidence submission to persist."""

    transaction_id: str
    role: EvidenceRole | str
    sha256: str
    primary_cid: str
    mirror_cid: str
    content_type: str | None = None
    created_at: datetime | None = None  # None = insertion time


@dataclass(frozen=True)
class StoredEvidenceRecord:
    """An evidence row read back from the audit table.

    Strict contract - role must be EvidenceRole enum.
    """

    id: int
    transaction_id: str
    role: EvidenceRole
    sha256: str
    primary_cid: str
    mirror_cid: str
    content_type: str | None
    created_at: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.role, EvidenceRole):
            raise TypeError(f"role must be EvidenceRole, got {type(self.role).__name__}: {self.role!r}")

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe representation with an ISO-8601 timestamp."""
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "role": str(self.role),
            "sha256": self.sha256,
            "primary_cid": self.primary_cid,
            "mirror_cid": self.mirror_cid,
            "content_type": self.content_type,
            "created_at": self.created_at.isoformat(),
        }
