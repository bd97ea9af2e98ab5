"""Repository layer for evidence audit rows.

Handles the seam between SQLAlchemy rows (strings) and StoredEvidenceRecord
(strict enum types). This is NOT a trust boundary - if the database has a
role outside the closed set, EvidenceRole() raises and the read crashes.
"""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy.engine import Row as SARow

from dualpin.contracts.audit import StoredEvidenceRecord
from dualpin.contracts.enums import EvidenceRole


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we write is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class EvidenceRecordRepository:
    """Repository for evidence_records rows."""

    def load(self, row: SARow[Any]) -> StoredEvidenceRecord:
        """Load StoredEvidenceRecord from database row.

        Converts role to EvidenceRole. Crashes on invalid data.
        """
        return StoredEvidenceRecord(
            id=row.id,
            transaction_id=row.transaction_id,
            role=EvidenceRole(row.role),
            sha256=row.sha256,
            primary_cid=row.primary_cid,
            mirror_cid=row.mirror_cid,
            content_type=row.content_type,
            created_at=_as_utc(row.created_at),
        )
