# src/dualpin/core/audit/recorder.py
"""EvidenceRecorder: append and query the evidence audit trail.

Maps escrow artifacts (transaction id + role) to the identifiers they were
pinned under and the SHA-256 they hashed to, so that disputes can trace a
submission and re-verify it against both networks.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Self

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError as SAIntegrityError
from sqlalchemy.exc import SQLAlchemyError

from dualpin.contracts.audit import EvidenceRecord, StoredEvidenceRecord
from dualpin.contracts.errors import ValidationError
from dualpin.core.audit.database import EvidenceDB
from dualpin.core.audit.repository import EvidenceRecordRepository
from dualpin.core.audit.schema import evidence_records_table
from dualpin.core.config import AuditSettings, require_audit_url

logger = structlog.get_logger(__name__)

DEFAULT_RECENT_LIMIT = 50
MIN_RECENT_LIMIT = 1
MAX_RECENT_LIMIT = 500


class EvidenceRecorder:
    """High-level API for the evidence_records table.

    Example:
        recorder = EvidenceRecorder(EvidenceDB("sqlite:///./evidence.db"))
        recorder.migrate()
        recorder.add(EvidenceRecord(
            transaction_id="DEAL-123",
            role=EvidenceRole.BUYER,
            sha256=result.integrity.computed_sha256,
            primary_cid=result.primary.cid,
            mirror_cid=result.mirror.cid,
        ))
        rows = recorder.find_by_transaction("DEAL-123")
        recorder.close()
    """

    def __init__(self, db: EvidenceDB) -> None:
        self._db = db
        self._repo = EvidenceRecordRepository()

    @classmethod
    def from_settings(cls, settings: AuditSettings) -> Self:
        """Build a recorder from audit settings.

        Raises:
            ValidationError: If settings carry no database URL
        """
        return cls(EvidenceDB(require_audit_url(settings)))

    def migrate(self) -> None:
        """Ensure the evidence table exists. Idempotent.

        Raises:
            ValidationError: If the database can't be reached or refuses the
                DDL (unreachable host, bad credentials, insufficient privileges)
        """
        try:
            self._db.migrate()
        except SQLAlchemyError as e:
            raise ValidationError(f"Evidence table migration failed: {e}") from e

    def add(self, record: EvidenceRecord) -> None:
        """Insert a single evidence record.

        The role is not checked here; the table's CHECK constraint decides.

        Raises:
            ValidationError: If the database rejects the row (role outside
                buyer/seller/system, or a missing required column)
        """
        created_at = record.created_at if record.created_at is not None else datetime.now(UTC)
        stmt = evidence_records_table.insert().values(
            transaction_id=record.transaction_id,
            role=str(record.role),
            sha256=record.sha256,
            primary_cid=record.primary_cid,
            mirror_cid=record.mirror_cid,
            content_type=record.content_type,
            created_at=created_at,
        )
        try:
            with self._db.connection() as conn:
                conn.execute(stmt)
        except SAIntegrityError as e:
            raise ValidationError(
                f"Evidence record rejected for transaction {record.transaction_id!r} (role={record.role!r}): {e.orig}"
            ) from e

        logger.info(
            "evidence_recorded",
            transaction_id=record.transaction_id,
            role=str(record.role),
            sha256=record.sha256,
        )

    def find_by_transaction(self, transaction_id: str) -> list[StoredEvidenceRecord]:
        """Get all records for a transaction, most recent first.

        Ties on created_at are broken by insertion order (newest first).
        """
        query = (
            select(evidence_records_table)
            .where(evidence_records_table.c.transaction_id == transaction_id)
            .order_by(evidence_records_table.c.created_at.desc(), evidence_records_table.c.id.desc())
        )
        with self._db.connection() as conn:
            rows = conn.execute(query).fetchall()
        return [self._repo.load(r) for r in rows]

    def list_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[StoredEvidenceRecord]:
        """List the most recent records across all transactions.

        Args:
            limit: Number of rows wanted, clamped to [1, 500] rather than
                rejected

        Returns:
            Up to `limit` records, most recent first
        """
        clamped = max(MIN_RECENT_LIMIT, min(limit, MAX_RECENT_LIMIT))
        query = (
            select(evidence_records_table)
            .order_by(evidence_records_table.c.created_at.desc(), evidence_records_table.c.id.desc())
            .limit(clamped)
        )
        with self._db.connection() as conn:
            rows = conn.execute(query).fetchall()
        return [self._repo.load(r) for r in rows]

    def close(self) -> None:
        """Release the underlying connection pool."""
        self._db.close()
