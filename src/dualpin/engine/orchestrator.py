# src/dualpin/engine/orchestrator.py
"""DualPinOrchestrator: pin one payload to primary and mirror.

Each dual_pin() call is one ephemeral run through five steps:

1. Digest     - SHA-256 computed once, before any remote call
2. Resolve    - caller's expected digest, else the computed one
3. Store      - primary, THEN mirror, same resolved options
4. Assemble   - both StoredRefs plus the integrity summary
5. Audit      - one evidence row, only when a recorder is configured AND
                both transaction_id and role were given

There is no cross-backend atomicity. A primary failure aborts before the
mirror is attempted. A mirror failure after a primary success aborts too,
leaving the primary upload orphaned; nothing is rolled back, and the absence
of an evidence row is the reconciliation signal.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Self

import structlog
from sqlalchemy.exc import SQLAlchemyError

from dualpin.contracts.audit import EvidenceRecord
from dualpin.contracts.errors import DualPinError, ValidationError
from dualpin.contracts.storage import (
    ContentLike,
    DualPinResult,
    IntegritySummary,
    PutOptions,
    StorageAdapter,
    VerificationReport,
)
from dualpin.core.hashing import digests_match, sha256_hex

if TYPE_CHECKING:
    import httpx

    from dualpin.contracts.enums import EvidenceRole
    from dualpin.core.audit import EvidenceRecorder
    from dualpin.core.config import DualPinSettings

logger = structlog.get_logger(__name__)


class DualPinOrchestrator:
    """Coordinates both storage adapters and the optional audit recorder.

    The orchestrator is backend-agnostic: it only sees StorageAdapter.

    Example:
        async with DualPinOrchestrator.from_settings(load_settings()) as pinner:
            result = await pinner.dual_pin(
                pdf_bytes,
                PutOptions(content_type="application/pdf"),
                transaction_id="DEAL-123",
                role=EvidenceRole.BUYER,
            )
    """

    def __init__(
        self,
        primary: StorageAdapter,
        mirror: StorageAdapter,
        *,
        recorder: EvidenceRecorder | None = None,
    ) -> None:
        self.primary = primary
        self.mirror = mirror
        self.recorder = recorder

    @classmethod
    def from_settings(cls, settings: DualPinSettings, *, client: httpx.AsyncClient | None = None) -> Self:
        """Build adapters (and recorder, when audit is enabled) from settings.

        The recorder's schema is migrated here; migration is idempotent.
        A recorder whose migration fails is closed before the error
        propagates.

        Raises:
            ValidationError: If audit is enabled without a database URL, or
                the evidence table can't be created
        """
        from dualpin.core.audit import EvidenceRecorder
        from dualpin.stores import ArweaveStore, IpfsStore

        recorder: EvidenceRecorder | None = None
        if settings.audit.enabled:
            recorder = EvidenceRecorder.from_settings(settings.audit)
            try:
                recorder.migrate()
            except DualPinError:
                recorder.close()
                raise

        return cls(
            ArweaveStore.from_settings(settings.primary, client=client),
            IpfsStore.from_settings(settings.mirror, client=client),
            recorder=recorder,
        )

    async def dual_pin(
        self,
        content: ContentLike,
        options: PutOptions | None = None,
        *,
        transaction_id: str | None = None,
        role: EvidenceRole | str | None = None,
    ) -> DualPinResult:
        """Pin content to primary then mirror and bind both ids to one digest.

        Args:
            content: Payload bytes, or text (UTF-8 encoded)
            options: content type, filename, tags, expected digest
            transaction_id: Business transaction for the evidence row
            role: Submitting party (buyer, seller, system)

        Returns:
            DualPinResult with both StoredRefs, the computed digest, and
            whether an evidence row was written

        Raises:
            IntegrityError: If content doesn't hash to options.expected_digest
            TransportError: If either backend fails (no partial result)
        """
        opts = options if options is not None else PutOptions()
        computed = sha256_hex(content)
        expected = opts.expected_digest if opts.expected_digest is not None else computed
        resolved = opts.with_expected_digest(expected)

        log = logger.bind(sha256=computed, transaction_id=transaction_id)
        log.info("dual_pin_started", caller_expected=opts.expected_digest is not None)

        primary_ref = await self.primary.store(content, resolved)
        try:
            mirror_ref = await self.mirror.store(content, resolved)
        except DualPinError:
            log.warning(
                "orphaned_upload",
                backend=str(primary_ref.backend),
                cid=primary_ref.cid,
                reason="mirror store failed after primary succeeded",
            )
            raise

        result = DualPinResult(
            primary=primary_ref,
            mirror=mirror_ref,
            integrity=IntegritySummary(computed_sha256=computed, matches=digests_match(expected, computed)),
        )
        log.info("dual_pin_completed", primary_cid=primary_ref.cid, mirror_cid=mirror_ref.cid)

        recorded = await self._record_evidence(result, opts, transaction_id=transaction_id, role=role)
        return replace(result, audit_recorded=recorded)

    async def _record_evidence(
        self,
        result: DualPinResult,
        options: PutOptions,
        *,
        transaction_id: str | None,
        role: EvidenceRole | str | None,
    ) -> bool:
        """Write the evidence row, or log why it wasn't written.

        Audit never fails a dual-pin whose uploads succeeded: a missing
        recorder or missing business metadata is a logged skip, and a
        rejected or failed insert is logged as audit_failed.

        Returns:
            True if the row was written
        """
        if self.recorder is None:
            if transaction_id is not None or role is not None:
                logger.info("audit_skipped", reason="audit_disabled", transaction_id=transaction_id)
            return False
        if not transaction_id or not role:
            logger.info(
                "audit_skipped",
                reason="missing_business_metadata",
                has_transaction_id=bool(transaction_id),
                has_role=bool(role),
            )
            return False

        record = EvidenceRecord(
            transaction_id=transaction_id,
            role=role,
            sha256=result.integrity.computed_sha256,
            primary_cid=result.primary.cid,
            mirror_cid=result.mirror.cid,
            content_type=options.content_type,
        )
        # Synchronous SQLAlchemy round-trip; keep it off the event loop
        try:
            await asyncio.to_thread(self.recorder.add, record)
        except (ValidationError, SQLAlchemyError) as e:
            logger.error(
                "audit_failed",
                transaction_id=transaction_id,
                role=str(role),
                sha256=result.integrity.computed_sha256,
                primary_cid=result.primary.cid,
                mirror_cid=result.mirror.cid,
                error_type=type(e).__name__,
                reason=str(e),
            )
            return False
        return True

    async def verify(self, result: DualPinResult) -> VerificationReport:
        """Re-download both copies and check them against the pinned digest.

        Raises:
            TransportError: If either gateway cannot be reached at all
        """
        digest = result.integrity.computed_sha256
        report = VerificationReport(
            primary=await self.primary.verify(result.primary.cid, digest),
            mirror=await self.mirror.verify(result.mirror.cid, digest),
        )
        logger.info("verify_completed", sha256=digest, primary=report.primary, mirror=report.mirror)
        return report

    async def aclose(self) -> None:
        """Close both adapters and the recorder."""
        await self.primary.aclose()
        await self.mirror.aclose()
        if self.recorder is not None:
            self.recorder.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
