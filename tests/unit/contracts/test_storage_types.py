# tests/unit/contracts/test_storage_types.py
"""Tests for storage and audit value types."""

from dataclasses import FrozenInstanceError
from datetime import UTC, datetime

import pytest

from dualpin.contracts import (
    Backend,
    DualPinResult,
    EvidenceRole,
    IntegritySummary,
    PutOptions,
    StoredEvidenceRecord,
    StoredRef,
    VerificationReport,
)


class TestPutOptions:
    def test_defaults(self) -> None:
        options = PutOptions()

        assert options.content_type is None
        assert options.filename is None
        assert dict(options.tags) == {}
        assert options.expected_digest is None

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            PutOptions().content_type = "text/plain"  # type: ignore[misc]

    def test_with_expected_digest_copies(self) -> None:
        options = PutOptions(content_type="application/pdf", tags={"deal": "7"})

        resolved = options.with_expected_digest("a" * 64)

        assert resolved.expected_digest == "a" * 64
        assert resolved.content_type == "application/pdf"
        assert resolved.tags == {"deal": "7"}
        assert options.expected_digest is None


class TestResultTypes:
    def test_dual_pin_result_to_dict(self) -> None:
        result = DualPinResult(
            primary=StoredRef(cid="tx1", backend=Backend.ARWEAVE, url="https://arweave.net/tx1"),
            mirror=StoredRef(cid="bafy1", backend=Backend.IPFS),
            integrity=IntegritySummary(computed_sha256="f" * 64, matches=True),
        )

        assert result.to_dict() == {
            "primary": {"cid": "tx1", "backend": "arweave", "url": "https://arweave.net/tx1"},
            "mirror": {"cid": "bafy1", "backend": "ipfs", "url": None},
            "integrity": {"computed_sha256": "f" * 64, "matches": True},
            "audit_recorded": False,
        }

    @pytest.mark.parametrize(
        ("primary", "mirror", "ok"),
        [(True, True, True), (True, False, False), (False, True, False), (False, False, False)],
    )
    def test_verification_report_ok(self, primary: bool, mirror: bool, ok: bool) -> None:
        assert VerificationReport(primary=primary, mirror=mirror).ok is ok


class TestEnums:
    def test_backend_values(self) -> None:
        assert {b.value for b in Backend} == {"arweave", "ipfs"}

    def test_role_values(self) -> None:
        assert {r.value for r in EvidenceRole} == {"buyer", "seller", "system"}

    def test_roles_render_as_plain_strings(self) -> None:
        assert str(EvidenceRole.BUYER) == "buyer"
        assert f"{Backend.IPFS}" == "ipfs"


class TestStoredEvidenceRecord:
    def _make(self, role: object) -> StoredEvidenceRecord:
        return StoredEvidenceRecord(
            id=1,
            transaction_id="DEAL-1",
            role=role,  # type: ignore[arg-type]
            sha256="a" * 64,
            primary_cid="tx",
            mirror_cid="bafy",
            content_type=None,
            created_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC),
        )

    def test_requires_enum_role(self) -> None:
        with pytest.raises(TypeError, match="EvidenceRole"):
            self._make("buyer")

    def test_to_dict(self) -> None:
        data = self._make(EvidenceRole.SYSTEM).to_dict()

        assert data["role"] == "system"
        assert data["created_at"] == "2026-01-02T03:04:05+00:00"
        assert data["content_type"] is None
