# tests/property/engine/test_dual_pin_properties.py
"""Property tests for the dual-pin integrity summary.

A returned DualPinResult always carries matches=True: every digest
disagreement is raised as IntegrityError by the primary store before a
result exists. These properties pin that down for arbitrary payloads and
arbitrary caller-supplied digests.
"""

import asyncio

import pytest
from hypothesis import given
from hypothesis import strategies as st

from dualpin.contracts import DualPinResult, IntegrityError, PutOptions
from dualpin.core.hashing import sha256_hex
from dualpin.engine import DualPinOrchestrator
from tests.fixtures.stores import fake_pair

payloads = st.one_of(st.binary(max_size=512), st.text(max_size=256))
hex_digests = st.text(alphabet="0123456789abcdefABCDEF", min_size=64, max_size=64)


def _pin(content: bytes | str, options: PutOptions | None = None) -> tuple[DualPinResult, list[str]]:
    primary, mirror = fake_pair()
    return asyncio.run(DualPinOrchestrator(primary, mirror).dual_pin(content, options)), primary.calls


@given(content=payloads)
def test_result_digest_is_content_digest(content: bytes | str) -> None:
    result, calls = _pin(content)

    assert result.integrity.computed_sha256 == sha256_hex(content)
    assert result.integrity.matches is True
    assert calls == ["arweave.store", "ipfs.store"]


@given(content=payloads, expected=hex_digests)
def test_matches_false_is_unreachable(content: bytes | str, expected: str) -> None:
    """Any caller digest either pins with matches=True or raises."""
    try:
        result, _ = _pin(content, PutOptions(expected_digest=expected))
    except IntegrityError as e:
        assert e.expected == expected
        assert e.actual == sha256_hex(content)
        assert expected.lower() != sha256_hex(content)
        return
    assert result.integrity.matches is True
    assert expected.lower() == result.integrity.computed_sha256


@given(content=payloads)
def test_uppercase_of_true_digest_is_accepted(content: bytes | str) -> None:
    result, _ = _pin(content, PutOptions(expected_digest=sha256_hex(content).upper()))

    assert result.integrity.matches is True


def test_mismatch_never_reaches_mirror() -> None:
    primary, mirror = fake_pair()
    orchestrator = DualPinOrchestrator(primary, mirror)

    with pytest.raises(IntegrityError):
        asyncio.run(orchestrator.dual_pin(b"evidence", PutOptions(expected_digest="0" * 64)))

    assert primary.calls == ["arweave.store"]
    assert mirror.objects == {}
