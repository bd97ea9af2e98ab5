# tests/unit/core/test_hashing.py
"""Tests for the SHA-256 digest engine."""

import hashlib

import pytest

from dualpin.core.hashing import digests_match, is_sha256_hex, sha256_bytes, sha256_hex, to_bytes
from tests.fixtures.gateways import HELLO_ARTHA, HELLO_ARTHA_SHA256, HELLO_SHA256


class TestSha256Hex:
    """Hex digest form."""

    def test_known_digest(self) -> None:
        assert sha256_hex(b"hello") == HELLO_SHA256

    def test_known_digest_for_end_to_end_payload(self) -> None:
        assert sha256_hex(HELLO_ARTHA) == HELLO_ARTHA_SHA256

    def test_empty_payload(self) -> None:
        assert sha256_hex(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_is_64_lowercase_hex(self) -> None:
        digest = sha256_hex(b"\x00\xff binary")
        assert len(digest) == 64
        assert digest == digest.lower()
        assert is_sha256_hex(digest)

    def test_stable_for_same_input(self) -> None:
        assert sha256_hex("hello") == sha256_hex("hello")


class TestNormalization:
    """Text and byte forms of the same content hash identically."""

    def test_str_equals_utf8_bytes(self) -> None:
        assert sha256_hex("hello") == sha256_hex("hello".encode())

    def test_non_ascii_text_is_utf8_encoded(self) -> None:
        # Latin-1 would give a different digest
        assert sha256_hex("héllo") == "3c48591d8d098a4538f5e013dfcf406e948eac4d3277b10bf614e295d6068179"
        assert sha256_hex("héllo") != hashlib.sha256("héllo".encode("latin-1")).hexdigest()

    @pytest.mark.parametrize("wrap", [bytes, bytearray, memoryview])
    def test_buffer_types_agree(self, wrap: type) -> None:
        assert sha256_hex(wrap(b"hello")) == HELLO_SHA256

    def test_to_bytes_returns_bytes(self) -> None:
        assert to_bytes(bytearray(b"ab")) == b"ab"
        assert isinstance(to_bytes(memoryview(b"ab")), bytes)


class TestSha256Bytes:
    """Raw digest form."""

    def test_is_32_bytes(self) -> None:
        assert len(sha256_bytes(b"hello")) == 32

    def test_matches_hex_form(self) -> None:
        assert sha256_bytes("hello").hex() == sha256_hex(b"hello")


class TestDigestsMatch:
    """Timing-safe comparison."""

    def test_equal(self) -> None:
        assert digests_match(HELLO_SHA256, HELLO_SHA256)

    def test_uppercase_expected_matches(self) -> None:
        assert digests_match(HELLO_SHA256.upper(), HELLO_SHA256)

    def test_different(self) -> None:
        assert not digests_match("0" * 64, HELLO_SHA256)

    def test_garbage_expected_does_not_raise(self) -> None:
        assert not digests_match("not-the-real-digest", HELLO_SHA256)
        assert not digests_match("ünïcode", HELLO_SHA256)


class TestIsSha256Hex:
    @pytest.mark.parametrize(
        "value",
        ["", "abc", HELLO_SHA256.upper(), HELLO_SHA256 + "0", "g" * 64],
    )
    def test_rejects_malformed(self, value: str) -> None:
        assert not is_sha256_hex(value)
