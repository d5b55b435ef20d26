"""
Tests for webhook signature validation.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac

import pytest

from lohr.webhook.signature import sign, signature_values, validate_signature

SECRET = b"shared-secret"
BODY = b'{"repository": {"full_name": "owner/proj"}}'


def _flip_bit(data: bytes, bit: int) -> bytes:
    flipped = bytearray(data)
    flipped[bit // 8] ^= 1 << (bit % 8)
    return bytes(flipped)


class TestValidateSignature:

    def test_valid_signature(self):
        signature = hmac.new(SECRET, BODY, hashlib.sha256).hexdigest()
        assert validate_signature(SECRET, signature, BODY) is True

    def test_sign_matches_sender(self):
        assert sign(SECRET, BODY) == hmac.new(SECRET, BODY, hashlib.sha256).hexdigest()

    def test_uppercase_hex_accepted(self):
        assert validate_signature(SECRET, sign(SECRET, BODY).upper(), BODY) is True

    def test_any_body_bit_flip_fails(self):
        signature = sign(SECRET, BODY)
        for bit in range(len(BODY) * 8):
            assert validate_signature(SECRET, signature, _flip_bit(BODY, bit)) is False

    def test_any_signature_bit_flip_fails(self):
        raw = binascii.unhexlify(sign(SECRET, BODY))
        for bit in range(len(raw) * 8):
            tampered = binascii.hexlify(_flip_bit(raw, bit)).decode()
            assert validate_signature(SECRET, tampered, BODY) is False

    def test_wrong_secret_fails(self):
        assert validate_signature(b"other", sign(SECRET, BODY), BODY) is False

    @pytest.mark.parametrize("signature", ["", "zz", "abc", "sha256=" + "0" * 64])
    def test_non_hex_signature_fails(self, signature):
        assert validate_signature(SECRET, signature, BODY) is False

    def test_truncated_signature_fails(self):
        assert validate_signature(SECRET, sign(SECRET, BODY)[:-2], BODY) is False

    def test_empty_body(self):
        assert validate_signature(SECRET, sign(SECRET, b""), b"") is True


class TestSignatureValues:

    def test_missing_header(self):
        assert signature_values(None) == []

    def test_single_value(self):
        assert signature_values("abc123") == ["abc123"]

    def test_repeated_header_joined_by_comma(self):
        assert signature_values("abc, def") == ["abc", "def"]

    def test_empty_header_is_one_value(self):
        # Present but empty: counts as one header, fails later on MAC
        assert signature_values("") == [""]
