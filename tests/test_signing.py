"""
Tests for the HMAC-SHA256 signer.
"""

import base64
import hashlib
import hmac

from cc_wrapper_auth.crypto import sign, signatures_match


class TestSign:
    def test_matches_reference_hmac(self):
        message = "The quick brown fox jumps over the lazy dog"
        expected = base64.urlsafe_b64encode(
            hmac.new(b"key", message.encode(), hashlib.sha256).digest()
        ).rstrip(b"=")

        assert sign(message, "key") == expected.decode("ascii")

    def test_deterministic(self):
        assert sign("header.payload", "secret") == sign("header.payload", "secret")

    def test_bytes_and_str_agree(self):
        assert sign(b"header.payload", b"secret") == sign("header.payload", "secret")

    def test_secret_changes_signature(self):
        assert sign("header.payload", "secret-one") != sign("header.payload", "secret-two")

    def test_output_is_unpadded_base64url(self):
        signature = sign("header.payload", "secret")
        # 32-byte digest -> 43 characters without padding
        assert len(signature) == 43
        assert "=" not in signature
        assert "+" not in signature and "/" not in signature


class TestSignaturesMatch:
    def test_equal(self):
        signature = sign("message", "secret")
        assert signatures_match(signature, signature)

    def test_different(self):
        assert not signatures_match(sign("a", "secret"), sign("b", "secret"))

    def test_different_length(self):
        signature = sign("message", "secret")
        assert not signatures_match(signature, signature[:-1])

    def test_non_ascii_input(self):
        assert not signatures_match(sign("message", "secret"), "ünïcode")
