"""
Tests for Argon2id password hashing.
"""

from unittest.mock import MagicMock, patch

import pytest
from argon2.exceptions import HashingError

from cc_wrapper_auth.crypto import dummy_digest, hash_password, needs_rehash, verify_password
from cc_wrapper_auth.errors import PasswordHashingError


class TestHashPassword:
    def test_encoded_digest_carries_parameters(self):
        digest = hash_password("Password123")
        assert digest.startswith("$argon2id$v=19$m=65536,t=3,p=")

    def test_salted(self):
        first = hash_password("Password123")
        second = hash_password("Password123")

        assert first != second
        assert verify_password("Password123", first)
        assert verify_password("Password123", second)

    def test_unicode_password(self):
        digest = hash_password("pässwörd-日本-🔑")
        assert verify_password("pässwörd-日本-🔑", digest)

    def test_library_failure_is_wrapped(self):
        failing = MagicMock()
        failing.hash.side_effect = HashingError("boom")

        with patch("cc_wrapper_auth.crypto.passwords._hasher", failing):
            with pytest.raises(PasswordHashingError):
                hash_password("Password123")


class TestVerifyPassword:
    @pytest.fixture(scope="class")
    def digest(self):
        return hash_password("Password123")

    def test_correct_password(self, digest):
        assert verify_password("Password123", digest) is True

    def test_wrong_password(self, digest):
        assert verify_password("Password124", digest) is False

    def test_case_sensitive(self, digest):
        assert verify_password("password123", digest) is False

    def test_empty_digest(self):
        assert verify_password("Password123", "") is False

    @pytest.mark.parametrize(
        "digest",
        ["not-a-hash", "$argon2id$v=19$m=65536,t=3,p=4$garbage", "$2b$12$abcdefghijklmnopqrstuv"],
    )
    def test_malformed_digest_never_raises(self, digest):
        assert verify_password("Password123", digest) is False


class TestNeedsRehash:
    def test_current_parameters(self):
        assert needs_rehash(hash_password("Password123")) is False

    def test_weaker_parameters(self):
        from argon2 import PasswordHasher

        weak = PasswordHasher(time_cost=1, memory_cost=8192).hash("Password123")
        assert needs_rehash(weak) is True


class TestDummyDigest:
    def test_uses_current_parameters(self):
        assert needs_rehash(dummy_digest()) is False

    def test_cached(self):
        assert dummy_digest() is dummy_digest()

    def test_matches_no_chosen_password(self):
        assert verify_password("Password123", dummy_digest()) is False
        assert verify_password("", dummy_digest()) is False
