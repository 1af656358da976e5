"""
Tests for TokenSanitizer log redaction.
"""

from cc_wrapper_auth.crypto import hash_password, issue_token, random_token
from cc_wrapper_auth.security_utils import TokenSanitizer

SECRET = "test-secret-key-that-is-at-least-32-chars"


class TestSanitizeString:
    def test_jwt_redacted(self):
        token = issue_token({"userId": "u1"}, SECRET, now=1000.0)
        result = TokenSanitizer.sanitize_string(f"verifying {token} for request")

        assert token not in result
        assert "[REDACTED_JWT]" in result
        assert result.startswith("verifying ")

    def test_argon2_digest_redacted(self):
        digest = hash_password("Password123")
        result = TokenSanitizer.sanitize_string(f"stored hash {digest}")

        assert digest not in result
        assert "[REDACTED_ARGON2_DIGEST]" in result

    def test_bearer_header_redacted(self):
        result = TokenSanitizer.sanitize_string("Authorization: Bearer opaque-token-value")
        assert "opaque-token-value" not in result

    def test_secret_assignment_redacted(self):
        result = TokenSanitizer.sanitize_string("login password=hunter2 client_secret: abc123")

        assert "hunter2" not in result
        assert "abc123" not in result

    def test_hex_tokens_redacted(self):
        refresh = random_token(64)
        state = random_token(32)
        result = TokenSanitizer.sanitize_string(f"refresh {refresh} state {state}")

        assert refresh not in result
        assert state not in result
        assert result.count("[REDACTED_HEX_TOKEN]") == 2

    def test_plain_text_untouched(self):
        text = "User 6f1c1e1a registered from 127.0.0.1"
        assert TokenSanitizer.sanitize_string(text) == text

    def test_empty(self):
        assert TokenSanitizer.sanitize_string("") == ""


class TestSanitizeDict:
    def test_sensitive_keys_redacted(self):
        data = {
            "email": "alice@example.com",
            "password": "Password123",
            "passwordHash": "$argon2id$...",
            "refreshToken": "abc",
            "client-secret": "xyz",
            "state": "s",
            "code": "c",
        }
        result = TokenSanitizer.sanitize_dict(data)

        assert result["email"] == "alice@example.com"
        for key in ("password", "passwordHash", "refreshToken", "client-secret", "state", "code"):
            assert result[key] == "[REDACTED]"

    def test_nested_structures(self):
        token = issue_token({"userId": "u1"}, SECRET, now=1000.0)
        data = {
            "request": {"headers": {"authorization": f"Bearer {token}"}},
            "sessions": [{"token": token, "userId": "u1"}, f"raw {token}", 7],
        }
        result = TokenSanitizer.sanitize_dict(data)

        assert result["request"]["headers"]["authorization"] == "[REDACTED]"
        assert result["sessions"][0] == {"token": "[REDACTED]", "userId": "u1"}
        assert token not in result["sessions"][1]
        assert result["sessions"][2] == 7

    def test_max_depth(self):
        nested = {"level": {"level": {"level": {}}}}
        result = TokenSanitizer.sanitize_dict(nested, max_depth=2)
        assert result == {"level": {"level": {"error": "Max recursion depth reached"}}}

    def test_non_string_values_pass_through(self):
        data = {"count": 3, "enabled": True, "missing": None}
        assert TokenSanitizer.sanitize_dict(data) == data


class TestSanitizeError:
    def test_message_redacted(self):
        token = issue_token({"userId": "u1"}, SECRET, now=1000.0)
        error = ValueError(f"bad token {token}")

        assert token not in TokenSanitizer.sanitize_error(error)

    def test_attributes_redacted(self):
        class DriverError(Exception):
            def __init__(self, query):
                super().__init__(f"query failed: {query}")
                self.query = query

        error = DriverError("UPDATE users SET password=hunter2")
        assert "hunter2" not in TokenSanitizer.sanitize_error(error)
