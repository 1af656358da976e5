"""
Tests for secret policy, credential checks and request validation.
"""

from unittest.mock import patch

import pytest

from cc_wrapper_auth.auth.models import UserRecord
from cc_wrapper_auth.auth.validation import (
    RequestValidator,
    get_jwt_expiry,
    validate_jwt_secret,
    validate_unique_email,
    validate_user_credentials,
)
from cc_wrapper_auth.crypto import dummy_digest, hash_password
from cc_wrapper_auth.errors import (
    ConfigurationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)


class TestSecretPolicy:
    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret(self, secret):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_jwt_secret(secret)
        assert exc_info.value.message == "JWT_SECRET environment variable is required"

    def test_short_secret(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_jwt_secret("x" * 31)
        assert exc_info.value.message == "JWT_SECRET must be at least 32 characters"

    def test_minimum_length_accepted(self):
        assert validate_jwt_secret("x" * 32) == "x" * 32

    def test_expiry_default(self):
        assert get_jwt_expiry(None) == "15m"
        assert get_jwt_expiry("") == "15m"
        assert get_jwt_expiry("1h") == "1h"


class TestCredentialChecks:
    def test_matching_password(self):
        user = UserRecord(id="u1", email="a@example.com", password_hash=hash_password("Password1"))
        validate_user_credentials(user, "Password1")

    def test_wrong_password(self):
        user = UserRecord(id="u1", email="a@example.com", password_hash=hash_password("Password1"))
        with pytest.raises(InvalidCredentialsError):
            validate_user_credentials(user, "Password2")

    def test_oauth_only_account(self):
        user = UserRecord(id="u1", email="a@example.com", oauth_provider="github", oauth_id="1")
        with pytest.raises(InvalidCredentialsError) as exc_info:
            validate_user_credentials(user, "anything")
        assert exc_info.value.message == "Invalid email or password"

    def test_unknown_user(self):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            validate_user_credentials(None, "anything")
        assert exc_info.value.message == "Invalid email or password"

    @pytest.mark.parametrize(
        "user",
        [None, UserRecord(id="u1", email="a@example.com", oauth_provider="github", oauth_id="1")],
    )
    def test_missing_digest_still_runs_argon2(self, user):
        with patch(
            "cc_wrapper_auth.auth.validation.verify_password", return_value=True
        ) as verify:
            with pytest.raises(InvalidCredentialsError):
                validate_user_credentials(user, "anything")

        verify.assert_called_once_with("anything", dummy_digest())

    @pytest.mark.asyncio
    async def test_unique_email(self, store):
        await validate_unique_email(store, "new@example.com")

        await store.create_user_with_profile("taken@example.com", "digest")
        with pytest.raises(DuplicateEmailError):
            await validate_unique_email(store, "taken@example.com")


class TestRequestValidator:
    def test_email_normalized(self):
        assert RequestValidator.validate_email("  Alice@Example.COM ") == "alice@example.com"

    @pytest.mark.parametrize(
        "email", [None, 42, "", "a@b", "no-at-sign.com", "two@@example.com", "sp ace@example.com"]
    )
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            RequestValidator.validate_email(email)

    def test_email_too_long(self):
        with pytest.raises(ValidationError):
            RequestValidator.validate_email("a" * 250 + "@example.com")

    @pytest.mark.parametrize(
        "password",
        [None, "Short1", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere", "Aa1" + "x" * 126],
    )
    def test_weak_password(self, password):
        with pytest.raises(ValidationError):
            RequestValidator.validate_password(password)

    def test_strong_password(self):
        assert RequestValidator.validate_password("Password123") == "Password123"

    def test_name(self):
        assert RequestValidator.validate_name(None) is None
        assert RequestValidator.validate_name("  Alice ") == "Alice"
        with pytest.raises(ValidationError):
            RequestValidator.validate_name("   ")
        with pytest.raises(ValidationError):
            RequestValidator.validate_name("x" * 101)

    def test_registration(self):
        data = RequestValidator.validate_registration(
            {"email": "Bob@Example.com", "password": "Password123", "name": "Bob"}
        )
        assert data == {"email": "bob@example.com", "password": "Password123", "name": "Bob"}

    @pytest.mark.parametrize("body", [None, [], "text", 3])
    def test_body_must_be_object(self, body):
        with pytest.raises(ValidationError):
            RequestValidator.validate_registration(body)

    def test_login_requires_password(self):
        with pytest.raises(ValidationError):
            RequestValidator.validate_login({"email": "bob@example.com"})

    def test_login_does_not_apply_strength_rules(self):
        data = RequestValidator.validate_login({"email": "bob@example.com", "password": "weak"})
        assert data["password"] == "weak"

    def test_profile_update_all_fields(self):
        update = RequestValidator.validate_profile_update(
            {
                "preferredAITools": ["claude", "copilot"],
                "notificationPreferences": {
                    "email": True,
                    "inApp": False,
                    "quietHours": {"enabled": True, "start": "22:00", "end": "07:30"},
                },
                "defaultWorkspaceId": "6f1c1e1a-3c4b-4d7e-9a51-0b9d1f2e3a4b",
            }
        )
        assert update.preferred_ai_tools == ["claude", "copilot"]
        assert update.notification_preferences["quietHours"]["start"] == "22:00"
        assert update.default_workspace_id == "6f1c1e1a-3c4b-4d7e-9a51-0b9d1f2e3a4b"

    def test_profile_update_empty(self):
        update = RequestValidator.validate_profile_update({})
        assert update.preferred_ai_tools is None
        assert update.notification_preferences is None
        assert update.default_workspace_id is None

    @pytest.mark.parametrize(
        "body",
        [
            {"preferredAITools": "claude"},
            {"preferredAITools": ["claude", 3]},
            {"notificationPreferences": {"email": True}},
            {"notificationPreferences": {"email": "yes", "inApp": True}},
            {
                "notificationPreferences": {
                    "email": True,
                    "inApp": True,
                    "quietHours": {"enabled": True, "start": "24:00", "end": "07:00"},
                }
            },
            {
                "notificationPreferences": {
                    "email": True,
                    "inApp": True,
                    "quietHours": {"enabled": "yes", "start": "22:00", "end": "07:00"},
                }
            },
            {"defaultWorkspaceId": "not-a-uuid"},
        ],
    )
    def test_profile_update_rejected(self, body):
        with pytest.raises(ValidationError):
            RequestValidator.validate_profile_update(body)

    def test_oauth_callback(self):
        assert RequestValidator.validate_oauth_callback({"code": "c", "state": "s"}) == {
            "code": "c",
            "state": "s",
        }

    @pytest.mark.parametrize("query", [{}, {"code": "c"}, {"state": "s"}, {"code": "", "state": "s"}])
    def test_oauth_callback_missing_params(self, query):
        with pytest.raises(ValidationError):
            RequestValidator.validate_oauth_callback(query)
