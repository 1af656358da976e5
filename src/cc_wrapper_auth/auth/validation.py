"""
Authentication validation.

Secret policy, credential and uniqueness checks used by the auth service, and
request-payload validation used by the HTTP transport.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING, Any, Optional

from ..config import DEFAULT_JWT_EXPIRY, JWT_SECRET_MIN_LENGTH
from ..crypto.passwords import dummy_digest, verify_password
from ..errors import (
    ConfigurationError,
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from .models import ProfileUpdate, UserRecord

if TYPE_CHECKING:
    from .store import UserStore

MIN_EMAIL_LENGTH = 5
MAX_EMAIL_LENGTH = 255
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128
MAX_NAME_LENGTH = 100

_EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
_TIME_PATTERN = re.compile(r"([01][0-9]|2[0-3]):([0-5][0-9])")


def validate_jwt_secret(secret: Optional[str]) -> str:
    """Enforce the signing-key policy.

    Raises:
        ConfigurationError: If the secret is missing or shorter than 32 characters
    """
    if not secret:
        raise ConfigurationError("JWT_SECRET environment variable is required")
    if len(secret) < JWT_SECRET_MIN_LENGTH:
        raise ConfigurationError(f"JWT_SECRET must be at least {JWT_SECRET_MIN_LENGTH} characters")
    return secret


def get_jwt_expiry(expiry: Optional[str]) -> str:
    return expiry or DEFAULT_JWT_EXPIRY


async def validate_unique_email(store: UserStore, email: str) -> None:
    """Raise DuplicateEmailError if ``email`` already has an account."""
    if await store.find_user_by_email(email) is not None:
        raise DuplicateEmailError()


def validate_user_credentials(user: Optional[UserRecord], password: str) -> None:
    """Check a password against a stored user.

    Unknown users and accounts without a password hash (OAuth-only) are
    verified against a dummy digest and then rejected, so all three failure
    modes raise the same error after the same Argon2 work.

    Blocking; run it in an executor from async code.

    Raises:
        InvalidCredentialsError: On any mismatch
    """
    if user is None or not user.password_hash:
        verify_password(password, dummy_digest())
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()


class RequestValidator:
    """Validates and normalizes request bodies for the HTTP routes."""

    @staticmethod
    def _require_mapping(body: Any) -> dict[str, Any]:
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body

    @staticmethod
    def validate_email(value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError("Invalid email format")
        email = value.strip().lower()
        if len(email) < MIN_EMAIL_LENGTH:
            raise ValidationError(f"Email must be at least {MIN_EMAIL_LENGTH} characters")
        if len(email) > MAX_EMAIL_LENGTH:
            raise ValidationError(f"Email must not exceed {MAX_EMAIL_LENGTH} characters")
        if not _EMAIL_PATTERN.fullmatch(email):
            raise ValidationError("Invalid email format")
        return email

    @staticmethod
    def validate_password(value: Any) -> str:
        if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(value) > MAX_PASSWORD_LENGTH:
            raise ValidationError(f"Password must not exceed {MAX_PASSWORD_LENGTH} characters")
        if not (
            re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"[0-9]", value)
        ):
            raise ValidationError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return value

    @staticmethod
    def validate_name(value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError("Name must be a string")
        name = value.strip()
        if not name:
            raise ValidationError("Name must be at least 1 character")
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(f"Name must not exceed {MAX_NAME_LENGTH} characters")
        return name

    @classmethod
    def validate_registration(cls, body: Any) -> dict[str, Any]:
        """
        Validate a registration body.

        Returns:
            Dict with normalized "email", "password" and "name"
        """
        data = cls._require_mapping(body)
        return {
            "email": cls.validate_email(data.get("email")),
            "password": cls.validate_password(data.get("password")),
            "name": cls.validate_name(data.get("name")),
        }

    @classmethod
    def validate_login(cls, body: Any) -> dict[str, Any]:
        data = cls._require_mapping(body)
        password = data.get("password")
        if not isinstance(password, str) or not password:
            raise ValidationError("Password is required")
        return {"email": cls.validate_email(data.get("email")), "password": password}

    @classmethod
    def validate_profile_update(cls, body: Any) -> ProfileUpdate:
        """
        Validate a profile update body (camelCase keys, all optional).

        Returns:
            ProfileUpdate with the provided fields set
        """
        data = cls._require_mapping(body)

        tools = data.get("preferredAITools")
        if tools is not None and (
            not isinstance(tools, list) or not all(isinstance(t, str) for t in tools)
        ):
            raise ValidationError("preferredAITools must be a list of strings")

        preferences = data.get("notificationPreferences")
        if preferences is not None:
            cls._validate_notification_preferences(preferences)

        workspace_id = data.get("defaultWorkspaceId")
        if workspace_id is not None:
            try:
                uuid.UUID(str(workspace_id))
            except ValueError:
                raise ValidationError("defaultWorkspaceId must be a UUID") from None

        return ProfileUpdate(
            preferred_ai_tools=tools,
            notification_preferences=preferences,
            default_workspace_id=workspace_id,
        )

    @staticmethod
    def _validate_notification_preferences(preferences: Any) -> None:
        if not isinstance(preferences, dict):
            raise ValidationError("notificationPreferences must be an object")
        for key in ("email", "inApp"):
            if not isinstance(preferences.get(key), bool):
                raise ValidationError(f"notificationPreferences.{key} must be a boolean")

        quiet_hours = preferences.get("quietHours")
        if quiet_hours is None:
            return
        if not isinstance(quiet_hours, dict) or not isinstance(quiet_hours.get("enabled"), bool):
            raise ValidationError("quietHours.enabled must be a boolean")
        for key in ("start", "end"):
            value = quiet_hours.get(key)
            if not isinstance(value, str) or not _TIME_PATTERN.fullmatch(value):
                raise ValidationError("Invalid time format (HH:mm, 00-23:00-59)")

    @staticmethod
    def validate_oauth_callback(query: Any) -> dict[str, str]:
        code = query.get("code") if query is not None else None
        state = query.get("state") if query is not None else None
        if not code:
            raise ValidationError("Authorization code is required")
        if not state:
            raise ValidationError("State parameter is required")
        return {"code": code, "state": state}
