"""
Data models for authentication module.

Separated from __init__.py to avoid circular imports between
the service, the store and the HTTP transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class UserRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    DEVELOPER = "DEVELOPER"
    VIEWER = "VIEWER"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserProfile:
    """Per-user preferences created alongside every account."""

    id: str
    user_id: str
    preferred_ai_tools: Optional[list[str]] = None
    notification_preferences: Optional[dict[str, Any]] = None
    default_workspace_id: Optional[str] = None
    onboarding_completed: bool = False
    tour_completed: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "preferredAITools": self.preferred_ai_tools,
            "notificationPreferences": self.notification_preferences,
            "defaultWorkspaceId": self.default_workspace_id,
            "onboardingCompleted": self.onboarding_completed,
            "tourCompleted": self.tour_completed,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class ProfileUpdate:
    """Partial profile update. Fields left as None are not touched."""

    preferred_ai_tools: Optional[list[str]] = None
    notification_preferences: Optional[dict[str, Any]] = None
    default_workspace_id: Optional[str] = None


@dataclass
class UserRecord:
    """Credential record as held by the user store.

    Contains sensitive fields (password_hash, oauth_id) and must never be
    returned to callers directly; see to_public_user().
    """

    id: str
    email: str
    role: UserRole = UserRole.DEVELOPER
    password_hash: Optional[str] = None
    oauth_provider: Optional[str] = None
    oauth_id: Optional[str] = None
    name: Optional[str] = None
    user_type: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    profile: Optional[UserProfile] = None


@dataclass(frozen=True)
class PublicUser:
    """User shape safe to hand to clients."""

    id: str
    email: str
    role: UserRole
    name: Optional[str] = None
    user_type: Optional[str] = None
    oauth_provider: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "userType": self.user_type,
            "oauthProvider": self.oauth_provider,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


def to_public_user(record: UserRecord) -> PublicUser:
    """Project a store record onto the public user shape, field by field.

    New sensitive fields on UserRecord stay private unless they are added here.
    """
    return PublicUser(
        id=record.id,
        email=record.email,
        role=UserRole(record.role),
        name=record.name or None,
        user_type=record.user_type,
        oauth_provider=record.oauth_provider,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


@dataclass
class SessionRecord:
    """One login on one device.

    Attributes:
        id: Session identifier
        user_id: Owning user
        token: Access JWT, used as the lookup key on logout
        refresh_token: Opaque random hex string
        expires_at: created_at + configured expiry
        created_at: Issue time
        device_info: Optional client metadata
    """

    id: str
    user_id: str
    token: str
    refresh_token: str
    expires_at: datetime
    created_at: datetime
    device_info: Optional[dict[str, Any]] = None


@dataclass
class AuthResult:
    """Outcome of register, login and OAuth login."""

    user: PublicUser
    token: str
    refresh_token: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "user": self.user.to_dict(),
            "token": self.token,
            "refreshToken": self.refresh_token,
        }


@dataclass
class UserContext:
    """User context extracted from a verified access token.

    Attributes:
        user_id: Unique user identifier (from 'userId' claim)
        email: User email address (from 'email' claim)
        role: User role (from 'role' claim)
        issued_at: Token issue time (from 'iat' claim)
        token_expires_at: Token expiration timestamp (from 'exp' claim)
        claims: Full decoded payload, including pass-through claims
    """

    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None
    issued_at: Optional[datetime] = None
    token_expires_at: Optional[datetime] = None
    claims: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> UserContext:
        def _timestamp(key: str) -> Optional[datetime]:
            value = claims.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                try:
                    return datetime.fromtimestamp(value, tz=timezone.utc)
                except (OverflowError, OSError, ValueError):
                    return None
            return None

        return cls(
            user_id=str(claims.get("userId", "")),
            email=claims.get("email"),
            role=claims.get("role"),
            issued_at=_timestamp("iat"),
            token_expires_at=_timestamp("exp"),
            claims=dict(claims),
        )
