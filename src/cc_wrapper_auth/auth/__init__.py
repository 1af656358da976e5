"""
Authentication services for CC Wrapper.

Architecture:
- AuthService: register / login / logout / OAuth sign-in over a UserStore
- OAuthService: provider authorization URLs and CSRF state validation
- UserStore Protocol: storage interface; InMemoryUserStore for development
- AuthMiddleware / RateLimitMiddleware: Starlette integration
"""

from __future__ import annotations

from .models import (
    AuthResult,
    ProfileUpdate,
    PublicUser,
    SessionRecord,
    UserContext,
    UserProfile,
    UserRecord,
    UserRole,
    to_public_user,
)
from .oauth import (
    AuthorizationRequest,
    OAuthProviderConfig,
    OAuthService,
    OAuthUserInfo,
    ProviderExchange,
    load_providers,
    parse_user_info,
)
from .service import AuthService
from .store import InMemoryUserStore, StoreError, UniqueConstraintError, UserStore

__all__ = [
    "AuthResult",
    "AuthService",
    "AuthorizationRequest",
    "InMemoryUserStore",
    "OAuthProviderConfig",
    "OAuthService",
    "OAuthUserInfo",
    "ProfileUpdate",
    "ProviderExchange",
    "PublicUser",
    "SessionRecord",
    "StoreError",
    "UniqueConstraintError",
    "UserContext",
    "UserProfile",
    "UserRecord",
    "UserRole",
    "UserStore",
    "load_providers",
    "parse_user_info",
    "to_public_user",
]
