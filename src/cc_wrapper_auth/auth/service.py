"""
Authentication service.

Orchestrates registration, login, logout, OAuth sign-in and profile updates
on top of the crypto primitives and an injected UserStore. This is the
contract route handlers consume; it knows nothing about HTTP.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from ..config import REFRESH_TOKEN_SIZE, AuthConfig
from ..crypto import (
    hash_password,
    issue_token,
    needs_rehash,
    parse_expiry,
    random_token,
    verify_token,
)
from ..errors import ConfigurationError, InvalidCredentialsError
from .models import (
    AuthResult,
    ProfileUpdate,
    PublicUser,
    UserContext,
    UserProfile,
    UserRecord,
    to_public_user,
)
from .store import UserStore
from .validation import (
    get_jwt_expiry,
    validate_jwt_secret,
    validate_unique_email,
    validate_user_credentials,
)

logger = logging.getLogger(__name__)


async def _run_blocking(func: Callable[..., Any], *args: Any) -> Any:
    """Run a CPU-bound call (Argon2) in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


class AuthService:
    """Token-based authentication over an abstract user/session store.

    Args:
        config: Service configuration; only jwt_secret and jwt_expiry are read
        store: User/session store
        clock: Returns the current time in seconds since the epoch

    Raises:
        ConfigurationError: If the secret is missing or too short, or the
            expiry string is malformed. The service refuses to start.
    """

    def __init__(
        self,
        config: AuthConfig,
        store: UserStore,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.jwt_secret = validate_jwt_secret(config.jwt_secret)
        self.jwt_expiry = get_jwt_expiry(config.jwt_expiry)
        self._expiry_ms = parse_expiry(self.jwt_expiry)
        try:
            self._session_lifetime = timedelta(milliseconds=self._expiry_ms)
            datetime.fromtimestamp(clock(), tz=timezone.utc) + self._session_lifetime
        except OverflowError as e:
            raise ConfigurationError(f"JWT_EXPIRY is too large: {self.jwt_expiry}") from e
        self.store = store
        self._clock = clock

        logger.info(f"AuthService initialized: token expiry={self.jwt_expiry}")

    async def register(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        device_info: Optional[dict[str, Any]] = None,
    ) -> AuthResult:
        """Create a password account and sign it in.

        The duplicate check runs before hashing; the store's own unique
        constraint remains the final authority if two registrations race.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        await validate_unique_email(self.store, email)

        password_hash = await _run_blocking(hash_password, password)
        user = await self.store.create_user_with_profile(email, password_hash, name)

        logger.info(f"Registered user {user.id}")
        return await self._start_session(user, device_info)

    async def login(
        self,
        email: str,
        password: str,
        device_info: Optional[dict[str, Any]] = None,
    ) -> AuthResult:
        """Sign in with email and password.

        A digest produced with outdated Argon2 parameters is replaced with a
        fresh one after a successful check.

        Raises:
            InvalidCredentialsError: For an unknown email, an OAuth-only
                account, or a wrong password, indistinguishably
        """
        user = await self.store.find_user_by_email(email)
        try:
            await _run_blocking(validate_user_credentials, user, password)
        except InvalidCredentialsError:
            logger.warning("Login failed: invalid credentials")
            raise

        if needs_rehash(user.password_hash):
            digest = await _run_blocking(hash_password, password)
            await self.store.update_password_hash(user.id, digest)
            logger.info(f"Upgraded password hash parameters for user {user.id}")

        return await self._start_session(user, device_info)

    async def logout(self, token: str) -> None:
        """Delete the session for ``token``. Idempotent."""
        deleted = await self.store.delete_session(token)
        if not deleted:
            logger.debug("Logout for unknown or already-deleted session")

    async def get_user_by_id(self, user_id: str) -> Optional[PublicUser]:
        user = await self.store.get_user_by_id(user_id)
        return to_public_user(user) if user else None

    async def update_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        return await self.store.update_user_profile(user_id, update)

    async def create_oauth_user(
        self,
        email: str,
        oauth_provider: str,
        oauth_id: str,
        name: Optional[str] = None,
    ) -> AuthResult:
        """Sign in (or sign up) through an OAuth provider.

        Accounts are matched on the (email, provider, provider id) triple only.
        An existing password account with the same email is not linked.
        """
        user = await self.store.find_oauth_user(email, oauth_provider, oauth_id)
        if user is None:
            user = await self.store.create_oauth_user_record(email, oauth_provider, oauth_id, name)
            logger.info(f"Created {oauth_provider} OAuth user {user.id}")

        return await self._start_session(user)

    def verify_access_token(self, token: str) -> Optional[UserContext]:
        """Verify an access token; None if invalid or expired, for any reason."""
        claims = verify_token(token, self.jwt_secret, now=self._clock())
        if claims is None or not claims.get("userId"):
            return None
        return UserContext.from_claims(claims)

    async def purge_expired_sessions(self) -> int:
        return await self.store.delete_expired_sessions(self._now())

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)

    def _generate_access_token(self, user: UserRecord, now: float) -> str:
        payload = {
            "userId": user.id,
            "email": user.email,
            "role": to_public_user(user).role.value,
            # Unique per issue so two logins in the same second get distinct tokens
            "jti": random_token(16),
        }
        return issue_token(payload, self.jwt_secret, self.jwt_expiry, now=now)

    async def _start_session(
        self, user: UserRecord, device_info: Optional[dict[str, Any]] = None
    ) -> AuthResult:
        now = self._clock()
        token = self._generate_access_token(user, now)
        refresh_token = random_token(REFRESH_TOKEN_SIZE)

        # Kept independent of the JWT's exp claim
        created_at = datetime.fromtimestamp(now, tz=timezone.utc)
        expires_at = created_at + self._session_lifetime

        await self.store.create_session(
            user_id=user.id,
            token=token,
            refresh_token=refresh_token,
            expires_at=expires_at,
            created_at=created_at,
            device_info=device_info,
        )

        return AuthResult(user=to_public_user(user), token=token, refresh_token=refresh_token)
