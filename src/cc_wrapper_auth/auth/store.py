#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 CC Wrapper Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
User and session storage.

UserStore is the contract the auth service consumes; production deployments
back it with a database. InMemoryUserStore implements it for local
development and tests.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from copy import deepcopy
from datetime import datetime
from typing import Any, Optional, Protocol

from .models import ProfileUpdate, SessionRecord, UserProfile, UserRecord, utcnow

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base class for storage failures. Propagated to callers unchanged."""


class UniqueConstraintError(StoreError):
    """A write would violate a uniqueness constraint."""


class RecordNotFoundError(StoreError):
    """An update targeted a row that does not exist."""


class UserStore(Protocol):
    """Async user/session store interface.

    Every method takes and returns plain dataclasses; no ORM objects leak
    through. Errors are raised as StoreError subclasses (or whatever the
    backing driver raises) and are not retried by the service.
    """

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    async def create_user_with_profile(
        self, email: str, password_hash: str, name: Optional[str] = None
    ) -> UserRecord:
        ...

    async def find_oauth_user(
        self, email: str, oauth_provider: str, oauth_id: str
    ) -> Optional[UserRecord]:
        ...

    async def create_oauth_user_record(
        self, email: str, oauth_provider: str, oauth_id: str, name: Optional[str] = None
    ) -> UserRecord:
        ...

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        ...

    async def update_user_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        ...

    async def create_session(
        self,
        user_id: str,
        token: str,
        refresh_token: str,
        expires_at: datetime,
        created_at: datetime,
        device_info: Optional[dict[str, Any]] = None,
    ) -> SessionRecord:
        ...

    async def delete_session(self, token: str) -> bool:
        """Delete the session keyed by ``token``; return False if none existed."""
        ...

    async def delete_expired_sessions(self, now: datetime) -> int:
        ...


class InMemoryUserStore:
    """Process-local UserStore.

    Mutations are serialized with a single asyncio.Lock so the unique-email
    constraint holds under concurrent registrations. Records are deep-copied
    on the way out, so callers never hold the store's own objects.
    """

    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._user_ids_by_email: dict[str, str] = {}
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = asyncio.Lock()

    def _new_user(self, email: str, **fields: Any) -> UserRecord:
        if email in self._user_ids_by_email:
            raise UniqueConstraintError("Unique constraint failed on users.email")

        now = utcnow()
        user_id = str(uuid.uuid4())
        profile = UserProfile(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        user = UserRecord(
            id=user_id, email=email, created_at=now, updated_at=now, profile=profile, **fields
        )
        self._users[user_id] = user
        self._user_ids_by_email[email] = user_id
        return deepcopy(user)

    async def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        user_id = self._user_ids_by_email.get(email)
        return deepcopy(self._users[user_id]) if user_id else None

    async def create_user_with_profile(
        self, email: str, password_hash: str, name: Optional[str] = None
    ) -> UserRecord:
        async with self._lock:
            return self._new_user(email, password_hash=password_hash, name=name)

    async def find_oauth_user(
        self, email: str, oauth_provider: str, oauth_id: str
    ) -> Optional[UserRecord]:
        for user in self._users.values():
            if (
                user.email == email
                and user.oauth_provider == oauth_provider
                and user.oauth_id == oauth_id
            ):
                return deepcopy(user)
        return None

    async def create_oauth_user_record(
        self, email: str, oauth_provider: str, oauth_id: str, name: Optional[str] = None
    ) -> UserRecord:
        async with self._lock:
            return self._new_user(
                email, oauth_provider=oauth_provider, oauth_id=oauth_id, name=name
            )

    async def get_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        user = self._users.get(user_id)
        return deepcopy(user) if user else None

    async def update_password_hash(self, user_id: str, password_hash: str) -> None:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise RecordNotFoundError(f"No user {user_id}")
            user.password_hash = password_hash
            user.updated_at = utcnow()

    async def update_user_profile(self, user_id: str, update: ProfileUpdate) -> UserProfile:
        async with self._lock:
            user = self._users.get(user_id)
            if user is None or user.profile is None:
                raise RecordNotFoundError(f"No profile for user {user_id}")

            profile = user.profile
            if update.preferred_ai_tools is not None:
                profile.preferred_ai_tools = list(update.preferred_ai_tools)
            if update.notification_preferences is not None:
                profile.notification_preferences = dict(update.notification_preferences)
            if update.default_workspace_id is not None:
                profile.default_workspace_id = update.default_workspace_id
            profile.updated_at = utcnow()
            return deepcopy(profile)

    async def create_session(
        self,
        user_id: str,
        token: str,
        refresh_token: str,
        expires_at: datetime,
        created_at: datetime,
        device_info: Optional[dict[str, Any]] = None,
    ) -> SessionRecord:
        async with self._lock:
            if token in self._sessions:
                raise UniqueConstraintError("Unique constraint failed on sessions.token")
            session = SessionRecord(
                id=str(uuid.uuid4()),
                user_id=user_id,
                token=token,
                refresh_token=refresh_token,
                expires_at=expires_at,
                created_at=created_at,
                device_info=deepcopy(device_info),
            )
            self._sessions[token] = session
            return deepcopy(session)

    async def delete_session(self, token: str) -> bool:
        async with self._lock:
            return self._sessions.pop(token, None) is not None

    async def delete_expired_sessions(self, now: datetime) -> int:
        async with self._lock:
            expired = [t for t, s in self._sessions.items() if s.expires_at <= now]
            for token in expired:
                del self._sessions[token]
            if expired:
                logger.debug(f"Removed {len(expired)} expired sessions")
            return len(expired)

    # Inspection helpers

    def session_count(self) -> int:
        return len(self._sessions)

    def sessions_for_user(self, user_id: str) -> list[SessionRecord]:
        return [deepcopy(s) for s in self._sessions.values() if s.user_id == user_id]
