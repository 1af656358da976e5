"""
Password hashing with Argon2id.

Parameters are embedded in the encoded digest ($argon2id$v=19$m=...,t=...,p=...),
so verification never depends on separately stored settings.
"""

from __future__ import annotations

import logging
import secrets
from functools import lru_cache

from argon2 import PasswordHasher, Type
from argon2.exceptions import HashingError, InvalidHashError, VerificationError

from ..errors import PasswordHashingError

logger = logging.getLogger(__name__)

MEMORY_COST_KIB = 65536  # 64 MiB
TIME_COST = 3

_hasher = PasswordHasher(
    time_cost=TIME_COST,
    memory_cost=MEMORY_COST_KIB,
    type=Type.ID,
)


def hash_password(password: str) -> str:
    """Hash a password; every call uses a fresh random salt.

    Raises:
        PasswordHashingError: If the underlying library fails
    """
    try:
        return _hasher.hash(password)
    except HashingError as e:
        logger.error(f"Argon2 hashing failed: {type(e).__name__}")
        raise PasswordHashingError() from e


def verify_password(password: str, digest: str) -> bool:
    """Check a password against an encoded digest. Never raises."""
    if not digest:
        return False
    try:
        return _hasher.verify(digest, password)
    except (VerificationError, InvalidHashError):
        return False
    except (TypeError, ValueError):
        # Non-str input or a digest the library cannot parse at all
        return False


def needs_rehash(digest: str) -> bool:
    """True when ``digest`` was produced with different parameters than the current ones."""
    try:
        return _hasher.check_needs_rehash(digest)
    except (InvalidHashError, ValueError):
        return True


@lru_cache(maxsize=1)
def dummy_digest() -> str:
    """Digest of a random password, hashed with the current parameters.

    Verified against when no real digest exists, so unknown and OAuth-only
    accounts cost the same Argon2 work as a wrong password.
    """
    return hash_password(secrets.token_hex(16))
