"""
Cryptographic building blocks: random tokens, base64url, HMAC signing,
Argon2id password hashing, the HS256 JWT codec and expiry parsing.
"""

from .encoding import base64url_decode, base64url_encode, random_token
from .expiry import parse_expiry
from .jwt_codec import issue_token, verify_token
from .passwords import dummy_digest, hash_password, needs_rehash, verify_password
from .signing import sign, signatures_match

__all__ = [
    "base64url_decode",
    "base64url_encode",
    "dummy_digest",
    "hash_password",
    "issue_token",
    "needs_rehash",
    "parse_expiry",
    "random_token",
    "sign",
    "signatures_match",
    "verify_password",
    "verify_token",
]
