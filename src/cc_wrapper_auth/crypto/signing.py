"""
HMAC-SHA256 signing primitive.
"""

from __future__ import annotations

import hashlib
import hmac

from .encoding import base64url_encode


def _to_bytes(value: bytes | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign(message: bytes | str, secret: bytes | str) -> str:
    """Return base64url(HMAC-SHA256(key=secret, msg=message))."""
    digest = hmac.new(_to_bytes(secret), _to_bytes(message), hashlib.sha256).digest()
    return base64url_encode(digest)


def signatures_match(expected: str, received: str) -> bool:
    """Constant-time comparison of two encoded signatures."""
    return hmac.compare_digest(_to_bytes(expected), _to_bytes(received))
