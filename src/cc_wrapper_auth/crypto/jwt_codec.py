"""
Minimal HS256 JSON Web Token codec.

Only HS256 is supported and the header's "alg" field is never read during
verification, so there is no "alg": "none" or algorithm-confusion path.

Both functions are pure: the secret, expiry and current time are explicit
arguments (``now`` defaults to the wall clock).
"""

from __future__ import annotations

import json
import logging
import math
import time
from collections.abc import Mapping
from typing import Any

from ..errors import EncodingError
from .encoding import base64url_decode, base64url_encode
from .expiry import parse_expiry
from .signing import sign, signatures_match

logger = logging.getLogger(__name__)

JWT_HEADER = {"alg": "HS256", "typ": "JWT"}


def _to_json(data: Mapping[str, Any]) -> str:
    # Compact separators: the header must serialize to exactly {"alg":"HS256","typ":"JWT"}
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def issue_token(
    payload: Mapping[str, Any],
    secret: str,
    expires_in: str = "15m",
    now: float | None = None,
) -> str:
    """Create a signed token.

    Args:
        payload: Claims to embed (userId, email, role, and any extras)
        secret: HMAC key
        expires_in: Expiry duration string, e.g. "15m"
        now: Current time in seconds since the epoch

    Returns:
        Compact serialization ``header.payload.signature``

    Raises:
        ExpiryFormatError: If ``expires_in`` is malformed
    """
    current = time.time() if now is None else now
    issued_at = math.floor(current)
    expires_at = issued_at + parse_expiry(expires_in) // 1000

    claims = {**payload, "exp": expires_at, "iat": issued_at}

    signing_input = f"{base64url_encode(_to_json(JWT_HEADER))}.{base64url_encode(_to_json(claims))}"
    return f"{signing_input}.{sign(signing_input, secret)}"


def verify_token(token: str, secret: str, now: float | None = None) -> dict[str, Any] | None:
    """Verify a token and return its payload, or None if it is invalid.

    Malformed structure, a signature mismatch, an undecodable payload and an
    expired ``exp`` claim all produce the same ``None`` result.
    """
    if not isinstance(token, str):
        return None

    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        logger.debug("Token rejected: malformed structure")
        return None

    encoded_header, encoded_payload, signature = parts

    expected = sign(f"{encoded_header}.{encoded_payload}", secret)
    if not signatures_match(expected, signature):
        logger.debug("Token rejected: signature mismatch")
        return None

    try:
        payload = json.loads(base64url_decode(encoded_payload).decode("utf-8"))
    except (EncodingError, UnicodeDecodeError, json.JSONDecodeError):
        logger.debug("Token rejected: undecodable payload")
        return None

    if not isinstance(payload, dict):
        return None

    if "exp" in payload:
        exp = payload["exp"]
        if isinstance(exp, bool) or not isinstance(exp, (int, float)) or not math.isfinite(exp):
            return None
        current = time.time() if now is None else now
        if exp < math.floor(current):
            logger.debug("Token rejected: expired")
            return None

    return payload
