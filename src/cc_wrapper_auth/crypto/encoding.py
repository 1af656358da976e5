"""
Secure random tokens and base64url encoding.
"""

from __future__ import annotations

import base64
import binascii
import secrets

from ..errors import EncodingError


def random_token(byte_length: int = 32) -> str:
    """Return ``byte_length`` bytes from the OS CSPRNG, hex-encoded.

    Refresh tokens use 64 bytes and OAuth states 32 bytes.
    """
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    return secrets.token_hex(byte_length)


def base64url_encode(data: bytes | str) -> str:
    """Base64 with the URL-safe alphabet and all ``=`` padding stripped.

    Strings are encoded as UTF-8 first.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(data: str) -> bytes:
    """Reverse base64url_encode().

    Raises:
        EncodingError: If the input contains characters outside the
            base64url alphabet or has an impossible length.
    """
    try:
        standard = data.replace("-", "+").replace("_", "/")
        padding = "=" * (-len(standard) % 4)
        return base64.b64decode(standard + padding, validate=True)
    except (binascii.Error, ValueError, AttributeError) as e:
        raise EncodingError(f"Invalid base64url input: {e}") from e
