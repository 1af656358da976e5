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
Security utilities for keeping tokens, password digests and secrets out of logs.
"""

import re
from typing import Any


class TokenSanitizer:
    """Redacts authentication material from log lines and structured data."""

    # Order matters: whole JWTs go before the generic key=value patterns
    PATTERNS = {
        "jwt": re.compile(r"eyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"),
        "argon2_digest": re.compile(r"\$argon2(?:id|i|d)\$[^\s\"']+"),
        "authorization_header": re.compile(
            r"(?:Authorization)[\s:]+[\"\']?(?:Bearer\s+)?([^\s\"\']+)[\"\']?",
            re.IGNORECASE,
        ),
        "bearer": re.compile(r"Bearer\s+([A-Za-z0-9_\-.=+/]{8,})", re.IGNORECASE),
        "secret_assignment": re.compile(
            r"(?:password|passwd|secret|jwt_secret|client_secret|refresh_token|oauth_state)"
            r"[\s=:]+[\"\']?([^\s\"\',;&]+)[\"\']?",
            re.IGNORECASE,
        ),
    }

    # Field names whose values are always redacted in structured data
    SENSITIVE_FIELDS = {
        "password",
        "passwordhash",
        "password_hash",
        "secret",
        "token",
        "refreshtoken",
        "refresh_token",
        "authorization",
        "cookie",
        "client_secret",
        "clientsecret",
        "state",
        "code",
    }

    @classmethod
    def sanitize_string(cls, text: str) -> str:
        """
        Sanitize authentication material from a string.

        Args:
            text: String to sanitize

        Returns:
            Sanitized string
        """
        if not text:
            return text

        sanitized = text

        for pattern_name, pattern in cls.PATTERNS.items():
            if pattern_name in ("jwt", "argon2_digest"):
                sanitized = pattern.sub(f"[REDACTED_{pattern_name.upper()}]", sanitized)
            else:
                sanitized = pattern.sub(
                    lambda m, name=pattern_name: m.group(0).replace(
                        m.group(1), f"[REDACTED_{name.upper()}]"
                    ),
                    sanitized,
                )

        # Refresh tokens and OAuth states are long lowercase hex strings
        sanitized = re.sub(r"\b[0-9a-f]{64,}\b", "[REDACTED_HEX_TOKEN]", sanitized)

        return sanitized

    @classmethod
    def _is_sensitive(cls, key: str) -> bool:
        normalized = key.lower().replace("-", "_")
        return normalized in cls.SENSITIVE_FIELDS or normalized.replace("_", "") in cls.SENSITIVE_FIELDS

    @classmethod
    def sanitize_dict(cls, data: dict[str, Any], max_depth: int = 10) -> dict[str, Any]:
        """
        Recursively sanitize sensitive fields in a dictionary.

        Args:
            data: Dictionary to sanitize
            max_depth: Maximum recursion depth

        Returns:
            Sanitized dictionary
        """
        if max_depth <= 0:
            return {"error": "Max recursion depth reached"}

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if cls._is_sensitive(str(key)):
                sanitized[key] = "[REDACTED]"
            elif isinstance(value, dict):
                sanitized[key] = cls.sanitize_dict(value, max_depth - 1)
            elif isinstance(value, list):
                sanitized[key] = [
                    cls.sanitize_dict(item, max_depth - 1)
                    if isinstance(item, dict)
                    else cls.sanitize_string(item) if isinstance(item, str) else item
                    for item in value
                ]
            elif isinstance(value, str):
                sanitized[key] = cls.sanitize_string(value)
            else:
                sanitized[key] = value

        return sanitized

    @classmethod
    def sanitize_error(cls, error: Exception) -> str:
        """Sanitize an exception message, including string attributes echoed into it."""
        sanitized_msg = cls.sanitize_string(str(error))

        if hasattr(error, "__dict__"):
            for value in error.__dict__.values():
                if isinstance(value, str) and value:
                    value_sanitized = cls.sanitize_string(value)
                    if value != value_sanitized:
                        sanitized_msg = sanitized_msg.replace(value, value_sanitized)

        return sanitized_msg
