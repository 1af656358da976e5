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
Error taxonomy for the authentication service.
Every failure that leaves the service boundary is one of these types, and
create_error_response() turns them into (status, body) pairs for the HTTP layer.
"""

import logging
from typing import Any

from .security_utils import TokenSanitizer

logger = logging.getLogger(__name__)

INVALID_TOKEN_MESSAGE = "Invalid or expired token"
INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
DUPLICATE_EMAIL_MESSAGE = "Email already registered"


class AuthError(Exception):
    """Base class for all errors raised by the auth service."""

    status_code: int = 500
    default_message: str = "Authentication error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ConfigurationError(AuthError):
    """Missing or invalid configuration. Fatal at construction time."""

    default_message = "Invalid configuration"


class ExpiryFormatError(ConfigurationError, ValueError):
    """Duration string does not match the <digits><s|m|h|d> grammar."""

    default_message = "Invalid expiry format"


class EncodingError(ValueError):
    """Malformed base64url input."""


class InvalidTokenError(AuthError):
    """Token is malformed, tampered with, or expired. The reason is never exposed."""

    status_code = 401
    default_message = INVALID_TOKEN_MESSAGE


class InvalidCredentialsError(AuthError):
    status_code = 401
    default_message = INVALID_CREDENTIALS_MESSAGE


class DuplicateEmailError(AuthError):
    status_code = 409
    default_message = DUPLICATE_EMAIL_MESSAGE


class ValidationError(AuthError):
    """Request payload failed schema validation."""

    status_code = 400
    default_message = "Invalid request"


class UnsupportedProviderError(AuthError):
    status_code = 400
    default_message = "Unsupported OAuth provider"


class OAuthStateError(AuthError):
    """OAuth callback state is missing or does not match the state cookie."""

    status_code = 400
    default_message = "Invalid state parameter"


class OAuthError(AuthError):
    status_code = 400
    default_message = "OAuth callback failed"


class PasswordHashingError(AuthError):
    default_message = "Password hashing failed"


class RateLimitExceededError(AuthError):
    status_code = 429
    default_message = "Rate limit exceeded"

    def __init__(self, retry_after: int):
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds.")
        self.retry_after = retry_after


def create_error_response(error: Exception, context: str) -> tuple[int, dict[str, Any]]:
    """
    Map an exception to an HTTP status and JSON body.

    Known AuthError subclasses keep their own message and status. Anything
    else is treated as an internal failure: the client gets a generic message
    and the sanitized details go to the log.

    Args:
        error: The exception that occurred
        context: Operation in which the error occurred (e.g. "login")

    Returns:
        Tuple of (status_code, response_body)
    """
    if isinstance(error, AuthError):
        body: dict[str, Any] = {"error": error.message}
        if isinstance(error, RateLimitExceededError):
            body["retryAfter"] = error.retry_after
        if error.status_code >= 500:
            logger.error(f"{context} failed: {type(error).__name__}: {error.message}")
        return error.status_code, body

    logger.error(
        f"Unexpected error in {context}: {type(error).__name__}: "
        f"{TokenSanitizer.sanitize_error(error)}"
    )
    return 500, {"error": "Internal server error"}
