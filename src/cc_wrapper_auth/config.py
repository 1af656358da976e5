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
Configuration module for the CC Wrapper auth service
Centralizes all configuration values and environment variables.

The environment is read only when an AuthConfig is constructed; the result is
passed explicitly to the services that need it.
"""

import os
from dataclasses import dataclass, field
from typing import Any

# Security constants
JWT_SECRET_MIN_LENGTH = 32
DEFAULT_JWT_EXPIRY = "15m"
REFRESH_TOKEN_SIZE = 64  # bytes, 128 hex characters
OAUTH_STATE_TOKEN_SIZE = 32  # bytes, 64 hex characters
OAUTH_STATE_COOKIE_NAME = "oauth_state"
OAUTH_STATE_COOKIE_MAX_AGE = 600  # seconds


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class AuthConfig:
    """Configuration for the auth service"""

    # Token Configuration
    jwt_secret: str = field(default_factory=lambda: os.getenv("JWT_SECRET", ""))
    jwt_expiry: str = field(
        default_factory=lambda: os.getenv("JWT_EXPIRY") or DEFAULT_JWT_EXPIRY
    )

    # Rate Limiting
    rate_limit_max_requests: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "100"))
    )
    rate_limit_window_ms: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_WINDOW_MS", "60000"))
    )
    rate_limit_max_clients: int = 10000
    trust_proxy_headers: bool = field(default_factory=lambda: _env_flag("AUTH_TRUST_PROXY"))

    # OAuth Providers
    google_client_id: str = field(default_factory=lambda: os.getenv("GOOGLE_CLIENT_ID", ""))
    google_client_secret: str = field(
        default_factory=lambda: os.getenv("GOOGLE_CLIENT_SECRET", "")
    )
    google_redirect_uri: str = field(
        default_factory=lambda: os.getenv("GOOGLE_REDIRECT_URI", "")
    )
    github_client_id: str = field(default_factory=lambda: os.getenv("GITHUB_CLIENT_ID", ""))
    github_client_secret: str = field(
        default_factory=lambda: os.getenv("GITHUB_CLIENT_SECRET", "")
    )
    github_redirect_uri: str = field(
        default_factory=lambda: os.getenv("GITHUB_REDIRECT_URI", "")
    )

    # Cookies
    cookie_secure: bool = field(default_factory=lambda: _env_flag("AUTH_COOKIE_SECURE"))

    # HTTP Server
    http_host: str = field(default_factory=lambda: os.getenv("AUTH_HTTP_HOST", "127.0.0.1"))
    http_port: int = field(default_factory=lambda: int(os.getenv("AUTH_HTTP_PORT", "3001")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING").upper())

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.rate_limit_window_ms / 1000

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary (secrets excluded)"""
        return {
            "jwt_secret_configured": bool(self.jwt_secret),
            "jwt_expiry": self.jwt_expiry,
            "rate_limit_max_requests": self.rate_limit_max_requests,
            "rate_limit_window_ms": self.rate_limit_window_ms,
            "trust_proxy_headers": self.trust_proxy_headers,
            "google_enabled": bool(self.google_client_id),
            "github_enabled": bool(self.github_client_id),
            "cookie_secure": self.cookie_secure,
            "http_host": self.http_host,
            "http_port": self.http_port,
            "log_level": self.log_level,
        }
