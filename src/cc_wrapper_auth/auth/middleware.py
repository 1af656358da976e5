"""
Authentication and rate-limit middleware for the Starlette transport.

Key Features:
- Bearer-token verification on protected paths
- Request state injection (user_context, access_token) for route handlers
- 401 responses with WWW-Authenticate headers
- Per-client fixed-window rate limiting with 429 + Retry-After
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..errors import INVALID_TOKEN_MESSAGE, RateLimitExceededError
from ..ratelimit import client_address
from ..security_utils import TokenSanitizer

if TYPE_CHECKING:
    from starlette.requests import Request

    from ..ratelimit import FixedWindowRateLimiter
    from .service import AuthService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization")
    if not auth_header or not auth_header.startswith(BEARER_PREFIX):
        return None
    return auth_header[len(BEARER_PREFIX):] or None


class AuthMiddleware(BaseHTTPMiddleware):
    """Bearer-token authentication for protected paths.

    Architecture:
    - Requests outside ``protected_paths`` pass through untouched
    - Protected requests need ``Authorization: Bearer <jwt>``
    - Valid tokens put user_context and access_token on request.state
    - Missing or invalid tokens get a 401 that never says which check failed

    Attributes:
        auth_service: Verifies access tokens
        protected_paths: Exact paths that require authentication
    """

    def __init__(self, app, auth_service: AuthService, protected_paths: Iterable[str]) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self.auth_service = auth_service
        self.protected_paths = frozenset(protected_paths)

        logger.info(f"AuthMiddleware initialized: protected_paths={sorted(self.protected_paths)}")

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        if request.url.path not in self.protected_paths:
            return await call_next(request)

        token = extract_bearer_token(request)
        user_context = self.auth_service.verify_access_token(token) if token else None

        if user_context is None:
            logger.warning(
                f"Unauthorized request: path={request.url.path}, "
                f"client={request.client.host if request.client else 'unknown'}"
            )
            logger.debug(
                f"Rejected request headers: {TokenSanitizer.sanitize_dict(dict(request.headers))}"
            )
            return JSONResponse(
                {"error": INVALID_TOKEN_MESSAGE},
                status_code=401,
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user_context = user_context
        request.state.access_token = token

        logger.debug(f"Authenticated request: user={user_context.user_id}, path={request.url.path}")
        return await call_next(request)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Applies a FixedWindowRateLimiter to every path under ``path_prefix``.

    Allowed responses carry X-RateLimit-Limit and X-RateLimit-Remaining;
    rejected ones get a 429 with Retry-After.
    """

    def __init__(  # type: ignore[no-untyped-def]
        self,
        app,
        limiter: FixedWindowRateLimiter,
        path_prefix: str = "/api/auth",
        trust_proxy_headers: bool = False,
    ) -> None:
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix
        self.trust_proxy_headers = trust_proxy_headers

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = client_address(request, self.trust_proxy_headers)
        try:
            self.limiter.hit(key)
        except RateLimitExceededError as e:
            return JSONResponse(
                {"error": e.message, "retryAfter": e.retry_after},
                status_code=429,
                headers={"Retry-After": str(e.retry_after)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(self.limiter.remaining(key))
        return response
