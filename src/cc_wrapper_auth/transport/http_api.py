"""
HTTP transport for the CC Wrapper auth service.

Thin Starlette routes over AuthService and OAuthService: each handler
validates its input, calls one service method and maps errors through
create_error_response().
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Optional

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response
from starlette.routing import Route

from ..auth.middleware import AuthMiddleware, RateLimitMiddleware
from ..auth.oauth import OAuthService
from ..auth.service import AuthService
from ..auth.validation import RequestValidator
from ..config import OAUTH_STATE_COOKIE_MAX_AGE, OAUTH_STATE_COOKIE_NAME
from ..errors import (
    OAuthStateError,
    UnsupportedProviderError,
    ValidationError,
    create_error_response,
)
from ..ratelimit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

API_PREFIX = "/api/auth"
PROTECTED_PATHS = (f"{API_PREFIX}/logout", f"{API_PREFIX}/me", f"{API_PREFIX}/profile")


class AuthHTTPTransport:
    """
    Starlette application factory for the auth API.

    Args:
        auth_service: Account and session operations
        oauth_service: Social sign-in; OAuth routes answer 400 for unconfigured providers
        rate_limiter: Applied to every /api/auth route
        cookie_secure: Mark the OAuth state cookie Secure (HTTPS deployments)
        trust_proxy_headers: Key rate limits on X-Forwarded-For / X-Real-IP (behind a proxy only)
    """

    def __init__(
        self,
        auth_service: AuthService,
        oauth_service: OAuthService,
        rate_limiter: FixedWindowRateLimiter,
        cookie_secure: bool = False,
        trust_proxy_headers: bool = False,
    ):
        self.auth_service = auth_service
        self.oauth_service = oauth_service
        self.rate_limiter = rate_limiter
        self.cookie_secure = cookie_secure
        self.trust_proxy_headers = trust_proxy_headers

    def create_app(self) -> Starlette:
        """Create Starlette application with auth routes and middleware."""
        routes = [
            Route(f"{API_PREFIX}/register", self.handle_register, methods=["POST"]),
            Route(f"{API_PREFIX}/login", self.handle_login, methods=["POST"]),
            Route(f"{API_PREFIX}/logout", self.handle_logout, methods=["POST"]),
            Route(f"{API_PREFIX}/me", self.handle_me, methods=["GET"]),
            Route(f"{API_PREFIX}/profile", self.handle_update_profile, methods=["PUT"]),
            Route(f"{API_PREFIX}/oauth/{{provider}}", self.handle_oauth_start, methods=["GET"]),
            Route(
                f"{API_PREFIX}/oauth/{{provider}}/callback",
                self.handle_oauth_callback,
                methods=["GET"],
            ),
            Route("/health", self.handle_health, methods=["GET"]),
        ]

        # Rate limiting runs before authentication
        middleware = [
            Middleware(
                RateLimitMiddleware,
                limiter=self.rate_limiter,
                path_prefix=API_PREFIX,
                trust_proxy_headers=self.trust_proxy_headers,
            ),
            Middleware(
                AuthMiddleware, auth_service=self.auth_service, protected_paths=PROTECTED_PATHS
            ),
        ]

        return Starlette(routes=routes, middleware=middleware, lifespan=self.lifespan)

    @asynccontextmanager
    async def lifespan(self, app: Starlette) -> AsyncIterator[None]:
        logger.info(f"Auth HTTP transport ready: providers={sorted(self.oauth_service.providers)}")
        yield
        purged = await self.auth_service.purge_expired_sessions()
        logger.info(f"Auth HTTP transport stopped: purged {purged} expired sessions")

    @staticmethod
    def _error(error: Exception, context: str) -> JSONResponse:
        status, body = create_error_response(error, context)
        return JSONResponse(body, status_code=status)

    @staticmethod
    async def _read_json(request: Request) -> Any:
        try:
            return await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Request body must be valid JSON") from None

    @staticmethod
    def _device_info(request: Request) -> Optional[dict[str, Any]]:
        user_agent = request.headers.get("user-agent")
        return {"userAgent": user_agent} if user_agent else None

    async def handle_health(self, request: Request) -> JSONResponse:
        """Health check endpoint for load balancers."""
        return JSONResponse({"status": "healthy", "service": "cc-wrapper-auth"})

    async def handle_register(self, request: Request) -> JSONResponse:
        try:
            data = RequestValidator.validate_registration(await self._read_json(request))
            result = await self.auth_service.register(
                data["email"], data["password"], data["name"], self._device_info(request)
            )
            return JSONResponse(result.to_dict(), status_code=201)
        except Exception as e:
            return self._error(e, "register")

    async def handle_login(self, request: Request) -> JSONResponse:
        try:
            data = RequestValidator.validate_login(await self._read_json(request))
            result = await self.auth_service.login(
                data["email"], data["password"], self._device_info(request)
            )
            return JSONResponse(result.to_dict())
        except Exception as e:
            return self._error(e, "login")

    async def handle_logout(self, request: Request) -> JSONResponse:
        try:
            await self.auth_service.logout(request.state.access_token)
            return JSONResponse({"success": True})
        except Exception as e:
            return self._error(e, "logout")

    async def handle_me(self, request: Request) -> JSONResponse:
        try:
            user = await self.auth_service.get_user_by_id(request.state.user_context.user_id)
        except Exception as e:
            return self._error(e, "me")

        if user is None:
            return JSONResponse({"error": "User not found"}, status_code=404)
        return JSONResponse({"user": user.to_dict()})

    async def handle_update_profile(self, request: Request) -> JSONResponse:
        try:
            update = RequestValidator.validate_profile_update(await self._read_json(request))
            profile = await self.auth_service.update_profile(
                request.state.user_context.user_id, update
            )
            return JSONResponse({"profile": profile.to_dict()})
        except Exception as e:
            return self._error(e, "update_profile")

    async def handle_oauth_start(self, request: Request) -> Response:
        """Redirect to the provider and remember the state in a cookie."""
        provider = request.path_params["provider"]
        try:
            authorization = self.oauth_service.get_authorization_url(provider)
        except UnsupportedProviderError as e:
            return self._error(e, "oauth_start")

        response = RedirectResponse(authorization.url, status_code=302)
        response.set_cookie(
            OAUTH_STATE_COOKIE_NAME,
            authorization.state,
            max_age=OAUTH_STATE_COOKIE_MAX_AGE,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.cookie_secure,
        )
        return response

    async def handle_oauth_callback(self, request: Request) -> JSONResponse:
        """Check the state against the cookie, then sign the user in.

        The state cookie is cleared on success. Nothing marks the state value
        as spent server-side.
        """
        provider = request.path_params["provider"]
        try:
            self.oauth_service.get_provider_config(provider)
            query = RequestValidator.validate_oauth_callback(request.query_params)

            expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)
            if not expected_state:
                raise OAuthStateError("Missing state cookie")
            if not self.oauth_service.validate_state(query["state"], expected_state):
                logger.warning(f"OAuth state mismatch for provider {provider}")
                raise OAuthStateError()

            result = await self.oauth_service.handle_callback(provider, query["code"])
        except Exception as e:
            return self._error(e, "oauth_callback")

        response = JSONResponse(result.to_dict())
        response.delete_cookie(
            OAUTH_STATE_COOKIE_NAME,
            path="/",
            httponly=True,
            samesite="lax",
            secure=self.cookie_secure,
        )
        return response
