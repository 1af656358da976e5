"""
CC Wrapper Auth
Token-based authentication: Argon2id passwords, HS256 access tokens,
server-side sessions and OAuth sign-in, served over Starlette.

Logging goes to stderr; the level is taken from LOG_LEVEL when main() runs.
"""

import logging
import sys

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

__all__ = ["create_app", "main"]


def create_app(config=None, store=None, exchange=None):
    """Wire the services and return the Starlette application.

    Args:
        config: AuthConfig; read from the environment when omitted
        store: UserStore; an InMemoryUserStore when omitted
        exchange: ProviderExchange for OAuth callbacks (optional)

    Raises:
        ConfigurationError: If JWT_SECRET or JWT_EXPIRY is invalid
    """
    from .auth import AuthService, InMemoryUserStore, OAuthService, load_providers
    from .config import AuthConfig
    from .ratelimit import FixedWindowRateLimiter
    from .transport import AuthHTTPTransport

    config = config or AuthConfig()
    store = store if store is not None else InMemoryUserStore()

    auth_service = AuthService(config, store)
    oauth_service = OAuthService(auth_service, load_providers(config), exchange)
    limiter = FixedWindowRateLimiter(
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
        max_keys=config.rate_limit_max_clients,
    )

    transport = AuthHTTPTransport(
        auth_service=auth_service,
        oauth_service=oauth_service,
        rate_limiter=limiter,
        cookie_secure=config.cookie_secure,
        trust_proxy_headers=config.trust_proxy_headers,
    )
    return transport.create_app()


def main() -> None:
    """Run the auth API with uvicorn."""
    import uvicorn

    from .config import AuthConfig
    from .errors import ConfigurationError

    config = AuthConfig()
    logging.getLogger().setLevel(config.log_level)

    try:
        app = create_app(config)
    except ConfigurationError as e:
        logger.error(f"Refusing to start: {e.message}")
        sys.exit(1)

    logger.info(f"Starting CC Wrapper auth API on {config.http_host}:{config.http_port}")
    try:
        server = uvicorn.Server(
            uvicorn.Config(
                app=app,
                host=config.http_host,
                port=config.http_port,
                log_level="warning",
                access_log=False,
            )
        )
        server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
