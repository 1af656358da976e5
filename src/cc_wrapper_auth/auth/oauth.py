"""
OAuth social sign-in (Google, GitHub): authorization URLs and CSRF state.

The state token travels in a short-lived cookie set when the flow starts and
is compared with the ``state`` query parameter on the callback. OAuthService
keeps nothing between calls; the cookie is the only place the state lives.

Exchanging the authorization code for the provider's user info is an
external call, injected as a ProviderExchange.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Protocol
from urllib.parse import urlencode

from ..config import OAUTH_STATE_TOKEN_SIZE, AuthConfig
from ..crypto import random_token
from ..errors import OAuthError, UnsupportedProviderError
from .models import AuthResult

if TYPE_CHECKING:
    from .service import AuthService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthProviderConfig:
    name: str
    client_id: str
    client_secret: str
    redirect_uri: str
    authorization_url: str
    token_url: str
    user_info_url: str
    scope: str


@dataclass(frozen=True)
class AuthorizationRequest:
    """Provider redirect URL and the state token embedded in it."""

    url: str
    state: str


@dataclass(frozen=True)
class OAuthUserInfo:
    id: str
    email: str
    name: Optional[str] = None


PROVIDER_ENDPOINTS: dict[str, dict[str, str]] = {
    "google": {
        "authorization_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_url": "https://oauth2.googleapis.com/token",
        "user_info_url": "https://www.googleapis.com/oauth2/v2/userinfo",
        "scope": "openid email profile",
    },
    "github": {
        "authorization_url": "https://github.com/login/oauth/authorize",
        "token_url": "https://github.com/login/oauth/access_token",
        "user_info_url": "https://api.github.com/user",
        "scope": "user:email",
    },
}


class ProviderExchange(Protocol):
    """Exchanges an authorization code for the provider's raw user-info payload."""

    async def fetch_user_info(self, provider: OAuthProviderConfig, code: str) -> dict[str, Any]:
        ...


def load_providers(config: AuthConfig) -> dict[str, OAuthProviderConfig]:
    """Build provider configs for every provider whose credentials are set.

    Args:
        config: Service configuration

    Returns:
        Mapping of provider name to configuration; unconfigured providers are omitted
    """
    credentials = {
        "google": (
            config.google_client_id,
            config.google_client_secret,
            config.google_redirect_uri,
        ),
        "github": (
            config.github_client_id,
            config.github_client_secret,
            config.github_redirect_uri,
        ),
    }

    providers: dict[str, OAuthProviderConfig] = {}
    for name, (client_id, client_secret, redirect_uri) in credentials.items():
        if not (client_id and client_secret and redirect_uri):
            logger.info(f"OAuth provider '{name}' not configured, skipping")
            continue
        providers[name] = OAuthProviderConfig(
            name=name,
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            **PROVIDER_ENDPOINTS[name],
        )
    return providers


def parse_user_info(provider: str, data: Any) -> OAuthUserInfo:
    """Normalize a provider's user-info payload.

    GitHub returns a numeric id; it is converted to a string so provider ids
    compare consistently.

    Raises:
        UnsupportedProviderError: For an unknown provider
        OAuthError: If the payload has no id or email
    """
    if provider not in PROVIDER_ENDPOINTS:
        raise UnsupportedProviderError()
    if not isinstance(data, dict):
        raise OAuthError("Failed to fetch user info")

    provider_id = data.get("id")
    email = data.get("email")
    if provider_id is None or provider_id == "" or not email:
        raise OAuthError(f"{provider} did not return an id and email")

    name = data.get("name")
    return OAuthUserInfo(id=str(provider_id), email=email, name=name or None)


class OAuthService:
    """Social authentication flows.

    Args:
        auth_service: Issues tokens once the provider identity is known
        providers: Configured providers, usually from load_providers()
        exchange: Code-for-user-info collaborator; callbacks fail without one
    """

    def __init__(
        self,
        auth_service: AuthService,
        providers: dict[str, OAuthProviderConfig],
        exchange: Optional[ProviderExchange] = None,
    ) -> None:
        self.auth_service = auth_service
        self.providers = providers
        self.exchange = exchange

        logger.info(f"OAuthService initialized: providers={sorted(providers)}")

    def get_provider_config(self, provider: str) -> OAuthProviderConfig:
        config = self.providers.get(provider)
        if config is None:
            raise UnsupportedProviderError()
        return config

    def get_authorization_url(self, provider: str) -> AuthorizationRequest:
        """Generate a fresh state token and the provider URL that embeds it.

        Raises:
            UnsupportedProviderError: If the provider is unknown or not configured
        """
        config = self.get_provider_config(provider)
        state = random_token(OAUTH_STATE_TOKEN_SIZE)

        params = urlencode(
            {
                "client_id": config.client_id,
                "redirect_uri": config.redirect_uri,
                "response_type": "code",
                "state": state,
                "scope": config.scope,
            }
        )
        return AuthorizationRequest(url=f"{config.authorization_url}?{params}", state=state)

    @staticmethod
    def validate_state(received: Optional[str], expected: Optional[str]) -> bool:
        """True only if the callback state exactly matches the cookie value."""
        if not received or not expected:
            return False
        return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))

    async def handle_callback(self, provider: str, code: str) -> AuthResult:
        """Resolve the provider identity for ``code`` and sign the user in.

        The state must already have been validated by the caller.

        Raises:
            UnsupportedProviderError: If the provider is unknown or not configured
            OAuthError: If no exchange is configured or the payload is unusable
        """
        config = self.get_provider_config(provider)
        if self.exchange is None:
            raise OAuthError("OAuth code exchange is not configured")

        raw = await self.exchange.fetch_user_info(config, code)
        info = parse_user_info(provider, raw)

        return await self.auth_service.create_oauth_user(info.email, provider, info.id, info.name)
