"""
Shared fixtures for the auth test suite.
"""

import pytest

from cc_wrapper_auth.auth import AuthService, InMemoryUserStore
from cc_wrapper_auth.config import AuthConfig

TEST_SECRET = "test-secret-key-that-is-at-least-32-chars"
START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced wall clock (seconds since the epoch)."""

    def __init__(self, start: float = START_TIME):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_config(**overrides) -> AuthConfig:
    """AuthConfig that ignores the process environment."""
    values = {
        "jwt_secret": TEST_SECRET,
        "jwt_expiry": "15m",
        "rate_limit_max_requests": 100,
        "rate_limit_window_ms": 60000,
        "google_client_id": "",
        "google_client_secret": "",
        "google_redirect_uri": "",
        "github_client_id": "",
        "github_client_secret": "",
        "github_redirect_uri": "",
        "cookie_secure": False,
        "trust_proxy_headers": False,
    }
    values.update(overrides)
    return AuthConfig(**values)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def store():
    return InMemoryUserStore()


@pytest.fixture
def auth_service(config, store, clock):
    return AuthService(config, store, clock=clock)
