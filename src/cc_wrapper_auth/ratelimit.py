"""
Fixed-window rate limiting for the authentication endpoints.

Each client address gets a counter that lives for one window. Windows are
held in a TTLCache whose entries are mutated in place, so the expiry set on
the first request of a window is never pushed back by later requests.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from cachetools import TTLCache  # type: ignore[import-untyped]

from .errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Counts requests per key inside fixed windows.

    Args:
        max_requests: Requests allowed per key per window
        window_seconds: Window length
        max_keys: Maximum tracked keys; least recently used are dropped first
        timer: Monotonic clock, injectable for tests
    """

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 60.0,
        max_keys: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._timer = timer
        self._windows: TTLCache = TTLCache(maxsize=max_keys, ttl=window_seconds, timer=timer)

    def hit(self, key: str) -> None:
        """Record one request for ``key``.

        Raises:
            RateLimitExceededError: If the key is over its limit for the current window
        """
        now = self._timer()
        window = self._windows.get(key)

        if window is None:
            self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
            return

        window.count += 1
        if window.count > self.max_requests:
            retry_after = max(1, math.ceil(window.reset_at - now))
            logger.warning(f"Rate limit exceeded for client: {key}")
            raise RateLimitExceededError(retry_after)

    def remaining(self, key: str) -> int:
        window = self._windows.get(key)
        used = window.count if window else 0
        return max(0, self.max_requests - used)

    def sweep(self) -> int:
        """Drop every expired window; return how many were removed."""
        expired = self._windows.expire()
        return len(expired)


def client_address(request: Any, trust_proxy_headers: bool = False) -> str:
    """Best-effort client address for rate limiting.

    X-Forwarded-For and X-Real-IP are client-controlled unless a reverse
    proxy overwrites them, so they are only read with ``trust_proxy_headers``
    (AUTH_TRUST_PROXY). Then the first X-Forwarded-For hop wins, then
    X-Real-IP. Otherwise only the socket peer is used.
    """
    if trust_proxy_headers:
        headers = getattr(request, "headers", None) or {}

        forwarded = headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

        real_ip = headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    client = getattr(request, "client", None)
    if client and getattr(client, "host", None):
        return str(client.host)

    return "unknown"
