"""
Transport layer for the CC Wrapper auth service.

Provides the Starlette HTTP API (register, login, logout, profile, OAuth).
"""

from .http_api import AuthHTTPTransport

__all__ = ["AuthHTTPTransport"]
