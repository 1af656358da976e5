"""
Duration strings ("30s", "15m", "1h", "7d") to milliseconds.
"""

import re

from ..errors import ExpiryFormatError

# [0-9] rather than \d so non-ASCII digits are rejected
_EXPIRY_PATTERN = re.compile(r"([0-9]+)([smhd])")

TIME_MULTIPLIERS = {
    "s": 1000,
    "m": 60 * 1000,
    "h": 60 * 60 * 1000,
    "d": 24 * 60 * 60 * 1000,
}


def parse_expiry(expiry: str) -> int:
    """
    Parse an expiry string into milliseconds.

    Args:
        expiry: One or more digits followed by exactly one unit letter

    Returns:
        Duration in milliseconds

    Raises:
        ExpiryFormatError: If the string does not match the grammar
    """
    match = _EXPIRY_PATTERN.fullmatch(expiry) if isinstance(expiry, str) else None
    if not match:
        raise ExpiryFormatError(f"Invalid expiry format: {expiry!r}")

    value, unit = match.groups()
    return int(value) * TIME_MULTIPLIERS[unit]
