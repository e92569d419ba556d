"""
Rate limiting package for the chat gateway.

Holds the in-memory fixed-window limiter and the helper that resolves a
request's client identity behind a reverse proxy.
"""

from .fixed_window import FixedWindowRateLimiter, RateLimitMiddleware, RATE_LIMIT_MESSAGE

__all__ = [
    "FixedWindowRateLimiter",
    "RateLimitMiddleware",
    "RATE_LIMIT_MESSAGE",
]
