"""
Fixed-window per-client rate limiter for the chat gateway.
"""

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from fastapi import Request

from shared.logging import get_logger, set_client_context


DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 15 * 60
RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class FixedWindowRateLimiter:
    """In-process request counter per client and time window.

    Counts live in memory only; each worker process enforces its own budget.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: Dict[str, Tuple[float, int]] = {}  # client_id -> (window_start, count)
        self._lock = threading.Lock()
        self.logger = get_logger("chatbot.rate_limiter")

    def check_rate_limit(self, client_id: str) -> Dict[str, Any]:
        """Count one request for ``client_id`` and report whether it is allowed."""
        now = self._clock()
        with self._lock:
            window_start, count = self._windows.get(client_id, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            count += 1
            self._windows[client_id] = (window_start, count)
            self._prune(now)

        reset_in = max(0, int(round(window_start + self.window_seconds - now)))
        allowed = count <= self.max_requests
        if not allowed:
            self.logger.warning(
                "Rate limit exceeded",
                client_id=client_id,
                current_count=count,
                limit=self.max_requests
            )

        return {
            "allowed": allowed,
            "current_count": count,
            "limit": self.max_requests,
            "remaining": max(0, self.max_requests - count),
            "reset_in_seconds": reset_in,
        }

    def get_rate_limit_status(self, client_id: str) -> Dict[str, Any]:
        """Current counters for ``client_id`` without consuming a request."""
        now = self._clock()
        with self._lock:
            window_start, count = self._windows.get(client_id, (now, 0))
        if now - window_start >= self.window_seconds:
            window_start, count = now, 0
        return {
            "current_count": count,
            "limit": self.max_requests,
            "remaining": max(0, self.max_requests - count),
            "reset_in_seconds": max(0, int(round(window_start + self.window_seconds - now))),
        }

    def reset_rate_limit(self, client_id: str) -> bool:
        with self._lock:
            removed = self._windows.pop(client_id, None) is not None
        if removed:
            self.logger.info("Rate limit reset", client_id=client_id)
        return removed

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        if len(self._windows) < 1024:
            return
        expired = [
            client_id for client_id, (start, _count) in self._windows.items()
            if now - start >= self.window_seconds
        ]
        for client_id in expired:
            del self._windows[client_id]


class RateLimitMiddleware:
    """Resolves the client identity of a request and applies the limiter."""

    def __init__(self, rate_limiter: FixedWindowRateLimiter, trusted_proxy_hops: int = 1):
        self.rate_limiter = rate_limiter
        self.trusted_proxy_hops = trusted_proxy_hops
        self.logger = get_logger("chatbot.rate_limit_middleware")

    def check_request(self, request: Request) -> Dict[str, Any]:
        """Check rate limit for request."""
        client_id = self.get_client_id(request)
        set_client_context(client_id)
        return self.rate_limiter.check_rate_limit(client_id)

    def get_client_id(self, request: Request) -> str:
        """Extract client ID from request.

        Behind ``trusted_proxy_hops`` reverse proxies the client is the entry
        that many positions from the right of ``X-Forwarded-For``.
        """
        forwarded_for = request.headers.get('X-Forwarded-For')
        if self.trusted_proxy_hops > 0 and isinstance(forwarded_for, str) and forwarded_for:
            hops = [hop.strip() for hop in forwarded_for.split(',') if hop.strip()]
            if hops:
                return hops[max(0, len(hops) - self.trusted_proxy_hops)]

        real_ip = request.headers.get('X-Real-IP')
        if self.trusted_proxy_hops > 0 and isinstance(real_ip, str) and real_ip:
            return real_ip

        return request.client.host if request.client else 'unknown'

    @staticmethod
    def rate_limit_headers(result: Dict[str, Any]) -> Dict[str, str]:
        """IETF draft ``RateLimit-*`` headers for a limiter result."""
        headers = {
            "RateLimit-Limit": str(result["limit"]),
            "RateLimit-Remaining": str(result.get("remaining", 0)),
            "RateLimit-Reset": str(result["reset_in_seconds"]),
        }
        if not result.get("allowed", True):
            headers["Retry-After"] = str(result["reset_in_seconds"])
        return headers
