"""
API key authentication for the chat gateway.
"""

import hmac
from typing import Any, Dict, Optional

from fastapi import Request

from shared.logging import get_logger
from shared.errors import AuthenticationError, AuthorizationError


API_KEY_HEADER = "X-API-Key"
API_KEY_QUERY_PARAM = "api_key"


class AuthMiddleware:
    """Checks the shared API key carried by the chat bot.

    The key may come as ``?api_key=`` or the ``X-API-Key`` header. A missing
    key is a 401, a wrong key a 403. When no key is configured every
    presented key is rejected.
    """

    def __init__(self, api_key: Optional[str]):
        self._expected = api_key.encode("utf-8") if api_key else None
        self.logger = get_logger("chatbot.auth_middleware")
        if self._expected is None:
            self.logger.warning("API_KEY is not configured; authenticated routes will reject all callers")

    def _extract_key(self, request: Request) -> Optional[str]:
        return request.query_params.get(API_KEY_QUERY_PARAM) or request.headers.get(API_KEY_HEADER)

    def _matches(self, provided: str) -> bool:
        if self._expected is None:
            return False
        # compare_digest keeps the comparison constant-time for equal lengths
        return hmac.compare_digest(provided.encode("utf-8"), self._expected)

    async def authenticate_request(self, request: Request) -> Dict[str, Any]:
        """FastAPI dependency: validate the API key or raise."""
        api_key = self._extract_key(request)
        if not api_key:
            self.logger.info("Request rejected without API key", path=request.url.path)
            raise AuthenticationError(
                "API key required. Provide via ?api_key=YOUR_KEY or X-API-Key header"
            )

        if not self._matches(api_key):
            self.logger.warning("Request rejected with invalid API key", path=request.url.path)
            raise AuthorizationError("Invalid API key")

        caller = {"auth_method": "api_key", "api_key": api_key[:4] + "..."}
        request.state.caller = caller
        return caller
