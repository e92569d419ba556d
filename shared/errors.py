"""
Shared error handling for the Arc Raiders chat gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ChatGatewayException(Exception):
    """Base exception for chat gateway services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(ChatGatewayException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class AuthorizationError(ChatGatewayException):
    """Authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class ValidationError(ChatGatewayException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class RateLimitError(ChatGatewayException):
    """Rate limiting errors."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded", details: Optional[Dict[str, Any]] = None):
        super().__init__("RATE_LIMIT_ERROR", message, details)


class UpstreamError(ChatGatewayException):
    """Failure talking to the upstream game-data API."""

    status_code = 502

    def __init__(self, service: str, message: str = "Upstream service error", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class UpstreamTimeout(UpstreamError):
    """Upstream call exceeded the configured time bound."""

    status_code = 504

    def __init__(self, service: str, timeout_ms: int, details: Optional[Dict[str, Any]] = None):
        self.timeout_ms = timeout_ms
        super().__init__(service, f"timed out after {timeout_ms}ms", details)
        self.code = "UPSTREAM_TIMEOUT"


class UpstreamHTTPError(UpstreamError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, service: str, status: int, details: Optional[Dict[str, Any]] = None):
        self.status = status
        super().__init__(service, f"returned {status}", details)
        self.code = "UPSTREAM_HTTP_ERROR"


class UpstreamMalformed(UpstreamError):
    """Upstream body could not be decoded as JSON."""

    def __init__(self, service: str, message: str = "malformed response body", details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details)
        self.code = "UPSTREAM_MALFORMED"


class UpstreamUnavailable(UpstreamError):
    """Upstream could not be reached at the transport level."""

    def __init__(self, service: str, message: str = "unreachable", details: Optional[Dict[str, Any]] = None):
        super().__init__(service, message, details)
        self.code = "UPSTREAM_UNAVAILABLE"
