"""
Domain utilities for the chat gateway.

Request-processing helpers that sit between transport and the core:
API key authentication and path parameter validation.
"""

from .auth_middleware import AuthMiddleware
from .validation import validate_name, MAX_NAME_LENGTH

__all__ = [
    "AuthMiddleware",
    "validate_name",
    "MAX_NAME_LENGTH",
]
