"""
Validation of free-text ``{name}`` path parameters.
"""

import re

from shared.errors import ValidationError


MAX_NAME_LENGTH = 100
_ALLOWED_NAME = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


def validate_name(name: str) -> str:
    """FastAPI dependency: accept letters, digits, whitespace, hyphens and underscores."""
    if not _ALLOWED_NAME.match(name):
        raise ValidationError(
            "Invalid input. Only letters, numbers, spaces, hyphens, and underscores allowed.",
            details={"field": "name"},
        )
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Input too long. Maximum {MAX_NAME_LENGTH} characters.",
            details={"field": "name", "max_length": MAX_NAME_LENGTH},
        )
    return name
