"""Validation utilities for subscriber input."""

import re
from typing import Any

# Loose shape check: something@something.something, no whitespace in each part.
EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

INVALID_INPUT = "Invalid input"
INVALID_FORMAT = "Invalid format"


class InvalidSubscriptionError(ValueError):
    """Raised when a submitted email is absent, not text, or malformed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def normalize_email(value: str) -> str:
    return value.strip().lower()


def validate_email(value: Any) -> str:
    """
    Return the normalized form of ``value``.
    Raises InvalidSubscriptionError if it is missing, not a string, or not email-shaped.
    """
    if not value or not isinstance(value, str):
        raise InvalidSubscriptionError(INVALID_INPUT)

    normalized = normalize_email(value)
    if not EMAIL_PATTERN.search(normalized):
        raise InvalidSubscriptionError(INVALID_FORMAT)
    return normalized
