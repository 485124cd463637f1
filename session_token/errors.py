"""
Token errors.
Every failure of issue/verify is raised synchronously as a TokenError subclass.
"""

from __future__ import annotations

from typing import Optional


class TokenError(Exception):
    """Base class for all session token errors."""


class ConfigurationError(TokenError):
    """Secret, TTL or settings cannot be used."""


class EncodingError(TokenError):
    """Claims cannot be serialized into a token payload."""


class InvalidTokenError(TokenError):
    """Token was rejected by verify."""


class MalformedTokenError(InvalidTokenError):
    """Token structure, header or payload is not valid."""


class SignatureMismatchError(InvalidTokenError):
    """Token signature does not match the derived key."""


class ExpiredTokenError(InvalidTokenError):
    def __init__(self, message: str, expired_at: Optional[float] = None) -> None:
        super().__init__(message)
        self.expired_at = expired_at
