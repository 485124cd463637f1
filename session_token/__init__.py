"""
Signed session tokens: HS256 compact tokens with expiration (standard library codec).
"""
from . import config, jwt
from .codec import TokenCodec
from .errors import (
    ConfigurationError,
    EncodingError,
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    SignatureMismatchError,
    TokenError,
)
from .jwt import derive_key, issue, verify

__all__ = [
    "jwt",
    "config",
    "TokenCodec",
    "derive_key",
    "issue",
    "verify",
    "TokenError",
    "ConfigurationError",
    "EncodingError",
    "InvalidTokenError",
    "MalformedTokenError",
    "SignatureMismatchError",
    "ExpiredTokenError",
]
