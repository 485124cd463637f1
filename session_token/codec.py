"""
TokenCodec: issue/verify bound to one secret and TTL.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from . import jwt as jwt_lib

if TYPE_CHECKING:
    from .config import TokenProfile


class TokenCodec:
    """Issue and verify tokens for a single token profile (e.g. admin or user)."""

    __slots__ = ("_secret", "ttl_millis")

    def __init__(self, secret: str, ttl_millis: int) -> None:
        # Fail fast on an unusable secret; the derived key is not kept
        jwt_lib.derive_key(secret)
        self._secret = secret
        self.ttl_millis = ttl_millis

    @classmethod
    def from_profile(cls, profile: "TokenProfile") -> "TokenCodec":
        return cls(profile.secret, profile.ttl_millis)

    def issue(self, claims: Optional[Mapping[str, Any]] = None) -> str:
        return jwt_lib.issue(self._secret, self.ttl_millis, claims)

    def verify(self, token: str, leeway_seconds: float = 0) -> Dict[str, Any]:
        return jwt_lib.verify(self._secret, token, leeway_seconds=leeway_seconds)

    def __repr__(self) -> str:
        return f"TokenCodec(secret=***, ttl_millis={self.ttl_millis})"
