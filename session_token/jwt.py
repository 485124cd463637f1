"""
Compact HS256 session tokens using Python standard library only.
Base64url without padding, HMAC-SHA256 signature, exp validation.

Keys are derived from a caller-supplied secret of any length (see derive_key).
Nothing is cached and the secret is always an explicit argument.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
import math
import re
import time
from collections.abc import Mapping
from typing import Any, Dict, Optional

from .errors import (
    ConfigurationError,
    EncodingError,
    ExpiredTokenError,
    MalformedTokenError,
    SignatureMismatchError,
)

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
KEY_LENGTH = 32
HEADER: Dict[str, Any] = {"alg": ALGORITHM}

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]+")


def _b64url_encode(data: bytes) -> str:
    """Base64url encode without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    """Base64url decode with automatic padding restoration."""
    s = data.encode("ascii")
    padding = b"=" * (-len(s) % 4)
    return base64.urlsafe_b64decode(s + padding)


def _json_segment(obj: Dict[str, Any]) -> str:
    raw = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return _b64url_encode(raw.encode("utf-8"))


def _sign(key: bytes, header_b64: str, payload_b64: str) -> str:
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    return _b64url_encode(hmac.new(key, signing_input, hashlib.sha256).digest())


def _decode_object(segment: str, what: str) -> Dict[str, Any]:
    try:
        obj = json.loads(_b64url_decode(segment).decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        raise MalformedTokenError(f"Token {what} is not valid JSON") from e
    if not isinstance(obj, dict):
        raise MalformedTokenError(f"Token {what} must be a JSON object")
    return obj


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int beyond float range
        return False


def now_ms() -> int:
    """Return current UNIX timestamp (milliseconds)."""
    return int(time.time() * 1000)


def derive_key(secret: str) -> bytes:
    """
    Derive the 32-byte HMAC key from a secret of any length.

    Secrets of 32 UTF-8 bytes or more are truncated to their first 32 bytes.
    Shorter secrets are repeated until at least 32 characters long and the
    first 32 characters are used. This is a compatibility shim, not a KDF:
    changing it invalidates every token issued so far.
    """
    if not isinstance(secret, str):
        raise ConfigurationError(f"Secret must be a string, got {type(secret).__name__}")
    if not secret:
        raise ConfigurationError("Secret must not be empty")

    raw = secret.encode("utf-8")
    if len(raw) >= KEY_LENGTH:
        return raw[:KEY_LENGTH]

    extended = secret
    while len(extended) < KEY_LENGTH:
        extended += secret
    # Only non-ASCII input can encode to more than 32 bytes here
    return extended[:KEY_LENGTH].encode("utf-8")[:KEY_LENGTH]


def issue(secret: str, ttl_millis: int, claims: Optional[Mapping[str, Any]] = None) -> str:
    """
    Issue a token carrying `claims` that expires `ttl_millis` from now.
    The 'exp' claim (UNIX seconds, millisecond precision) always overrides a
    caller-supplied 'exp'. A zero or negative TTL yields a token that is
    already expired.
    """
    key = derive_key(secret)
    if not isinstance(ttl_millis, int) or isinstance(ttl_millis, bool):
        raise ConfigurationError(f"TTL must be an integer number of milliseconds, got {ttl_millis!r}")

    if claims is None:
        claims = {}
    if not isinstance(claims, Mapping):
        raise EncodingError(f"Claims must be a mapping, got {type(claims).__name__}")
    bad_keys = [k for k in claims if not isinstance(k, str)]
    if bad_keys:
        raise EncodingError(f"Claim names must be strings: {bad_keys!r}")

    payload = dict(claims)
    try:
        payload["exp"] = (now_ms() + ttl_millis) / 1000
    except OverflowError as e:
        raise ConfigurationError(f"TTL out of range: {ttl_millis!r}") from e

    try:
        header_b64 = _json_segment(HEADER)
        payload_b64 = _json_segment(payload)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Claims are not JSON serializable: {e}") from e

    sig_b64 = _sign(key, header_b64, payload_b64)
    logger.debug("Issued token with %d claim(s), exp=%s", len(payload), payload["exp"])
    return f"{header_b64}.{payload_b64}.{sig_b64}"


def verify(secret: str, token: str, *, leeway_seconds: float = 0) -> Dict[str, Any]:
    """
    Verify a token and return its claims (including 'exp').

    Checks, in order: structure, signature (constant-time), header algorithm,
    payload and expiration. Any other claim, 'nbf' included, is returned
    untouched. `leeway_seconds` widens the expiration check to absorb clock
    skew between issuer and verifier.
    Raises an InvalidTokenError subclass on rejection.
    """
    key = derive_key(secret)
    if not _is_number(leeway_seconds) or leeway_seconds < 0:
        raise ConfigurationError(f"Leeway must be a non-negative number, got {leeway_seconds!r}")

    if not isinstance(token, str):
        raise MalformedTokenError(f"Token must be a string, got {type(token).__name__}")
    parts = token.split(".")
    if len(parts) != 3 or not all(_SEGMENT_RE.fullmatch(p) for p in parts):
        logger.debug("Rejected token: invalid structure")
        raise MalformedTokenError("Invalid token format")

    header_b64, payload_b64, sig_b64 = parts
    expected_sig = _sign(key, header_b64, payload_b64)
    if not hmac.compare_digest(expected_sig.encode("ascii"), sig_b64.encode("ascii")):
        logger.debug("Rejected token: signature mismatch")
        raise SignatureMismatchError("Invalid token signature")

    header = _decode_object(header_b64, "header")
    if header.get("alg") != ALGORITHM:
        logger.debug("Rejected token: unsupported alg %r", header.get("alg"))
        raise MalformedTokenError("Unsupported token algorithm")

    payload = _decode_object(payload_b64, "payload")
    exp = payload.get("exp")
    if not _is_number(exp):
        raise MalformedTokenError("Invalid 'exp' in payload")

    # Same ms -> seconds division as issue, so equal instants compare equal
    now = now_ms() / 1000
    if now >= exp + leeway_seconds:
        logger.debug("Rejected token: expired at %s", exp)
        raise ExpiredTokenError("Token expired", expired_at=exp)

    return payload
