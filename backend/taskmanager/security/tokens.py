"""Signed bearer tokens (compact JWT, HS256).

Claims: ``id`` (user id), ``iat``, ``exp``. The server-held secret is the only
key; there is no server-side session state.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time

from taskmanager.core.errors import Unauthenticated

_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(raw: str) -> bytes:
    padding = "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw + padding)


def _sign(secret: str, signing_input: bytes) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def issue_access_token(*, user_id: int, secret: str, ttl_seconds: int, now: int | None = None) -> str:
    """Issue a signed token for ``user_id`` expiring after ``ttl_seconds``."""
    issued_at = int(now if now is not None else time.time())
    claims = {"id": user_id, "iat": issued_at, "exp": issued_at + max(1, ttl_seconds)}
    header_b64 = _b64url_encode(json.dumps(_HEADER, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(claims, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    return f"{header_b64}.{payload_b64}.{_b64url_encode(_sign(secret, signing_input))}"


def decode_access_token(*, token: str, secret: str, now: int | None = None) -> int:
    """Verify signature, algorithm and expiry; return the subject user id.

    Raises:
        Unauthenticated: for any malformed, tampered or expired token.
    """
    # Compact JWTs are base64url; anything else can't be a signing input
    if not token.isascii():
        raise Unauthenticated("Malformed token.")
    parts = token.split(".")
    if len(parts) != 3:
        raise Unauthenticated("Malformed token.")
    header_b64, payload_b64, sig_b64 = parts

    try:
        header = json.loads(_b64url_decode(header_b64))
        signature = _b64url_decode(sig_b64)
    except (ValueError, TypeError) as e:
        raise Unauthenticated("Malformed token.") from e

    if not isinstance(header, dict) or header.get("alg") != _HEADER["alg"]:
        raise Unauthenticated("Unsupported token algorithm.")

    expected_sig = _sign(secret, f"{header_b64}.{payload_b64}".encode("ascii"))
    if not hmac.compare_digest(signature, expected_sig):
        raise Unauthenticated("Invalid token signature.")

    try:
        claims = json.loads(_b64url_decode(payload_b64))
        user_id = int(claims["id"])
        expires_at = int(claims["exp"])
    except (ValueError, TypeError, KeyError) as e:
        raise Unauthenticated("Malformed token claims.") from e

    current = int(now if now is not None else time.time())
    if current > expires_at:
        raise Unauthenticated("Token expired.")
    return user_id
