"""Tests for signed bearer tokens."""

import base64
import json

import pytest

from taskmanager.core.errors import Unauthenticated
from taskmanager.security.tokens import decode_access_token, issue_access_token

SECRET = "unit-test-secret"
NOW = 1_700_000_000


def _b64(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip("=")


def test_roundtrip_returns_subject():
    token = issue_access_token(user_id=42, secret=SECRET, ttl_seconds=60, now=NOW)
    assert decode_access_token(token=token, secret=SECRET, now=NOW + 30) == 42


def test_token_is_compact_jwt():
    token = issue_access_token(user_id=7, secret=SECRET, ttl_seconds=60, now=NOW)
    header_b64, payload_b64, _ = token.split(".")
    header = json.loads(base64.urlsafe_b64decode(header_b64 + "=" * (-len(header_b64) % 4)))
    claims = json.loads(base64.urlsafe_b64decode(payload_b64 + "=" * (-len(payload_b64) % 4)))
    assert header == {"alg": "HS256", "typ": "JWT"}
    assert claims == {"id": 7, "iat": NOW, "exp": NOW + 60}


def test_valid_until_expiry_inclusive():
    token = issue_access_token(user_id=1, secret=SECRET, ttl_seconds=60, now=NOW)
    assert decode_access_token(token=token, secret=SECRET, now=NOW + 60) == 1
    with pytest.raises(Unauthenticated, match="expired"):
        decode_access_token(token=token, secret=SECRET, now=NOW + 61)


def test_wrong_secret_rejected():
    token = issue_access_token(user_id=1, secret=SECRET, ttl_seconds=60, now=NOW)
    with pytest.raises(Unauthenticated, match="signature"):
        decode_access_token(token=token, secret="other-secret", now=NOW)


def test_tampered_payload_rejected():
    token = issue_access_token(user_id=1, secret=SECRET, ttl_seconds=60, now=NOW)
    header_b64, _, sig_b64 = token.split(".")
    forged = _b64({"id": 2, "iat": NOW, "exp": NOW + 60})
    with pytest.raises(Unauthenticated):
        decode_access_token(token=f"{header_b64}.{forged}.{sig_b64}", secret=SECRET, now=NOW)


def test_alg_none_rejected():
    token = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64({'id': 1, 'exp': NOW + 60})}."
    with pytest.raises(Unauthenticated, match="algorithm"):
        decode_access_token(token=token, secret=SECRET, now=NOW)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "!!!.@@@.###"])
def test_malformed_rejected(token):
    with pytest.raises(Unauthenticated):
        decode_access_token(token=token, secret=SECRET, now=NOW)


@pytest.mark.parametrize("segment", [0, 1, 2])
def test_non_ascii_rejected(segment):
    token = issue_access_token(user_id=1, secret=SECRET, ttl_seconds=60, now=NOW)
    parts = token.split(".")
    parts[segment] += "é"
    with pytest.raises(Unauthenticated, match="Malformed"):
        decode_access_token(token=".".join(parts), secret=SECRET, now=NOW)
