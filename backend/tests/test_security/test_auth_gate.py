"""Tests for resolving an Authorization header into an Identity."""

import pytest

from taskmanager.core.auth_gate import (
    NO_TOKEN,
    TOKEN_FAILED,
    USER_NOT_FOUND,
    authenticate,
    extract_bearer_token,
)
from taskmanager.core.errors import Unauthenticated
from taskmanager.security.tokens import issue_access_token

SECRET = "gate-secret"


def _bearer(user_id: int, secret: str = SECRET, ttl: int = 3600, now: int | None = None) -> str:
    return "Bearer " + issue_access_token(user_id=user_id, secret=secret, ttl_seconds=ttl, now=now)


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("Bearer   padded  ", "padded"),
    (None, None),
    ("", None),
    ("Bearer", None),
    ("Bearer ", None),
    ("Basic dXNlcjpwYXNz", None),
    ("bearer abc", None),
    ("abc.def.ghi", None),
])
def test_extract_bearer_token(header, expected):
    assert extract_bearer_token(header) == expected


def test_valid_token_resolves_identity(session, make_user):
    alice = make_user("alice")
    assert authenticate(session, _bearer(alice.id), secret=SECRET) == alice


def test_missing_token(session):
    with pytest.raises(Unauthenticated) as exc:
        authenticate(session, None, secret=SECRET)
    assert exc.value.detail == NO_TOKEN


def test_bad_signature(session, make_user):
    alice = make_user("alice")
    with pytest.raises(Unauthenticated) as exc:
        authenticate(session, _bearer(alice.id, secret="wrong"), secret=SECRET)
    assert exc.value.detail == TOKEN_FAILED


def test_expired_token(session, make_user):
    alice = make_user("alice")
    with pytest.raises(Unauthenticated) as exc:
        authenticate(session, _bearer(alice.id, ttl=60, now=1_000), secret=SECRET)
    assert exc.value.detail == TOKEN_FAILED


def test_user_no_longer_exists(session):
    with pytest.raises(Unauthenticated) as exc:
        authenticate(session, _bearer(999), secret=SECRET)
    assert exc.value.detail == USER_NOT_FOUND
