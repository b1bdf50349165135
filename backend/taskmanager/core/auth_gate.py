"""Auth Gate — turns an ``Authorization`` header into an ``Identity``.

Every request is re-verified; nothing is cached between requests.
"""

from __future__ import annotations

import logging

from sqlmodel import Session

from taskmanager.core.accounts import resolve_identity
from taskmanager.core.errors import Unauthenticated
from taskmanager.models.user import Identity
from taskmanager.security.tokens import decode_access_token

logger = logging.getLogger(__name__)

NO_TOKEN = "Not authorized, no token"
TOKEN_FAILED = "Not authorized, token failed"
USER_NOT_FOUND = "Not authorized, user not found"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from ``Bearer <token>``, or None if absent/malformed."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        return None
    return token


def authenticate(session: Session, authorization: str | None, *, secret: str) -> Identity:
    """Resolve the caller behind ``authorization``.

    Raises:
        Unauthenticated: with a message distinguishing missing token,
            failed verification and a vanished user.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthenticated(NO_TOKEN)

    try:
        user_id = decode_access_token(token=token, secret=secret)
    except Unauthenticated as e:
        logger.debug("Token rejected: %s", e.detail)
        raise Unauthenticated(TOKEN_FAILED) from e

    identity = resolve_identity(session, user_id)
    if identity is None:
        raise Unauthenticated(USER_NOT_FOUND)
    return identity
