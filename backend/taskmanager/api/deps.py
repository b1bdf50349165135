"""Shared route dependencies."""

from __future__ import annotations

from fastapi import Request

from taskmanager.core.auth_gate import NO_TOKEN
from taskmanager.core.errors import Unauthenticated
from taskmanager.models.user import Identity


def get_identity(request: Request) -> Identity:
    """The caller resolved by BearerAuthMiddleware."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise Unauthenticated(NO_TOKEN)
    return identity
