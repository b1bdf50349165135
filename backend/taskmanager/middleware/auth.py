"""Bearer token authentication middleware.

Every request outside the exempt paths must carry
``Authorization: Bearer <token>``. The token is verified against
``settings.jwt_secret`` and its subject looked up in the users table; the
result is stored on ``request.state.identity`` for route dependencies.

Exempt paths: /, /health, /docs, /openapi.json, /redoc,
/api/auth/register, /api/auth/login (and CORS preflight requests).
"""

from __future__ import annotations

import logging

from sqlmodel import Session
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from taskmanager.config import settings
from taskmanager.core.auth_gate import authenticate
from taskmanager.core.errors import Unauthenticated
from taskmanager.db import database

logger = logging.getLogger(__name__)

# Paths that don't require authentication
_EXEMPT_PATHS = frozenset({
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/api/auth/register",
    "/api/auth/login",
})


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Resolves the caller's identity or rejects the request with 401."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in _EXEMPT_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        try:
            with Session(database.engine) as session:
                identity = authenticate(
                    session,
                    request.headers.get("Authorization"),
                    secret=settings.jwt_secret,
                )
        except Unauthenticated as e:
            logger.warning(
                "Rejected request from %s on %s: %s",
                request.client.host if request.client else "unknown",
                request.url.path,
                e.detail,
            )
            return JSONResponse(status_code=e.status_code, content={"detail": e.detail})

        request.state.identity = identity
        return await call_next(request)
