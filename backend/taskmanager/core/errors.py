"""Error taxonomy shared by services, middleware and routes.

Each kind carries the HTTP status it maps to; ``main`` registers a single
exception handler that renders ``{"detail": message}``.
"""

from __future__ import annotations


class TaskManagerError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class Unauthenticated(TaskManagerError):
    """No token, invalid/expired token, or token subject no longer exists."""

    status_code = 401


class Forbidden(TaskManagerError):
    """Valid identity, wrong relationship to the resource."""

    status_code = 403


class NotFound(TaskManagerError):
    status_code = 404


class InvalidInput(TaskManagerError):
    status_code = 400


class Conflict(TaskManagerError):
    """Duplicate unique field (e.g. email). Reported as 400 on the wire."""

    status_code = 400


class Internal(TaskManagerError):
    """Storage or transport failure not otherwise classified."""

    status_code = 500
