"""Health check endpoint — database connectivity and auth configuration."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from taskmanager import __version__
from taskmanager.config import settings

router = APIRouter()

_DEFAULT_SECRET = "change-me"


class HealthStatus(BaseModel):
    status: str  # "healthy" | "degraded" | "unhealthy"
    version: str
    checks: dict[str, dict]
    dependencies: dict[str, str]  # Simplified view for frontend
    timestamp: datetime


@router.get("/health", response_model=HealthStatus)
def health_check() -> HealthStatus:
    """Check the database and the token signing configuration."""
    checks: dict[str, dict] = {}
    overall_healthy = True
    has_warning = False

    # 1. Database
    try:
        from sqlalchemy import text

        from taskmanager.db.database import engine
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        checks["database"] = {"status": "ok", "detail": engine.dialect.name}
    except Exception as e:
        checks["database"] = {"status": "error", "detail": str(e)[:200]}
        overall_healthy = False

    # 2. Token secret
    if settings.jwt_secret == _DEFAULT_SECRET:
        checks["jwt_secret"] = {"status": "warning", "detail": "JWT_SECRET is the built-in default"}
        has_warning = True
    else:
        checks["jwt_secret"] = {"status": "ok", "detail": "configured"}

    dependencies = {name: check["status"] for name, check in checks.items()}

    if overall_healthy:
        status = "degraded" if has_warning else "healthy"
    else:
        status = "unhealthy"

    return HealthStatus(
        status=status,
        version=__version__,
        checks=checks,
        dependencies=dependencies,
        timestamp=datetime.now(timezone.utc),
    )
