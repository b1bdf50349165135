"""Tests for health endpoint and main app wiring."""

from datetime import datetime, timezone
from unittest.mock import patch

from taskmanager import __version__
from taskmanager.api.health import HealthStatus, health_check

# === HealthStatus Model Tests ===


def test_health_status_model():
    status = HealthStatus(
        status="healthy",
        version="0.1.0",
        checks={"database": {"status": "ok", "detail": "sqlite"}},
        dependencies={"database": "ok"},
        timestamp=datetime.now(timezone.utc),
    )
    assert status.status == "healthy"
    assert status.dependencies["database"] == "ok"


# === Health Endpoint Tests ===


def test_health_check_reports_database():
    result = health_check()
    assert isinstance(result, HealthStatus)
    assert result.version == __version__
    assert result.checks["database"]["status"] == "ok"
    assert result.checks["database"]["detail"] == "sqlite"
    assert set(result.dependencies) == set(result.checks)


def test_default_secret_degrades_health():
    with patch("taskmanager.api.health.settings") as mock_settings:
        mock_settings.jwt_secret = "change-me"
        result = health_check()
    assert result.status == "degraded"
    assert result.checks["jwt_secret"]["status"] == "warning"


def test_configured_secret_is_healthy():
    with patch("taskmanager.api.health.settings") as mock_settings:
        mock_settings.jwt_secret = "a-real-secret"
        result = health_check()
    assert result.status == "healthy"


# === App wiring ===


def test_root(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.json()["name"] == "IT Task Manager"


def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] in ("healthy", "degraded")


def test_storage_failure_returns_500(client):
    from sqlalchemy.exc import OperationalError

    token = client.post("/api/auth/register", json={
        "name": "Alice", "email": "alice@example.com", "password": "secret123",
    }).json()["token"]
    with patch(
        "taskmanager.core.task_service.list_tasks",
        side_effect=OperationalError("SELECT", {}, Exception("disk I/O error")),
    ):
        resp = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Storage failure."}
    assert "disk" not in resp.text


def test_cors_preflight_skips_auth(client):
    resp = client.options("/api/tasks", headers={
        "Origin": "http://localhost:5173",
        "Access-Control-Request-Method": "GET",
    })
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"
