"""Tests for registration / login endpoints."""

from taskmanager.security.tokens import decode_access_token
from taskmanager.config import settings


def _register(client, name="Alice", email="alice@example.com", password="secret123"):
    return client.post("/api/auth/register", json={"name": name, "email": email, "password": password})


def test_register_returns_token(client):
    resp = _register(client)
    assert resp.status_code == 201
    data = resp.json()
    assert data["id"] == 1
    assert data["name"] == "Alice"
    assert data["email"] == "alice@example.com"
    assert decode_access_token(token=data["token"], secret=settings.jwt_secret) == 1
    assert "password" not in data
    assert "password_hash" not in data


def test_register_duplicate_email_returns_400(client):
    assert _register(client).status_code == 201
    resp = _register(client, name="Other", email="ALICE@example.com")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User already exists."


def test_register_validation(client):
    assert _register(client, email="not-an-email").status_code == 400
    assert _register(client, password="123").status_code == 400
    assert _register(client, name="").status_code == 400
    resp = client.post("/api/auth/register", json={"email": "a@b.co"})
    assert resp.status_code == 400
    assert resp.json()["errors"]


def test_login_success(client):
    _register(client)
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 1
    assert data["token"]


def test_login_bad_credentials_returns_401(client):
    _register(client)
    resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"})
    assert resp.status_code == 401
    resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
    assert resp.status_code == 401


def test_me_returns_identity(client):
    token = _register(client).json()["token"]
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json() == {"id": 1, "name": "Alice", "email": "alice@example.com"}


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401
