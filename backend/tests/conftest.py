"""Shared test fixtures for IT Task Manager backend tests."""

import os
import sys

import pytest

# Ensure backend is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("DATABASE_URL", "sqlite:///test.db")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")  # bcrypt minimum, keeps tests fast
os.environ.setdefault("RATE_LIMIT_GLOBAL_RPM", "100000")
os.environ.setdefault("RATE_LIMIT_AUTH_RPM", "100000")

from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from taskmanager.core.accounts import register_user
from taskmanager.db.database import create_db_and_tables, engine


@pytest.fixture(autouse=True)
def fresh_schema():
    """Every test starts from empty tables (ids restart at 1)."""
    create_db_and_tables()
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def make_user(session):
    """Factory: make_user("alice") registers alice@example.com and returns her Identity."""
    def _make(name: str, password: str = "secret123"):
        return register_user(
            session, name=name.title(), email=f"{name}@example.com", password=password,
        )
    return _make


@pytest.fixture
def client():
    from taskmanager.main import app
    return TestClient(app)
