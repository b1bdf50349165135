"""User model — the credential store behind registration, login and the Auth Gate."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel


class User(SQLModel, table=True):
    """A registered account. Immutable except the password hash; never deleted."""

    __tablename__ = "users"

    id: int | None = SQLField(default=None, primary_key=True)
    name: str
    email: str = SQLField(unique=True, index=True)  # Stored lower-cased
    password_hash: str
    created_at: datetime = SQLField(default_factory=lambda: datetime.now(timezone.utc))


class Identity(BaseModel):
    """The authenticated caller, resolved from a bearer token on every request."""

    id: int
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> Identity:
        return cls(id=user.id, name=user.name, email=user.email)
