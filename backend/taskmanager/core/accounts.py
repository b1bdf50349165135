"""Credential store operations: registration, login, user directory."""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from taskmanager.core.errors import Conflict, InvalidInput, Unauthenticated
from taskmanager.db.database import commit
from taskmanager.models.user import Identity, User
from taskmanager.security.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register_user(session: Session, *, name: str, email: str, password: str) -> Identity:
    """Create a user account.

    Raises:
        Conflict: if the email is already registered.
        InvalidInput: if the name is blank.
    """
    name = name.strip()
    if not name:
        raise InvalidInput("Name must not be blank.")
    email = normalize_email(email)
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing is not None:
        raise Conflict("User already exists.")

    user = User(name=name, email=email, password_hash=hash_password(password))
    session.add(user)
    try:
        commit(session)
    except IntegrityError as e:
        # Lost a race with a concurrent registration of the same email
        raise Conflict("User already exists.") from e
    session.refresh(user)
    logger.info("Registered user %d (%s)", user.id, user.email)
    return Identity.from_user(user)


def authenticate_user(session: Session, *, email: str, password: str) -> Identity:
    """Check credentials. Unknown email and wrong password are indistinguishable."""
    user = session.exec(select(User).where(User.email == normalize_email(email))).first()
    if user is None or not verify_password(password, user.password_hash):
        raise Unauthenticated("Invalid email or password.")
    return Identity.from_user(user)


def resolve_identity(session: Session, user_id: int) -> Identity | None:
    user = session.get(User, user_id)
    return Identity.from_user(user) if user is not None else None


def list_users(session: Session) -> list[Identity]:
    """All users, for the assignee picker."""
    users = session.exec(select(User).order_by(User.name, User.id)).all()
    return [Identity.from_user(u) for u in users]
