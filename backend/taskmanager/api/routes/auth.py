"""Authentication endpoints.

POST /api/auth/register — create an account, returns a token
POST /api/auth/login    — exchange credentials for a token
GET  /api/auth/me       — the identity behind the presented token
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session

from taskmanager.api.deps import get_identity
from taskmanager.config import settings
from taskmanager.core.accounts import authenticate_user, register_user
from taskmanager.db.database import get_session
from taskmanager.models.user import Identity
from taskmanager.security.tokens import issue_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6, max_length=72)  # bcrypt input limit


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthResponse(BaseModel):
    id: int
    name: str
    email: str
    token: str


def _auth_response(identity: Identity) -> AuthResponse:
    token = issue_access_token(
        user_id=identity.id,
        secret=settings.jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
    )
    return AuthResponse(id=identity.id, name=identity.name, email=identity.email, token=token)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(request: RegisterRequest, session: Session = Depends(get_session)) -> AuthResponse:
    """Register a new user and log them in."""
    identity = register_user(
        session, name=request.name, email=request.email, password=request.password,
    )
    return _auth_response(identity)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest, session: Session = Depends(get_session)) -> AuthResponse:
    identity = authenticate_user(session, email=request.email, password=request.password)
    return _auth_response(identity)


@router.get("/me", response_model=Identity)
def me(identity: Identity = Depends(get_identity)) -> Identity:
    return identity
