"""User directory endpoint (assignee picker).

GET /api/users — all users as {id, name, email}
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from taskmanager.api.deps import get_identity
from taskmanager.core.accounts import list_users
from taskmanager.db.database import get_session
from taskmanager.models.user import Identity

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=list[Identity])
def get_users(
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> list[Identity]:
    return list_users(session)
