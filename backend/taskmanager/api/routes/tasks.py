"""Task API endpoints.

GET    /api/tasks                — list (optional ?search=&status=&priority=)
GET    /api/tasks/dashboard      — same filters, split into assigned-to-me / created-by-me
GET    /api/tasks/{id}           — single task
POST   /api/tasks                — create (caller becomes assigner)
PUT    /api/tasks/{id}           — edit fields (assigner only)
PATCH  /api/tasks/{id}/status    — change status (assignee only)
DELETE /api/tasks/{id}           — delete (assigner only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from taskmanager.api.deps import get_identity
from taskmanager.core import task_service
from taskmanager.core.task_filters import TaskFilter, partition
from taskmanager.db.database import get_session
from taskmanager.models.task import TaskDraft, TaskView
from taskmanager.models.user import Identity

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


# === Request / Response Models ===


class StatusUpdateRequest(BaseModel):
    status: str


class StatusUpdateResponse(BaseModel):
    message: str
    id: int
    status: str


class DeleteResponse(BaseModel):
    message: str
    id: int


class DashboardResponse(BaseModel):
    assigned_to_me: list[TaskView]
    created_by_me: list[TaskView]


def _filters(
    search: str = Query(default="", max_length=200),
    status: str = Query(default=""),
    priority: str = Query(default=""),
) -> TaskFilter:
    return TaskFilter(search=search, status=status, priority=priority).validate_enums()


# === Endpoints ===


@router.get("", response_model=list[TaskView])
def list_tasks(
    filters: TaskFilter = Depends(_filters),
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> list[TaskView]:
    """All tasks visible to any authenticated user, newest first."""
    return task_service.list_tasks(session, filters)


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    filters: TaskFilter = Depends(_filters),
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> DashboardResponse:
    assigned, created = partition(identity, task_service.list_tasks(session, filters))
    return DashboardResponse(assigned_to_me=assigned, created_by_me=created)


@router.get("/{task_id}", response_model=TaskView)
def get_task(
    task_id: int,
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> TaskView:
    return task_service.get_task(session, task_id)


@router.post("", response_model=TaskView, status_code=201)
def create_task(
    draft: TaskDraft,
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> TaskView:
    return task_service.create_task(session, identity, draft)


@router.put("/{task_id}", response_model=TaskView)
def update_task(
    task_id: int,
    draft: TaskDraft,
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> TaskView:
    return task_service.update_task(session, identity, task_id, draft)


@router.patch("/{task_id}/status", response_model=StatusUpdateResponse)
def update_task_status(
    task_id: int,
    request: StatusUpdateRequest,
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> StatusUpdateResponse:
    status = task_service.update_task_status(session, identity, task_id, request.status)
    return StatusUpdateResponse(message="Task status updated", id=task_id, status=status)


@router.delete("/{task_id}", response_model=DeleteResponse)
def delete_task(
    task_id: int,
    session: Session = Depends(get_session),
    identity: Identity = Depends(get_identity),
) -> DeleteResponse:
    task_service.delete_task(session, identity, task_id)
    return DeleteResponse(message="Task removed", id=task_id)
