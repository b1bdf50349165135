"""Task models.

Includes: Task (SQL table), TaskDraft (validated editable fields),
TaskView (read model joined with user names).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Field as SQLField
from sqlmodel import SQLModel

TaskStatus = Literal["Assigned", "In Progress", "Completed"]
TaskPriority = Literal["Low", "Medium", "High"]

TASK_STATUSES: tuple[str, ...] = get_args(TaskStatus)
TASK_PRIORITIES: tuple[str, ...] = get_args(TaskPriority)
DEFAULT_STATUS: TaskStatus = "Assigned"


class Task(SQLModel, table=True):
    """A unit of work created by an assigner for an assignee (possibly the same user)."""

    __tablename__ = "tasks"

    id: int | None = SQLField(default=None, primary_key=True)
    title: str
    description: str = ""
    status: str = DEFAULT_STATUS  # "Assigned" | "In Progress" | "Completed"
    priority: str  # "Low" | "Medium" | "High"
    due_date: date
    assigner_id: int = SQLField(foreign_key="users.id", index=True)
    assignee_id: int = SQLField(foreign_key="users.id", index=True)
    created_at: datetime = SQLField(
        default_factory=lambda: datetime.now(timezone.utc), index=True,
    )


class TaskDraft(BaseModel):
    """Fields the assigner controls. Used for both create and full update.

    ``dueDate`` is the wire name; ``due_date`` is accepted too.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=10_000)
    priority: TaskPriority
    due_date: date = Field(alias="dueDate")
    assignee_id: int

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, v):
        return "" if v is None else v


class TaskView(BaseModel):
    """A task as returned to clients: row fields plus joined names and description tokens."""

    id: int
    title: str
    description: str
    status: str
    priority: str
    due_date: date
    created_at: datetime
    assigner_id: int
    assigner_name: str
    assignee_id: int
    assignee_name: str
    tags: list[str] = Field(default_factory=list)
    mentions: list[str] = Field(default_factory=list)
