"""Relationship-based permission rules for task mutations.

Every rule is a single equality test between the caller's id and a user
column on the task row:

    EDIT          -> assigner_id
    DELETE        -> assigner_id
    CHANGE_STATUS -> assignee_id

``evaluate`` checks a loaded row; ``owner_clause`` renders the same rule as a
SQL predicate for conditional UPDATE/DELETE statements.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from taskmanager.models.task import Task
from taskmanager.models.user import Identity


class TaskAction(str, Enum):
    EDIT = "edit"
    CHANGE_STATUS = "change_status"
    DELETE = "delete"


_OWNER_COLUMN: dict[TaskAction, str] = {
    TaskAction.EDIT: "assigner_id",
    TaskAction.DELETE: "assigner_id",
    TaskAction.CHANGE_STATUS: "assignee_id",
}

_DENY_REASON: dict[TaskAction, str] = {
    TaskAction.EDIT: "Only the assigner can edit this task.",
    TaskAction.DELETE: "Only the assigner can delete this task.",
    TaskAction.CHANGE_STATUS: "Only the assignee can update the status of this task.",
}


class Decision(BaseModel):
    allowed: bool
    reason: str = ""


ALLOW = Decision(allowed=True)


def evaluate(identity: Identity, task: Task, action: TaskAction) -> Decision:
    """Decide whether ``identity`` may perform ``action`` on ``task``."""
    if getattr(task, _OWNER_COLUMN[action]) == identity.id:
        return ALLOW
    return Decision(allowed=False, reason=_DENY_REASON[action])


def owner_clause(identity: Identity, action: TaskAction):
    """SQL predicate equivalent to ``evaluate(...).allowed``."""
    return getattr(Task, _OWNER_COLUMN[action]) == identity.id
