"""Task authorization and transition engine.

Every mutating operation is one conditional statement:

    UPDATE tasks SET ... WHERE id = :id AND <owner column> = :caller
    DELETE FROM tasks     WHERE id = :id AND assigner_id   = :caller

If nothing matched, the row is re-read only to classify the failure
(``NotFound`` vs ``Forbidden``). There is no window between the ownership
check and the write for a concurrent request to slip through.

Status is an open enumeration: any member may follow any other.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, update
from sqlalchemy.orm import aliased
from sqlmodel import Session, select

from taskmanager.core.errors import Forbidden, InvalidInput, NotFound
from taskmanager.core.mentions import extract_tokens
from taskmanager.core.permissions import TaskAction, evaluate, owner_clause
from taskmanager.core.task_filters import TaskFilter
from taskmanager.db.database import commit
from taskmanager.models.task import DEFAULT_STATUS, TASK_STATUSES, Task, TaskDraft, TaskView
from taskmanager.models.user import Identity, User

logger = logging.getLogger(__name__)


# === Read side ===


def _view_query():
    assigner = aliased(User, name="assigner")
    assignee = aliased(User, name="assignee")
    return (
        select(Task, assigner.name, assignee.name)
        .join(assigner, Task.assigner_id == assigner.id)
        .join(assignee, Task.assignee_id == assignee.id)
    )


def _to_view(task: Task, assigner_name: str, assignee_name: str) -> TaskView:
    tags, mentions = extract_tokens(task.description)
    return TaskView(
        id=task.id,
        title=task.title,
        description=task.description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        created_at=task.created_at,
        assigner_id=task.assigner_id,
        assigner_name=assigner_name,
        assignee_id=task.assignee_id,
        assignee_name=assignee_name,
        tags=tags,
        mentions=mentions,
    )


def get_task(session: Session, task_id: int) -> TaskView:
    row = session.exec(_view_query().where(Task.id == task_id)).first()
    if row is None:
        raise NotFound("Task not found")
    return _to_view(*row)


def list_tasks(session: Session, filters: TaskFilter | None = None) -> list[TaskView]:
    """All tasks matching ``filters``, newest first."""
    stmt = _view_query()
    for clause in (filters or TaskFilter()).clauses():
        stmt = stmt.where(clause)
    stmt = stmt.order_by(Task.created_at.desc(), Task.id.desc())
    return [_to_view(*row) for row in session.exec(stmt).all()]


# === Write side ===


def _require_user(session: Session, user_id: int) -> None:
    if session.get(User, user_id) is None:
        raise InvalidInput(f"Assignee does not exist: {user_id}")


def _raise_rejection(session: Session, identity: Identity, task_id: int, action: TaskAction) -> None:
    """Explain why a conditional write matched nothing. Always raises."""
    task = session.get(Task, task_id, populate_existing=True)
    if task is None:
        raise NotFound("Task not found")
    decision = evaluate(identity, task, action)
    logger.warning(
        "User %d denied %s on task %d: %s",
        identity.id, action.value, task_id, decision.reason or "row changed concurrently",
    )
    raise Forbidden(decision.reason or "User not authorized")


def _check_access(session: Session, identity: Identity, task_id: int, action: TaskAction) -> None:
    task = session.get(Task, task_id)
    if task is None:
        raise NotFound("Task not found")
    decision = evaluate(identity, task, action)
    if not decision.allowed:
        raise Forbidden(decision.reason)


def create_task(session: Session, identity: Identity, draft: TaskDraft) -> TaskView:
    """Create a task assigned by ``identity``. Status starts as ``Assigned``."""
    _require_user(session, draft.assignee_id)

    task = Task(
        title=draft.title,
        description=draft.description,
        priority=draft.priority,
        due_date=draft.due_date,
        status=DEFAULT_STATUS,
        assigner_id=identity.id,
        assignee_id=draft.assignee_id,
    )
    session.add(task)
    commit(session)
    session.refresh(task)
    logger.info("User %d created task %d for user %d", identity.id, task.id, task.assignee_id)
    return get_task(session, task.id)


def update_task(session: Session, identity: Identity, task_id: int, draft: TaskDraft) -> TaskView:
    """Overwrite the assigner-controlled fields. Only the assigner may do this."""
    if session.get(User, draft.assignee_id) is None:
        # Report missing task / wrong caller ahead of a bad assignee
        _check_access(session, identity, task_id, TaskAction.EDIT)
        raise InvalidInput(f"Assignee does not exist: {draft.assignee_id}")

    stmt = (
        update(Task)
        .where(Task.id == task_id, owner_clause(identity, TaskAction.EDIT))
        .values(
            title=draft.title,
            description=draft.description,
            priority=draft.priority,
            due_date=draft.due_date,
            assignee_id=draft.assignee_id,
        )
    )
    result = session.connection().execute(stmt)
    if result.rowcount == 0:
        session.rollback()
        _raise_rejection(session, identity, task_id, TaskAction.EDIT)
    commit(session)
    return get_task(session, task_id)


def update_task_status(session: Session, identity: Identity, task_id: int, status: str) -> str:
    """Set the status. Only the assignee may do this; returns the new status.

    The value is validated before the task is looked up, so an unknown status
    is InvalidInput even when the task does not exist.
    """
    if status not in TASK_STATUSES:
        raise InvalidInput(f"Invalid status: {status!r}. Expected one of {', '.join(TASK_STATUSES)}")

    stmt = (
        update(Task)
        .where(Task.id == task_id, owner_clause(identity, TaskAction.CHANGE_STATUS))
        .values(status=status)
    )
    result = session.connection().execute(stmt)
    if result.rowcount == 0:
        session.rollback()
        _raise_rejection(session, identity, task_id, TaskAction.CHANGE_STATUS)
    commit(session)
    logger.info("User %d set task %d status to %s", identity.id, task_id, status)
    return status


def delete_task(session: Session, identity: Identity, task_id: int) -> None:
    """Permanently remove a task. Only the assigner may do this."""
    stmt = delete(Task).where(Task.id == task_id, owner_clause(identity, TaskAction.DELETE))
    result = session.connection().execute(stmt)
    if result.rowcount == 0:
        session.rollback()
        _raise_rejection(session, identity, task_id, TaskAction.DELETE)
    commit(session)
    logger.info("User %d deleted task %d", identity.id, task_id)
