"""Task list filters and the assigned/created partition.

Filters compose by AND; an empty value imposes no restriction.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, field_validator
from sqlalchemy import or_

from taskmanager.core.errors import InvalidInput
from taskmanager.models.task import TASK_PRIORITIES, TASK_STATUSES, Task, TaskView
from taskmanager.models.user import Identity

_TICKET_RE = re.compile(r"^#(\d+)$")


class TaskFilter(BaseModel):
    """Query-string filters for the task list.

    ``search`` is trimmed before matching, so surrounding whitespace never
    has to appear in a title or description, and a blank term matches
    everything. ``status`` and ``priority`` match exactly.
    """

    search: str = ""
    status: str = ""
    priority: str = ""

    @field_validator("search", "status", "priority", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return "" if v is None else v

    def validate_enums(self) -> TaskFilter:
        """Reject status/priority values outside the enumerations."""
        if self.status and self.status not in TASK_STATUSES:
            raise InvalidInput(f"Invalid status filter: {self.status!r}")
        if self.priority and self.priority not in TASK_PRIORITIES:
            raise InvalidInput(f"Invalid priority filter: {self.priority!r}")
        return self

    def clauses(self) -> list:
        """SQL predicates for this filter, to be AND-ed together."""
        self.validate_enums()
        result = []

        term = self.search.strip()
        if term:
            matches = [
                Task.title.icontains(term, autoescape=True),
                Task.description.icontains(term, autoescape=True),
            ]
            ticket = _TICKET_RE.match(term)
            if ticket:
                matches.append(Task.id == int(ticket.group(1)))
            result.append(or_(*matches))

        if self.status:
            result.append(Task.status == self.status)
        if self.priority:
            result.append(Task.priority == self.priority)
        return result


def partition(identity: Identity, views: list[TaskView]) -> tuple[list[TaskView], list[TaskView]]:
    """Split into ``(assigned_to_me, created_by_me)``, preserving order.

    A self-assigned task appears in both lists. Tasks the caller neither
    created nor was assigned appear in neither.
    """
    assigned = [v for v in views if v.assignee_id == identity.id]
    created = [v for v in views if v.assigner_id == identity.id]
    return assigned, created
