# src/futureboard/sync/mirror.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ..tasks.task_models import Task, dt_to_str


@dataclass(slots=True, frozen=True)
class RemoteRecord:
    """
    One item as listed by the remote mirror.

    local_task_id is the back-reference written on push; it is None for items
    that were created directly in the remote system.
    """

    remote_id: str
    title: str
    description: str | None = None
    status: str | None = None
    priority: str | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    progress: int = 0
    assignee_initials: str | None = None
    category: str | None = None
    local_task_id: str | None = None

    def to_task_fields(self) -> dict[str, Any]:
        """Field set applied to the local task on pull (mirror wins)."""
        fields: dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "due_date": self.due_date,
            "progress": self.progress,
            "assignee_initials": self.assignee_initials,
            "category": self.category,
            "remote_id": self.remote_id,
        }
        if self.status:
            fields["status"] = self.status
        if self.priority:
            fields["priority"] = self.priority
        if self.completed_at is not None:
            fields["completed_at"] = self.completed_at
        return fields


def task_to_remote_fields(task: Task) -> dict[str, Any]:
    """Full field set pushed to the mirror for one task."""
    return {
        "Title": task.title,
        "Description": task.description,
        "Status": task.status.value,
        "Priority": task.priority.value,
        "DueDate": dt_to_str(task.due_date),
        "CompletedAt": dt_to_str(task.completed_at),
        "Progress": task.progress,
        "AssigneeInitials": task.assignee_initials,
        "Category": task.category,
        "LocalTaskId": task.id,
    }
