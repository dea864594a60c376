# src/futureboard/tasks/lifecycle.py

"""
Task lifecycle engine.

Pure functions: they take the current task (or creation data) plus "now" and
return the next task value together with the history entry describing the change.
Nothing here touches storage; the store applies the result.

Rules:
- create: title required; status=backlog, priority=medium, progress=0 by default.
- update: entering "done" from another status stamps completed_at; completed_at is
  never cleared when the task later leaves "done".
- any patch carrying a status other than "in-progress" forces progress=0.
- archive: only flips is_archived (status and completed_at untouched).
- updated_at strictly increases on every mutation.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

from ..core.errors import ValidationError
from .task_models import (
    HistoryAction,
    NewHistoryEntry,
    Task,
    TaskPriority,
    TaskStatus,
    dt_from_str,
    to_attr_name,
)

MAX_INITIALS = 3

# Fields a caller may set through create/update.
EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "status",
        "priority",
        "due_date",
        "completed_at",
        "progress",
        "assignee_initials",
        "category",
        "remote_id",
        "last_synced_at",
    }
)


@dataclass(slots=True, frozen=True)
class Mutation:
    task: Task
    history: NewHistoryEntry


def new_task_id() -> str:
    return str(uuid.uuid4())


def _next_stamp(previous: datetime, now: datetime) -> datetime:
    if now > previous:
        return now
    return previous + timedelta(microseconds=1)


def _clean_title(raw: Any) -> str:
    title = str(raw or "").strip()
    if not title:
        raise ValidationError("title is required")
    return title


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw).strip()
    return s or None


def _status(raw: Any) -> TaskStatus:
    try:
        return TaskStatus(raw)
    except ValueError:
        raise ValidationError(f"invalid status: {raw!r}") from None


def _priority(raw: Any) -> TaskPriority:
    try:
        return TaskPriority(raw)
    except ValueError:
        raise ValidationError(f"invalid priority: {raw!r}") from None


def _progress(raw: Any) -> int:
    try:
        value = int(raw if raw is not None else 0)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid progress: {raw!r}") from None
    if not 0 <= value <= 100:
        raise ValidationError("progress must be between 0 and 100")
    return value


def _initials(raw: Any) -> str | None:
    value = _opt_str(raw)
    if value is not None and len(value) > MAX_INITIALS:
        raise ValidationError(f"assignee initials must be at most {MAX_INITIALS} characters")
    return value


def _instant(name: str, raw: Any) -> datetime | None:
    try:
        return dt_from_str(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {name}: {raw!r}") from None


def normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """
    Validate a create/update payload and convert it to attribute names and types.

    Accepts wire keys (dueDate) or attribute keys (due_date). Unknown keys are
    rejected; keys like id/createdAt/updatedAt/isArchived are silently ignored since
    clients commonly echo whole task snapshots back.
    """
    out: dict[str, Any] = {}
    for key, raw in patch.items():
        name = to_attr_name(key)
        if name in ("id", "created_at", "updated_at", "is_archived"):
            continue
        if name not in EDITABLE_FIELDS:
            raise ValidationError(f"unknown task field: {key}")

        if name == "title":
            out[name] = _clean_title(raw)
        elif name == "status":
            out[name] = _status(raw)
        elif name == "priority":
            out[name] = _priority(raw)
        elif name == "progress":
            out[name] = _progress(raw)
        elif name == "assignee_initials":
            out[name] = _initials(raw)
        elif name in ("due_date", "completed_at", "last_synced_at"):
            out[name] = _instant(name, raw)
        else:
            out[name] = _opt_str(raw)
    return out


def create_task(data: dict[str, Any], *, now: datetime, task_id: str | None = None) -> Mutation:
    fields = normalize_patch(data)
    if "title" not in fields:
        raise ValidationError("title is required")

    status = fields.get("status", TaskStatus.BACKLOG)
    progress = fields.get("progress", 0) if status == TaskStatus.IN_PROGRESS else 0
    completed_at = fields.get("completed_at")
    if completed_at is None and status == TaskStatus.DONE:
        completed_at = now

    task = Task(
        id=task_id or new_task_id(),
        title=fields["title"],
        created_at=now,
        updated_at=now,
        description=fields.get("description"),
        status=status,
        priority=fields.get("priority", TaskPriority.MEDIUM),
        due_date=fields.get("due_date"),
        completed_at=completed_at,
        progress=progress,
        assignee_initials=fields.get("assignee_initials"),
        category=fields.get("category"),
        is_archived=False,
        remote_id=fields.get("remote_id"),
        last_synced_at=None,
    )
    history = NewHistoryEntry(
        task_id=task.id,
        action=HistoryAction.CREATED,
        previous_data=None,
        new_data=task.to_dict(),
    )
    return Mutation(task=task, history=history)


def update_task(
    existing: Task,
    patch: dict[str, Any],
    *,
    now: datetime,
    mark_synced: bool = False,
) -> Mutation:
    """
    Merge patch over existing.

    mark_synced=True sets last_synced_at to the new updated_at, so the result
    does not count as a local change waiting to be pushed.
    """
    fields = normalize_patch(patch)
    explicit_completed = fields.pop("completed_at", None)

    stamp = _next_stamp(existing.updated_at, now)
    updated = replace(existing, **fields, updated_at=stamp)

    if fields.get("status") == TaskStatus.DONE and existing.status != TaskStatus.DONE:
        updated.completed_at = now
    if explicit_completed is not None:
        updated.completed_at = explicit_completed

    if "status" in fields and fields["status"] != TaskStatus.IN_PROGRESS:
        updated.progress = 0

    if mark_synced:
        updated.last_synced_at = stamp

    history = NewHistoryEntry(
        task_id=existing.id,
        action=HistoryAction.UPDATED,
        previous_data=existing.to_dict(),
        new_data=updated.to_dict(),
    )
    return Mutation(task=updated, history=history)


def archive_task(existing: Task, *, now: datetime) -> Mutation:
    # Re-archiving is allowed and still logged.
    archived = replace(existing, is_archived=True, updated_at=_next_stamp(existing.updated_at, now))
    history = NewHistoryEntry(
        task_id=existing.id,
        action=HistoryAction.ARCHIVED,
        previous_data=existing.to_dict(),
        new_data=archived.to_dict(),
    )
    return Mutation(task=archived, history=history)


def mark_synced(existing: Task, *, remote_id: str | None, now: datetime) -> Mutation:
    patch: dict[str, Any] = {}
    if remote_id:
        patch["remote_id"] = remote_id
    return update_task(existing, patch, now=now, mark_synced=True)
