# src/futureboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    """
    Kanban column a task lives in.

    Notes:
    - "review" is accepted everywhere but the default board UI never moves a task there.
    """

    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"

    @classmethod
    def parse(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.BACKLOG
        try:
            return cls(raw)
        except Exception:
            return cls.BACKLOG


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | None) -> TaskPriority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except Exception:
            return cls.MEDIUM


class HistoryAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    ARCHIVED = "archived"


class SyncOp(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def dt_to_str(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def dt_from_str(raw: Any) -> datetime | None:
    """Parse an ISO-8601 instant; naive values are read as local time."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        s = str(raw).strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


# Wire (camelCase) name -> attribute name.
_WIRE_FIELDS: dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "dueDate": "due_date",
    "completedAt": "completed_at",
    "progress": "progress",
    "assigneeInitials": "assignee_initials",
    "category": "category",
    "isArchived": "is_archived",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "remoteId": "remote_id",
    "lastSyncedAt": "last_synced_at",
}

_INSTANT_FIELDS = frozenset(
    {"due_date", "completed_at", "created_at", "updated_at", "last_synced_at"}
)


def to_attr_name(key: str) -> str:
    """Accept both wire names (dueDate) and attribute names (due_date)."""
    return _WIRE_FIELDS.get(key, key)


@dataclass(slots=True)
class Task:
    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    description: str | None = None
    status: TaskStatus = TaskStatus.BACKLOG
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    completed_at: datetime | None = None
    progress: int = 0
    assignee_initials: str | None = None
    category: str | None = None
    is_archived: bool = False

    # External mirror bookkeeping
    remote_id: str | None = None
    last_synced_at: datetime | None = None

    def needs_sync(self) -> bool:
        return self.last_synced_at is None or self.updated_at > self.last_synced_at

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe snapshot using the wire (camelCase) keys."""
        out: dict[str, Any] = {}
        for wire, attr in _WIRE_FIELDS.items():
            val = getattr(self, attr)
            if attr in _INSTANT_FIELDS:
                val = dt_to_str(val)
            elif isinstance(val, StrEnum):
                val = val.value
            out[wire] = val
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        raw = {to_attr_name(k): v for k, v in data.items()}
        created_at = dt_from_str(raw.get("created_at"))
        updated_at = dt_from_str(raw.get("updated_at"))
        if created_at is None or updated_at is None:
            raise ValueError("task snapshot is missing createdAt/updatedAt")
        return cls(
            id=str(raw["id"]),
            title=str(raw.get("title") or ""),
            created_at=created_at,
            updated_at=updated_at,
            description=raw.get("description"),
            status=TaskStatus.parse(raw.get("status")),
            priority=TaskPriority.parse(raw.get("priority")),
            due_date=dt_from_str(raw.get("due_date")),
            completed_at=dt_from_str(raw.get("completed_at")),
            progress=int(raw.get("progress") or 0),
            assignee_initials=raw.get("assignee_initials"),
            category=raw.get("category"),
            is_archived=bool(raw.get("is_archived") or False),
            remote_id=raw.get("remote_id"),
            last_synced_at=dt_from_str(raw.get("last_synced_at")),
        )


@dataclass(slots=True, frozen=True)
class NewHistoryEntry:
    """History record produced by the lifecycle engine, not yet stamped by the log."""

    task_id: str
    action: HistoryAction
    previous_data: dict[str, Any] | None
    new_data: dict[str, Any]


@dataclass(slots=True, frozen=True)
class TaskHistoryEntry:
    id: str
    seq: int
    task_id: str
    action: HistoryAction
    previous_data: dict[str, Any] | None
    new_data: dict[str, Any]
    timestamp: datetime


@dataclass(slots=True)
class UserSettings:
    id: str
    created_at: datetime
    updated_at: datetime

    theme: str = "nebula-purple"
    daily_rollover_time: str = "00:00"
    enable_notifications: bool = True
    enable_offline_sync: bool = True
    last_rollover_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "theme": self.theme,
            "dailyRolloverTime": self.daily_rollover_time,
            "enableNotifications": self.enable_notifications,
            "enableOfflineSync": self.enable_offline_sync,
            "lastRolloverAt": dt_to_str(self.last_rollover_at),
            "createdAt": dt_to_str(self.created_at),
            "updatedAt": dt_to_str(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserSettings:
        created_at = dt_from_str(data.get("createdAt"))
        updated_at = dt_from_str(data.get("updatedAt"))
        if created_at is None or updated_at is None:
            raise ValueError("settings snapshot is missing createdAt/updatedAt")
        return cls(
            id=str(data["id"]),
            created_at=created_at,
            updated_at=updated_at,
            theme=str(data.get("theme") or "nebula-purple"),
            daily_rollover_time=str(data.get("dailyRolloverTime") or "00:00"),
            enable_notifications=bool(data.get("enableNotifications", True)),
            enable_offline_sync=bool(data.get("enableOfflineSync", True)),
            last_rollover_at=dt_from_str(data.get("lastRolloverAt") or data.get("lastRollover")),
        )


@dataclass(slots=True, frozen=True)
class SyncQueueItem:
    id: str
    type: SyncOp
    payload: dict[str, Any] = field(default_factory=dict)
    enqueued_at: datetime | None = None
