# src/futureboard/tasks/board.py

"""
Board views computed from the store.

Every task falls into exactly one of:
- archived
- active today: not archived, and no due date or due by the end of today (local)
- scheduled: not archived, due after the end of today
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from .task_models import Task, TaskStatus
from .task_store import TaskStore


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_today(now: datetime) -> datetime:
    return now.replace(hour=23, minute=59, second=59, microsecond=999999)


def active_today(tasks: Iterable[Task], now: datetime) -> list[Task]:
    cutoff = end_of_today(now)
    return [
        t for t in tasks
        if not t.is_archived and (t.due_date is None or t.due_date <= cutoff)
    ]


def scheduled(tasks: Iterable[Task], now: datetime) -> list[Task]:
    cutoff = end_of_today(now)
    out = [t for t in tasks if not t.is_archived and t.due_date is not None and t.due_date > cutoff]
    out.sort(key=lambda t: t.due_date or cutoff)
    return out


def archived(tasks: Iterable[Task]) -> list[Task]:
    return [t for t in tasks if t.is_archived]


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Kanban columns in board order."""
    columns: dict[TaskStatus, list[Task]] = {s: [] for s in TaskStatus}
    for t in tasks:
        columns[t.status].append(t)
    return columns


@dataclass(slots=True, frozen=True)
class BoardStats:
    today_completed: int
    weekly_average: float
    tasks_by_status: dict[str, int]
    total_tasks: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "todayCompleted": self.today_completed,
            "weeklyAverage": self.weekly_average,
            "tasksByStatus": dict(self.tasks_by_status),
            "totalTasks": self.total_tasks,
        }


def compute_stats(store: TaskStore, now: datetime) -> BoardStats:
    today = start_of_day(now)
    tomorrow = today + timedelta(days=1)
    week_ago = today - timedelta(days=7)

    # list_completed bounds are inclusive; both windows here are half-open.
    just_before = timedelta(microseconds=1)
    today_completed = len(store.list_completed(today, tomorrow - just_before))
    week_completed = len(store.list_completed(week_ago, today - just_before))

    active = store.list_tasks()
    by_status = {s.value: 0 for s in TaskStatus}
    for t in active:
        by_status[t.status.value] += 1

    return BoardStats(
        today_completed=today_completed,
        weekly_average=round(week_completed / 7, 1),
        tasks_by_status=by_status,
        total_tasks=len(active),
    )
