# src/futureboard/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from . import lifecycle
from .history import HistoryLog
from .lifecycle import Mutation
from .task_models import Task, TaskStatus

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


class TaskStore:
    """
    In-memory task store.

    Construct one per process (or per test) and pass it around; there is no
    module-level instance. Field derivation is delegated to the lifecycle engine,
    the store only persists the result and appends the matching history entry.

    Concurrency:
    - no internal locking; callers run mutations to completion one at a time.

    Missing ids are reported as None / False, never raised.
    """

    def __init__(self, history: HistoryLog | None = None, *, clock: Clock = local_now) -> None:
        self._tasks: dict[str, Task] = {}
        self.history = history if history is not None else HistoryLog()
        self._clock = clock
        logger.info("TaskStore ready (in-memory)")

    # ---- low-level helpers ----

    def now(self) -> datetime:
        return self._clock()

    def _apply(self, mutation: Mutation) -> Task:
        task = mutation.task
        self._tasks[task.id] = task
        self.history.append(mutation.history, timestamp=task.updated_at)
        return task

    # ---- queries ----

    def count_tasks(self) -> int:
        return len(self._tasks)

    def all_tasks(self) -> list[Task]:
        """Every task, archived ones included."""
        return list(self._tasks.values())

    def list_tasks(self) -> list[Task]:
        """Active-board tasks (archived excluded)."""
        return [t for t in self._tasks.values() if not t.is_archived]

    def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def list_by_status(self, status: TaskStatus | str) -> list[Task]:
        return [t for t in self._tasks.values() if t.status == status and not t.is_archived]

    def list_completed(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Task]:
        """
        Done tasks with a completion stamp, archived ones included.

        start/end are inclusive bounds on completed_at.
        """
        out: list[Task] = []
        for t in self._tasks.values():
            if t.status != TaskStatus.DONE or t.completed_at is None:
                continue
            if start is not None and t.completed_at < start:
                continue
            if end is not None and t.completed_at > end:
                continue
            out.append(t)
        return out

    # ---- mutations ----

    def create_task(self, data: dict[str, Any]) -> Task:
        task = self._apply(lifecycle.create_task(data, now=self.now()))
        logger.debug("Task created id=%s status=%s", task.id, task.status.value)
        return task

    def update_task(self, task_id: str, patch: dict[str, Any]) -> Task | None:
        existing = self._tasks.get(task_id)
        if existing is None:
            return None
        task = self._apply(lifecycle.update_task(existing, patch, now=self.now()))
        logger.debug("Task updated id=%s status=%s", task.id, task.status.value)
        return task

    def apply_remote(self, task_id: str, patch: dict[str, Any]) -> Task | None:
        """Overwrite fields with mirror values and stamp the task as synced."""
        existing = self._tasks.get(task_id)
        if existing is None:
            return None
        return self._apply(lifecycle.update_task(existing, patch, now=self.now(), mark_synced=True))

    def mark_synced(self, task_id: str, remote_id: str | None) -> Task | None:
        existing = self._tasks.get(task_id)
        if existing is None:
            return None
        return self._apply(lifecycle.mark_synced(existing, remote_id=remote_id, now=self.now()))

    def archive_task(self, task_id: str) -> Task | None:
        existing = self._tasks.get(task_id)
        if existing is None:
            return None
        task = self._apply(lifecycle.archive_task(existing, now=self.now()))
        logger.debug("Task archived id=%s", task.id)
        return task

    def delete_task(self, task_id: str) -> bool:
        # History entries are kept.
        removed = self._tasks.pop(task_id, None) is not None
        if removed:
            logger.debug("Task deleted id=%s", task_id)
        return removed

    def reset(self) -> None:
        self._tasks.clear()
        self.history.clear()
