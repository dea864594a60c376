# src/futureboard/tasks/task_api.py

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..core.errors import NotFoundError, RemoteSyncError, ValidationError
from ..sync.mirror_sync import MirrorSync, SyncReport
from . import board
from .board import BoardStats
from .rollover import RolloverResult, RolloverScheduler, perform_rollover
from .settings_store import SettingsStore
from .task_models import Task, TaskHistoryEntry, TaskStatus, UserSettings
from .task_store import TaskStore

logger = logging.getLogger(__name__)


class BoardService:
    """
    The seam a transport layer calls into (one method per REST route).

    Local mutations succeed or fail on their own; the mirror push that follows
    a create/update is best-effort and only logged when it fails.
    """

    def __init__(
        self,
        store: TaskStore,
        settings_store: SettingsStore,
        *,
        mirror_sync: MirrorSync | None = None,
        scheduler: RolloverScheduler | None = None,
    ) -> None:
        self.store = store
        self.settings_store = settings_store
        self.mirror_sync = mirror_sync
        self.scheduler = scheduler

    # ---- helpers ----

    def _require(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def _push_best_effort(self, task: Task) -> Task:
        sync = self.mirror_sync
        if sync is None or not self.settings_store.get_or_create().enable_offline_sync:
            return task
        try:
            return await sync.push_task(task)
        except RemoteSyncError:
            logger.exception("Mirror sync failed task_id=%s", task.id)
            return task

    def resolve_task_id(self, ref: str) -> str:
        """Accept a full id or an unambiguous id prefix (CLI convenience)."""
        ref = (ref or "").strip()
        if not ref:
            raise ValidationError("task id is required")
        if self.store.get_task(ref) is not None:
            return ref
        matches = [t.id for t in self.store.all_tasks() if t.id.startswith(ref)]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise ValidationError(f"ambiguous task id prefix: {ref}")
        raise NotFoundError(ref)

    # ---- tasks ----

    def list_tasks(self) -> list[Task]:
        return self.store.list_tasks()

    def list_by_status(self, status: TaskStatus | str) -> list[Task]:
        return self.store.list_by_status(status)

    def get_task(self, task_id: str) -> Task:
        return self._require(task_id)

    async def create_task(self, data: dict[str, Any]) -> Task:
        task = self.store.create_task(data)
        logger.info("Task created id=%s title=%r", task.id, task.title)
        return await self._push_best_effort(task)

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> Task:
        task = self.store.update_task(task_id, patch)
        if task is None:
            raise NotFoundError(task_id)
        return await self._push_best_effort(task)

    def archive_task(self, task_id: str) -> Task:
        task = self.store.archive_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def delete_task(self, task_id: str) -> None:
        task = self._require(task_id)

        if task.remote_id and self.mirror_sync is not None:
            try:
                await self.mirror_sync.mirror.delete(task.remote_id)
            except Exception:
                logger.exception("Mirror deletion failed task_id=%s remote_id=%s", task_id, task.remote_id)

        if not self.store.delete_task(task_id):
            raise NotFoundError(task_id)
        logger.info("Task deleted id=%s", task_id)

    def task_history(self, task_id: str) -> list[TaskHistoryEntry]:
        return self.store.history.list_for_task(task_id)

    def completed_tasks(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Task]:
        return self.store.list_completed(start, end)

    # ---- board views ----

    def active_today(self) -> list[Task]:
        return board.active_today(self.store.all_tasks(), self.store.now())

    def scheduled(self) -> list[Task]:
        return board.scheduled(self.store.all_tasks(), self.store.now())

    def stats(self) -> BoardStats:
        return board.compute_stats(self.store, self.store.now())

    # ---- settings ----

    def get_settings(self) -> UserSettings:
        return self.settings_store.get_or_create()

    def update_settings(self, patch: dict[str, Any]) -> UserSettings:
        return self.settings_store.update(patch)

    # ---- maintenance ----

    async def sync_now(self) -> SyncReport:
        if self.mirror_sync is None:
            raise RemoteSyncError("no remote mirror configured")
        return await self.mirror_sync.sync()

    async def rollover_now(self) -> RolloverResult | None:
        """Manual rollover. None means a scheduled pass was already running."""
        if self.scheduler is not None:
            return await self.scheduler.force_rollover()
        return perform_rollover(self.store, self.settings_store, now=self.store.now())
