# src/futureboard/client/offline_client.py

from __future__ import annotations

"""
Offline-capable task client.

Reads and writes go to the network first. When the server cannot be reached:
- reads fall back to the local cache,
- writes are applied to the cache with the same lifecycle rules the server uses,
  and the mutation is appended to the sync queue.

The queue is replayed strictly in order when connectivity returns. Replay stops
at the first failure and resumes from that item on the next trigger.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.errors import NotFoundError, RemoteSyncError
from ..core.ports import TaskApi
from ..tasks import lifecycle
from ..tasks.task_models import SyncOp, SyncQueueItem, Task, UserSettings, dt_to_str
from ..tasks.task_store import local_now
from .offline_cache import OfflineCache

logger = logging.getLogger(__name__)

OFFLINE_ID_PREFIX = "offline-"


@dataclass(slots=True, frozen=True)
class DrainResult:
    replayed: int
    remaining: int

    @property
    def complete(self) -> bool:
        return self.remaining == 0


def to_wire(payload: dict[str, Any]) -> dict[str, Any]:
    """Make a payload JSON-safe (datetimes as ISO strings, enums as values)."""
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if isinstance(value, datetime):
            value = dt_to_str(value)
        elif isinstance(value, StrEnum):
            value = value.value
        out[key] = value
    return out


class OfflineTaskClient:
    def __init__(
        self,
        api: TaskApi,
        cache: OfflineCache,
        *,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self._api = api
        self._cache = cache
        self._clock = clock
        self._online = True
        self._draining = False

    @property
    def online(self) -> bool:
        return self._online

    @property
    def cache(self) -> OfflineCache:
        return self._cache

    def pending_mutations(self) -> list[SyncQueueItem]:
        return self._cache.list_queue()

    def _went_offline(self, exc: Exception) -> None:
        if self._online:
            logger.warning("Server unreachable, working offline: %s", exc)
        self._online = False

    async def _came_online(self) -> None:
        """A request got through; leaving offline mode replays whatever is queued."""
        if self._online:
            return
        self._online = True
        logger.info("Server reachable again")
        if self._cache.queue_length():
            await self.drain_queue()

    async def _queue_first(self) -> bool:
        """True when earlier offline mutations are still waiting (new writes must queue behind them)."""
        if self._cache.queue_length() == 0:
            return False
        result = await self.drain_queue()
        return result is None or not result.complete

    # ---- reads ----

    async def list_tasks(self) -> list[Task]:
        # Queued mutations replay before the server view replaces the cache,
        # otherwise a queued delete would come back from the server list.
        if await self._queue_first():
            logger.info("Using offline storage for tasks (%s queued)", self._cache.queue_length())
            return self._cache.list_tasks()

        try:
            raw = await self._api.list_tasks()
            tasks = [Task.from_dict(d) for d in raw]
        except (RemoteSyncError, KeyError, ValueError) as e:
            self._went_offline(e)
            logger.info("Using offline storage for tasks")
            return self._cache.list_tasks()

        await self._came_online()
        self._cache.replace_tasks(tasks)
        return self._cache.list_tasks()

    async def get_settings(self) -> UserSettings | None:
        """Server settings, or the last cached copy while offline (None if never fetched)."""
        try:
            settings = UserSettings.from_dict(await self._api.get_settings())
        except (RemoteSyncError, KeyError, ValueError) as e:
            self._went_offline(e)
            logger.info("Using offline storage for settings")
            return self._cache.get_settings()

        await self._came_online()
        self._cache.put_settings(settings)
        return settings

    # ---- writes ----

    async def create_task(self, payload: dict[str, Any]) -> Task:
        payload = to_wire(payload)
        # Validates before anything leaves the client.
        task = lifecycle.create_task(
            payload,
            now=self._clock(),
            task_id=f"{OFFLINE_ID_PREFIX}{uuid.uuid4()}",
        ).task

        if not await self._queue_first():
            try:
                created = Task.from_dict(await self._api.create_task(payload))
                self._online = True
                self._cache.put_task(created)
                return created
            except RemoteSyncError as e:
                self._went_offline(e)

        self._cache.put_task(task, pending=True)
        self._cache.enqueue(SyncOp.CREATE, {**payload, "id": task.id}, now=self._clock())
        return task

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> Task:
        patch = to_wire(patch)
        lifecycle.normalize_patch(patch)
        # Resolve after the drain: replaying a queued create maps its offline id.
        queued = await self._queue_first()
        task_id = self._cache.resolve_id(task_id)
        if not queued:
            try:
                task = Task.from_dict(await self._api.update_task(task_id, patch))
                self._online = True
                self._cache.put_task(task)
                return task
            except RemoteSyncError as e:
                self._went_offline(e)

        existing = self._cache.get_task(task_id)
        if existing is None:
            raise NotFoundError(task_id)
        task = lifecycle.update_task(existing, patch, now=self._clock()).task
        self._cache.put_task(task, pending=True)
        self._cache.enqueue(SyncOp.UPDATE, {**patch, "id": task_id}, now=self._clock())
        return task

    async def delete_task(self, task_id: str) -> None:
        queued = await self._queue_first()
        task_id = self._cache.resolve_id(task_id)
        if not queued:
            try:
                await self._api.delete_task(task_id)
                self._online = True
                self._cache.delete_task(task_id)
                return
            except RemoteSyncError as e:
                self._went_offline(e)

        self._cache.delete_task(task_id)
        self._cache.enqueue(SyncOp.DELETE, {"id": task_id}, now=self._clock())

    # ---- replay ----

    async def _replay(self, item: SyncQueueItem) -> None:
        payload = dict(item.payload)
        local_id = str(payload.pop("id", "") or "")

        if item.type == SyncOp.CREATE:
            created = Task.from_dict(await self._api.create_task(payload))
            if local_id and local_id != created.id:
                self._cache.map_id(local_id, created.id)
            self._cache.put_task(created)
            return

        task_id = self._cache.resolve_id(local_id)
        if item.type == SyncOp.UPDATE:
            updated = Task.from_dict(await self._api.update_task(task_id, payload))
            self._cache.put_task(updated)
        elif item.type == SyncOp.DELETE:
            await self._api.delete_task(task_id)
            self._cache.delete_task(task_id)

    async def drain_queue(self) -> DrainResult | None:
        """
        Replay queued mutations in order.

        Returns None when a drain is already in progress.
        """
        if self._draining:
            logger.debug("Sync queue drain already running; skipping")
            return None

        self._draining = True
        replayed = 0
        try:
            queue = self._cache.list_queue()
            for item in queue:
                try:
                    await self._replay(item)
                except Exception as e:
                    logger.warning(
                        "Sync failed for queued %s id=%s; stopping to keep order: %s",
                        item.type.value,
                        item.id,
                        e,
                    )
                    self._went_offline(e)
                    return DrainResult(replayed=replayed, remaining=len(queue) - replayed)

                self._cache.remove_queue_item(item.id)
                replayed += 1

            self._cache.clear_queue()
            self._online = True
            if replayed:
                logger.info("Sync queue drained: %s mutations replayed", replayed)
            return DrainResult(replayed=replayed, remaining=0)
        finally:
            self._draining = False

    async def set_online(self, online: bool) -> DrainResult | None:
        """Connectivity hook; an offline -> online transition drains the queue."""
        was_online = self._online
        self._online = online
        if online and not was_online:
            logger.info("Back online, replaying queued mutations")
            return await self.drain_queue()
        return None
