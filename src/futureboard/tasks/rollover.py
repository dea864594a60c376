# src/futureboard/tasks/rollover.py

from __future__ import annotations

"""
Daily rollover scheduler.

A small polling loop that, once per day at the configured local HH:MM:
- archives every done task that is still on the board,
- records last_rollover_at,
- optionally runs a mirror sync pass afterwards.

The target is a wall-clock time, so polling only has to be finer than the
tolerated delay (hourly by default). The decision rule

    now >= target_today and (last_rollover_at is None or last_rollover_at < target_today)

fires at most once per day across ticks and restarts, and still fires on the
next tick when the process starts after the target time.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..core.errors import SchedulerError, ValidationError
from ..sync.mirror_sync import MirrorSync
from .settings_store import SettingsStore, validate_rollover_time
from .task_models import TaskStatus, UserSettings
from .task_store import TaskStore

logger = logging.getLogger(__name__)

DEFAULT_ROLLOVER_TIME = "00:00"


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(slots=True, frozen=True)
class RolloverResult:
    rolled_over: int
    archived: int

    def to_dict(self) -> dict[str, Any]:
        return {"rolledOver": self.rolled_over, "archived": self.archived}


def parse_rollover_time(raw: str | None) -> tuple[int, int]:
    value = validate_rollover_time(raw or DEFAULT_ROLLOVER_TIME)
    hours, minutes = value.split(":")
    return int(hours), int(minutes)


def target_time_today(now: datetime, rollover_time: str | None) -> datetime:
    try:
        hours, minutes = parse_rollover_time(rollover_time)
    except ValidationError:
        logger.warning("Bad daily rollover time %r; using %s", rollover_time, DEFAULT_ROLLOVER_TIME)
        hours, minutes = 0, 0
    return now.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def should_rollover(now: datetime, settings: UserSettings) -> bool:
    target = target_time_today(now, settings.daily_rollover_time)
    last = settings.last_rollover_at
    return now >= target and (last is None or last < target)


def perform_rollover(store: TaskStore, settings_store: SettingsStore, *, now: datetime) -> RolloverResult:
    """Archive done tasks and record the rollover time. Unconditional."""
    completed = [t for t in store.all_tasks() if t.status == TaskStatus.DONE and not t.is_archived]

    archived = 0
    for task in completed:
        if store.archive_task(task.id) is not None:
            archived += 1

    rolled_over = sum(1 for t in store.all_tasks() if t.status != TaskStatus.DONE and not t.is_archived)

    settings_store.update({"last_rollover_at": now})
    return RolloverResult(rolled_over=rolled_over, archived=archived)


class RolloverScheduler:
    """
    Polling scheduler with an explicit idle/running guard.

    A pass that finds the scheduler already running is skipped, never queued.
    stop() cancels future ticks only; a pass in flight runs to completion.
    """

    def __init__(
        self,
        store: TaskStore,
        settings_store: SettingsStore,
        *,
        mirror_sync: MirrorSync | None = None,
        interval_seconds: float = 3600.0,
    ) -> None:
        self._store = store
        self._settings = settings_store
        self._sync = mirror_sync
        self._interval = max(0.01, float(interval_seconds))
        self._state = SchedulerState.IDLE
        self._stop = asyncio.Event()
        self._runner: asyncio.Task[None] | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._runner is not None and not self._runner.done()

    async def _run_pass(self, *, force: bool) -> RolloverResult | None:
        settings = self._settings.get_or_create()
        now = self._store.now()

        if not force and not should_rollover(now, settings):
            return None

        logger.info("Performing daily task rollover...")
        try:
            result = perform_rollover(self._store, self._settings, now=now)
        except Exception as e:
            raise SchedulerError("rollover pass failed") from e
        logger.info(
            "Rollover complete: %s tasks rolled over, %s tasks archived",
            result.rolled_over,
            result.archived,
        )

        if self._sync is not None and settings.enable_offline_sync:
            try:
                await self._sync.sync()
            except Exception:
                logger.exception("Mirror sync after rollover failed")

        return result

    async def _guarded(self, *, force: bool) -> RolloverResult | None:
        if self._state == SchedulerState.RUNNING:
            logger.debug("Rollover pass already running; skipping")
            return None

        self._state = SchedulerState.RUNNING
        try:
            return await self._run_pass(force=force)
        finally:
            self._state = SchedulerState.IDLE

    async def check_and_rollover(self) -> RolloverResult | None:
        """
        One scheduler tick. Returns the result when the rollover fired, else None.

        Errors are logged, never raised: the next tick re-evaluates from scratch.
        """
        try:
            return await self._guarded(force=False)
        except Exception:
            logger.exception("Error during daily rollover")
            return None

    async def force_rollover(self) -> RolloverResult | None:
        """Manual rollover (ignores the time rule). Raises SchedulerError on failure."""
        return await self._guarded(force=True)

    async def run(self) -> None:
        """Check immediately, then every interval_seconds until stop()."""
        logger.info("Rollover scheduler started (interval=%.0fs)", self._interval)
        while not self._stop.is_set():
            await self.check_and_rollover()
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Rollover scheduler stopped")

    def start(self) -> asyncio.Task[None]:
        runner = self._runner
        if runner is not None and not runner.done():
            return runner
        self._stop = asyncio.Event()
        self._runner = asyncio.create_task(self.run(), name="rollover-scheduler")
        return self._runner

    def stop(self) -> None:
        self._stop.set()

    async def wait_closed(self) -> None:
        if self._runner is not None:
            await self._runner
            self._runner = None
