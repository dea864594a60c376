# src/futureboard/sync/mirror_sync.py

from __future__ import annotations

"""
Two-way reconciliation between the local store and a remote mirror.

One pass:
1. push: every task whose updated_at is newer than last_synced_at (or never synced)
   is sent to the mirror; the returned remote id and a fresh sync stamp are stored.
2. pull: every mirror record is resolved to a local task (back-reference first,
   then remote id) and overwrites it; unlinked records become new local tasks.

Known limitation (accepted, last-write-wins): pull runs after push without any
timestamp comparison, so a concurrent remote edit overwrites a change pushed a
moment earlier in the same pass.
"""

import logging
from dataclasses import dataclass

from ..core.errors import RemoteSyncError
from ..core.ports import RemoteMirror
from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore
from .mirror import RemoteRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncReport:
    pushed: int = 0
    push_failed: int = 0
    pulled_updated: int = 0
    pulled_created: int = 0
    pull_failed: int = 0
    skipped: int = 0


class MirrorSync:
    def __init__(self, store: TaskStore, mirror: RemoteMirror) -> None:
        self._store = store
        self._mirror = mirror

    @property
    def mirror(self) -> RemoteMirror:
        return self._mirror

    async def push_task(self, task: Task) -> Task:
        """Push one task and stamp it as synced. Raises RemoteSyncError."""
        try:
            remote_id = await self._mirror.push(task)
        except RemoteSyncError:
            raise
        except Exception as e:
            raise RemoteSyncError(f"push failed for task {task.id}: {e}") from e

        synced = self._store.mark_synced(task.id, remote_id)
        # Deleted while the push was in flight.
        return synced if synced is not None else task

    async def push_changes(self, report: SyncReport) -> None:
        dirty = [t for t in self._store.all_tasks() if t.needs_sync()]
        for task in dirty:
            try:
                await self.push_task(task)
                report.pushed += 1
            except Exception:
                report.push_failed += 1
                logger.exception("Mirror push failed task_id=%s", task.id)

    def _resolve(self, record: RemoteRecord) -> Task | None:
        if record.local_task_id:
            return self._store.get_task(record.local_task_id)
        for t in self._store.all_tasks():
            if t.remote_id == record.remote_id:
                return t
        return None

    def _pull_record(self, record: RemoteRecord, report: SyncReport) -> None:
        local = self._resolve(record)

        if local is not None:
            self._store.apply_remote(local.id, record.to_task_fields())
            report.pulled_updated += 1
            return

        if record.local_task_id:
            # Back-reference to a task deleted locally: leave it alone.
            logger.debug(
                "Mirror record %s points at missing task %s; skipping",
                record.remote_id,
                record.local_task_id,
            )
            report.skipped += 1
            return

        fields = record.to_task_fields()
        fields.pop("remote_id", None)
        created = self._store.create_task(fields)
        self._store.mark_synced(created.id, record.remote_id)
        report.pulled_created += 1
        logger.info("Imported mirror record %s as task %s", record.remote_id, created.id)

    async def pull_changes(self, report: SyncReport) -> None:
        try:
            records = await self._mirror.list_all()
        except RemoteSyncError:
            raise
        except Exception as e:
            raise RemoteSyncError(f"mirror listing failed: {e}") from e

        for record in records:
            try:
                self._pull_record(record, report)
            except Exception:
                report.pull_failed += 1
                logger.exception("Mirror pull failed remote_id=%s", record.remote_id)

    async def sync(self) -> SyncReport:
        """
        Run one full pass. A failed listing aborts the pass with RemoteSyncError;
        per-task failures are logged and counted.
        """
        report = SyncReport()
        logger.info("Mirror sync started")
        await self.push_changes(report)
        await self.pull_changes(report)
        logger.info(
            "Mirror sync completed pushed=%s push_failed=%s updated=%s created=%s failed=%s",
            report.pushed,
            report.push_failed,
            report.pulled_updated,
            report.pulled_created,
            report.pull_failed,
        )
        return report
