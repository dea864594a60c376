# src/futureboard/client/offline_cache.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from ..tasks.task_models import SyncOp, SyncQueueItem, Task, UserSettings, dt_from_str

logger = logging.getLogger(__name__)


class OfflineCache:
    """
    SQLite cache used by the client while the server is unreachable.

    Tables:
    - tasks: last known task list (JSON snapshots), pending=1 for local-only edits
    - sync_queue: mutations waiting for replay, FIFO by seq
    - id_map: offline task id -> server id, filled when a queued create replays and
      kept afterwards so callers holding an offline id still reach the task
    - settings: last known UserSettings snapshot (single row)

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "offline_cache.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info(
            "OfflineCache ready db=%s tasks=%s queued=%s",
            self._db_path,
            self.count_tasks(),
            self.queue_length(),
        )

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    pending INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS sync_queue (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    type TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    enqueued_at TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS id_map (
                    local_id TEXT PRIMARY KEY,
                    server_id TEXT NOT NULL
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task | None:
        try:
            return Task.from_dict(json.loads(row["data"]))
        except Exception:
            logger.exception("Dropping unreadable cached task id=%s", row["id"])
            return None

    # ---- tasks ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
        finally:
            conn.close()

    def replace_tasks(self, tasks: list[Task]) -> None:
        """Mirror the server list; local-only pending rows are kept."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM tasks WHERE pending = 0")
            conn.executemany(
                "INSERT OR IGNORE INTO tasks(id, data, pending) VALUES (?, ?, 0)",
                [(t.id, json.dumps(t.to_dict(), ensure_ascii=False)) for t in tasks],
            )
            conn.commit()
        finally:
            conn.close()

    def list_tasks(self) -> list[Task]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT id, data FROM tasks ORDER BY rowid ASC").fetchall()
        finally:
            conn.close()
        out = [self._row_to_task(r) for r in rows]
        return [t for t in out if t is not None]

    def get_task(self, task_id: str) -> Task | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT id, data FROM tasks WHERE id = ?", (task_id,)).fetchone()
        finally:
            conn.close()
        return self._row_to_task(row) if row else None

    def put_task(self, task: Task, *, pending: bool = False) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO tasks(id, data, pending) VALUES (?, ?, ?)",
                (task.id, json.dumps(task.to_dict(), ensure_ascii=False), 1 if pending else 0),
            )
            conn.commit()
        finally:
            conn.close()

    def delete_task(self, task_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
        finally:
            conn.close()

    # ---- sync queue ----

    def enqueue(self, op: SyncOp, payload: dict[str, Any], *, now: datetime) -> SyncQueueItem:
        item = SyncQueueItem(id=f"sync-{uuid.uuid4()}", type=op, payload=dict(payload), enqueued_at=now)
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT INTO sync_queue(id, type, payload, enqueued_at) VALUES (?, ?, ?, ?)",
                (item.id, op.value, json.dumps(payload, ensure_ascii=False, default=str), now.isoformat()),
            )
            conn.commit()
        finally:
            conn.close()
        logger.debug("Queued offline %s id=%s", op.value, item.id)
        return item

    def list_queue(self) -> list[SyncQueueItem]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM sync_queue ORDER BY seq ASC").fetchall()
        finally:
            conn.close()
        return [
            SyncQueueItem(
                id=r["id"],
                type=SyncOp(r["type"]),
                payload=json.loads(r["payload"]),
                enqueued_at=dt_from_str(r["enqueued_at"]),
            )
            for r in rows
        ]

    def queue_length(self) -> int:
        conn = self._get_conn()
        try:
            (n,) = conn.execute("SELECT COUNT(*) FROM sync_queue").fetchone()
            return int(n)
        finally:
            conn.close()

    def remove_queue_item(self, item_id: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM sync_queue WHERE id = ?", (item_id,))
            conn.commit()
        finally:
            conn.close()

    def clear_queue(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM sync_queue")
            conn.commit()
        finally:
            conn.close()

    # ---- offline id remapping ----

    def map_id(self, local_id: str, server_id: str) -> None:
        """Record that local_id became server_id and re-key its cached row."""
        conn = self._get_conn()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO id_map(local_id, server_id) VALUES (?, ?)",
                (local_id, server_id),
            )
            conn.execute("DELETE FROM tasks WHERE id = ?", (local_id,))
            conn.commit()
        finally:
            conn.close()

    def resolve_id(self, task_id: str) -> str:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT server_id FROM id_map WHERE local_id = ?", (task_id,)).fetchone()
        finally:
            conn.close()
        return str(row["server_id"]) if row else task_id

    # ---- settings ----

    def put_settings(self, settings: UserSettings) -> None:
        """Keep one snapshot: the server has a single settings record."""
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM settings")
            conn.execute(
                "INSERT INTO settings(id, data) VALUES (?, ?)",
                (settings.id, json.dumps(settings.to_dict(), ensure_ascii=False)),
            )
            conn.commit()
        finally:
            conn.close()

    def get_settings(self) -> UserSettings | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT id, data FROM settings LIMIT 1").fetchone()
        finally:
            conn.close()
        if row is None:
            return None
        try:
            return UserSettings.from_dict(json.loads(row["data"]))
        except Exception:
            logger.exception("Dropping unreadable cached settings id=%s", row["id"])
            return None
