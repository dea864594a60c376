# tests/test_offline_cache.py

from __future__ import annotations

from pathlib import Path

from futureboard.client.offline_cache import OfflineCache
from futureboard.tasks import lifecycle
from futureboard.tasks.settings_store import SettingsStore
from futureboard.tasks.task_models import SyncOp

from .fakes import FrozenClock


def test_queue_is_fifo_and_durable(tmp_path: Path, clock: FrozenClock) -> None:
    path = tmp_path / "cache.sqlite3"
    cache = OfflineCache(path)
    a = cache.enqueue(SyncOp.CREATE, {"id": "offline-1", "title": "A"}, now=clock())
    b = cache.enqueue(SyncOp.UPDATE, {"id": "offline-1", "status": "done"}, now=clock())
    cache.enqueue(SyncOp.DELETE, {"id": "offline-1"}, now=clock())

    reopened = OfflineCache(path)
    items = reopened.list_queue()

    assert [i.type for i in items] == [SyncOp.CREATE, SyncOp.UPDATE, SyncOp.DELETE]
    assert items[0].id == a.id
    assert items[0].id.startswith("sync-")
    assert items[1].payload == {"id": "offline-1", "status": "done"}
    assert items[0].enqueued_at == clock()

    reopened.remove_queue_item(b.id)
    assert [i.type for i in reopened.list_queue()] == [SyncOp.CREATE, SyncOp.DELETE]

    reopened.clear_queue()
    assert reopened.queue_length() == 0


def test_replace_keeps_pending_rows(tmp_path: Path, clock: FrozenClock) -> None:
    cache = OfflineCache(tmp_path / "cache.sqlite3")
    server_task = lifecycle.create_task({"title": "server"}, now=clock()).task
    stale = lifecycle.create_task({"title": "stale"}, now=clock()).task
    local = lifecycle.create_task({"title": "local"}, now=clock(), task_id="offline-1").task

    cache.put_task(stale)
    cache.put_task(local, pending=True)
    cache.replace_tasks([server_task])

    assert {t.title for t in cache.list_tasks()} == {"server", "local"}


def test_id_map_rekeys_offline_task(tmp_path: Path, clock: FrozenClock) -> None:
    cache = OfflineCache(tmp_path / "cache.sqlite3")
    local = lifecycle.create_task({"title": "local"}, now=clock(), task_id="offline-1").task
    cache.put_task(local, pending=True)

    cache.map_id("offline-1", "srv-9")

    assert cache.resolve_id("offline-1") == "srv-9"
    assert cache.resolve_id("srv-9") == "srv-9"
    assert cache.get_task("offline-1") is None

    # holders of the offline id still reach the task after the queue is gone
    cache.clear_queue()
    assert cache.resolve_id("offline-1") == "srv-9"


def test_settings_snapshot(tmp_path: Path, clock: FrozenClock) -> None:
    path = tmp_path / "cache.sqlite3"
    cache = OfflineCache(path)
    assert cache.get_settings() is None

    store = SettingsStore(clock=clock)
    store.update({"theme": "solar-flare", "daily_rollover_time": "06:30"})
    cache.put_settings(store.get_or_create())
    store.update({"theme": "deep-space"})
    cache.put_settings(store.get_or_create())

    cached = OfflineCache(path).get_settings()

    assert cached is not None
    assert cached.theme == "deep-space"
    assert cached.daily_rollover_time == "06:30"
    assert cached.created_at == store.get_or_create().created_at
