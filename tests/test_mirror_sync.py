# tests/test_mirror_sync.py

from __future__ import annotations

from datetime import timedelta

import pytest

from futureboard.core.errors import RemoteSyncError
from futureboard.sync.mirror import RemoteRecord
from futureboard.sync.mirror_sync import MirrorSync
from futureboard.tasks.task_models import TaskStatus
from futureboard.tasks.task_store import TaskStore

from .fakes import FrozenClock, InMemoryMirror


@pytest.mark.asyncio
async def test_push_assigns_remote_id(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    t = store.create_task({"title": "A"})

    report = await mirror_sync.sync()

    synced = store.get_task(t.id)
    assert report.pushed == 1
    assert synced.remote_id in mirror.records
    assert mirror.records[synced.remote_id].local_task_id == t.id
    assert not synced.needs_sync()


@pytest.mark.asyncio
async def test_second_pass_pushes_nothing_and_imports_nothing(
    mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror
) -> None:
    store.create_task({"title": "A"})
    mirror.add_remote(title="Made in SharePoint")

    await mirror_sync.sync()
    assert store.count_tasks() == 2

    mirror.pushed.clear()
    report = await mirror_sync.sync()

    assert report.pushed == 0
    assert report.pulled_created == 0
    assert mirror.pushed == []
    assert store.count_tasks() == 2


@pytest.mark.asyncio
async def test_pull_imports_unlinked_record(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    rec = mirror.add_remote(title="Remote only", status="in-progress", priority="high", progress=20)

    report = await mirror_sync.sync()

    assert report.pulled_created == 1
    [t] = store.all_tasks()
    assert t.title == "Remote only"
    assert t.status == TaskStatus.IN_PROGRESS
    assert t.progress == 20
    assert t.remote_id == rec.remote_id
    assert t.last_synced_at is not None
    assert not t.needs_sync()


@pytest.mark.asyncio
async def test_pull_overwrites_local_fields(
    mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror, clock: FrozenClock
) -> None:
    t = store.create_task({"title": "Local"})
    await mirror_sync.sync()
    remote_id = store.get_task(t.id).remote_id

    mirror.records[remote_id] = RemoteRecord(
        remote_id=remote_id,
        title="Edited remotely",
        status="done",
        local_task_id=t.id,
    )
    clock.advance(minutes=5)
    report = await mirror_sync.sync()

    updated = store.get_task(t.id)
    assert report.pulled_updated == 1
    assert updated.title == "Edited remotely"
    assert updated.status == TaskStatus.DONE
    assert updated.completed_at == clock()
    assert not updated.needs_sync()


@pytest.mark.asyncio
async def test_pull_keeps_remote_completion_time(
    mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror, clock: FrozenClock
) -> None:
    finished = clock() - timedelta(days=2)
    mirror.add_remote(title="Closed remotely", status="done", completed_at=finished)

    await mirror_sync.sync()

    [t] = store.all_tasks()
    assert t.completed_at == finished


@pytest.mark.asyncio
async def test_record_for_deleted_task_is_skipped(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    t = store.create_task({"title": "Gone soon"})
    await mirror_sync.sync()
    store.delete_task(t.id)

    report = await mirror_sync.sync()

    assert report.skipped == 1
    assert report.pulled_created == 0
    assert store.count_tasks() == 0


@pytest.mark.asyncio
async def test_push_failure_does_not_abort_pass(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    bad = store.create_task({"title": "Refused"})
    good = store.create_task({"title": "Accepted"})
    mirror.fail_push_for.add(bad.id)

    report = await mirror_sync.sync()

    assert report.push_failed == 1
    assert report.pushed == 1
    assert store.get_task(bad.id).needs_sync()
    assert not store.get_task(good.id).needs_sync()

    # retried on the next pass
    mirror.fail_push_for.clear()
    report = await mirror_sync.sync()
    assert report.pushed == 1
    assert not store.get_task(bad.id).needs_sync()


@pytest.mark.asyncio
async def test_bad_record_counts_as_pull_failure(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    mirror.add_remote(title="Blocked", status="blocked")
    mirror.add_remote(title="Fine")

    report = await mirror_sync.sync()

    assert report.pull_failed == 1
    assert report.pulled_created == 1
    assert [t.title for t in store.all_tasks()] == ["Fine"]


@pytest.mark.asyncio
async def test_listing_failure_raises(mirror_sync: MirrorSync, store: TaskStore, mirror: InMemoryMirror) -> None:
    t = store.create_task({"title": "A"})
    mirror.fail_listing = True

    with pytest.raises(RemoteSyncError):
        await mirror_sync.sync()

    # push half of the pass still happened
    assert not store.get_task(t.id).needs_sync()


@pytest.mark.asyncio
async def test_push_task_wraps_unexpected_errors(store: TaskStore) -> None:
    class BrokenMirror(InMemoryMirror):
        async def push(self, task):
            raise OSError("socket closed")

    sync = MirrorSync(store, BrokenMirror())
    t = store.create_task({"title": "A"})

    with pytest.raises(RemoteSyncError):
        await sync.push_task(t)
    assert store.get_task(t.id).needs_sync()
