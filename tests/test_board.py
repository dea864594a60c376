# tests/test_board.py

from __future__ import annotations

from datetime import timedelta

from futureboard.tasks import board
from futureboard.tasks.task_models import TaskStatus
from futureboard.tasks.task_store import TaskStore

from .fakes import FrozenClock


def test_every_task_in_exactly_one_view(store: TaskStore, clock: FrozenClock) -> None:
    now = clock()
    store.create_task({"title": "no due"})
    store.create_task({"title": "due earlier today", "due_date": now - timedelta(hours=2)})
    store.create_task({"title": "overdue", "due_date": now - timedelta(days=3)})
    store.create_task({"title": "tomorrow", "due_date": now + timedelta(days=1)})
    old = store.create_task({"title": "old", "status": "done"})
    store.archive_task(old.id)

    tasks = store.all_tasks()
    today = {t.id for t in board.active_today(tasks, now)}
    later = {t.id for t in board.scheduled(tasks, now)}
    gone = {t.id for t in board.archived(tasks)}

    assert today.isdisjoint(later)
    assert today.isdisjoint(gone)
    assert later.isdisjoint(gone)
    assert today | later | gone == {t.id for t in tasks}
    assert gone == {old.id}
    assert len(today) == 3
    assert len(later) == 1


def test_due_at_end_of_day_is_today(clock: FrozenClock, store: TaskStore) -> None:
    now = clock()
    edge = store.create_task({"title": "edge", "due_date": board.end_of_today(now)})
    after = store.create_task({"title": "after", "due_date": board.end_of_today(now) + timedelta(microseconds=1)})

    assert [t.id for t in board.active_today(store.all_tasks(), now)] == [edge.id]
    assert [t.id for t in board.scheduled(store.all_tasks(), now)] == [after.id]


def test_scheduled_task_surfaces_when_its_day_arrives(store: TaskStore, clock: FrozenClock) -> None:
    due = board.start_of_day(clock()) + timedelta(days=1, hours=9)
    t = store.create_task({"title": "dentist", "due_date": due})

    assert [x.id for x in board.scheduled(store.all_tasks(), clock())] == [t.id]
    assert board.active_today(store.all_tasks(), clock()) == []

    clock.advance(days=1)

    assert board.scheduled(store.all_tasks(), clock()) == []
    assert [x.id for x in board.active_today(store.all_tasks(), clock())] == [t.id]


def test_scheduled_sorted_by_due_date(store: TaskStore, clock: FrozenClock) -> None:
    later = store.create_task({"title": "later", "due_date": clock() + timedelta(days=5)})
    sooner = store.create_task({"title": "sooner", "due_date": clock() + timedelta(days=2)})

    assert [t.id for t in board.scheduled(store.all_tasks(), clock())] == [sooner.id, later.id]


def test_group_by_status_has_every_column(store: TaskStore) -> None:
    store.create_task({"title": "a", "status": "in-progress"})
    columns = board.group_by_status(store.list_tasks())

    assert list(columns) == list(TaskStatus)
    assert len(columns[TaskStatus.IN_PROGRESS]) == 1
    assert columns[TaskStatus.REVIEW] == []


def test_stats(store: TaskStore, clock: FrozenClock) -> None:
    # two completions three days ago, one today
    clock.advance(days=-3)
    store.create_task({"title": "d1", "status": "done"})
    store.create_task({"title": "d2", "status": "done"})
    clock.advance(days=3)
    today = store.create_task({"title": "d3", "status": "done"})
    store.archive_task(today.id)
    store.create_task({"title": "open"})
    store.create_task({"title": "doing", "status": "in-progress"})

    s = board.compute_stats(store, clock())

    assert s.today_completed == 1
    assert s.weekly_average == round(2 / 7, 1)
    assert s.total_tasks == 4
    assert s.tasks_by_status == {"backlog": 1, "in-progress": 1, "review": 0, "done": 2}
    assert s.to_dict()["totalTasks"] == 4
