# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from futureboard.cli.bootstrap import create_initial_state
from futureboard.core.state import AppState
from futureboard.sync.mirror_sync import MirrorSync
from futureboard.tasks.history import HistoryLog
from futureboard.tasks.rollover import RolloverScheduler
from futureboard.tasks.settings_store import SettingsStore
from futureboard.tasks.task_api import BoardService
from futureboard.tasks.task_store import TaskStore

from .fakes import FrozenClock, InMemoryMirror


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def store(clock: FrozenClock) -> TaskStore:
    return TaskStore(HistoryLog(), clock=clock)


@pytest.fixture()
def settings_store(clock: FrozenClock) -> SettingsStore:
    return SettingsStore(clock=clock)


@pytest.fixture()
def mirror() -> InMemoryMirror:
    return InMemoryMirror()


@pytest.fixture()
def mirror_sync(store: TaskStore, mirror: InMemoryMirror) -> MirrorSync:
    return MirrorSync(store, mirror)


@pytest.fixture()
def scheduler(store: TaskStore, settings_store: SettingsStore) -> RolloverScheduler:
    return RolloverScheduler(store, settings_store, interval_seconds=0.01)


@pytest.fixture()
def service(
    store: TaskStore,
    settings_store: SettingsStore,
    mirror_sync: MirrorSync,
    scheduler: RolloverScheduler,
) -> BoardService:
    return BoardService(store, settings_store, mirror_sync=mirror_sync, scheduler=scheduler)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the composition root.

    A SimpleNamespace stand-in keeps tests off the real environment
    and its .env file.
    """
    return SimpleNamespace(
        app_name="FutureBoard-test",
        log_level="INFO",
        data_dir=tmp_path / "data",
        offline_cache_path=tmp_path / "data" / "offline_cache.sqlite3",
        rollover_poll_seconds=0.01,
        sharepoint_enabled=False,
        sharepoint_site_id="root",
        sharepoint_list_id="FutureBoardTasks",
        sharepoint_access_token=None,
        graph_base_url="https://graph.example.test/v1.0",
        http_timeout_seconds=1.0,
        api_base_url="http://board.example.test",
    )


@pytest.fixture()
def state(settings: SimpleNamespace, mirror: InMemoryMirror) -> AppState:
    """AppState from the real composition root, wired with the fake mirror."""
    return create_initial_state(settings=settings, mirror=mirror)
