# tests/test_bootstrap.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from futureboard.cli.bootstrap import build_mirror, build_offline_client, create_initial_state
from futureboard.client.offline_client import OfflineTaskClient
from futureboard.config import Settings
from futureboard.logging_setup import _ConsoleNoiseFilter
from futureboard.sync.sharepoint import SharePointMirror


def test_local_only_state(settings: SimpleNamespace) -> None:
    state = create_initial_state(settings=settings)

    assert state.mirror_sync is None
    assert state.service.mirror_sync is None
    assert state.scheduler is state.service.scheduler
    assert settings.data_dir.is_dir()


def test_mirror_built_when_enabled(settings: SimpleNamespace) -> None:
    settings.sharepoint_enabled = True
    settings.sharepoint_access_token = "t0ken"

    assert isinstance(build_mirror(settings), SharePointMirror)


def test_mirror_misconfiguration_degrades_to_local(settings: SimpleNamespace) -> None:
    settings.sharepoint_enabled = True
    settings.sharepoint_access_token = None

    assert build_mirror(settings) is None


def test_offline_client_uses_configured_cache(settings: SimpleNamespace) -> None:
    client = build_offline_client(settings)

    assert isinstance(client, OfflineTaskClient)
    assert settings.offline_cache_path.exists()


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FUTUREBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("FUTUREBOARD_ROLLOVER_POLL_SECONDS", "not-a-number")
    monkeypatch.setenv("FUTUREBOARD_SHAREPOINT_ACCESS_TOKEN", "abc")
    monkeypatch.delenv("FUTUREBOARD_SHAREPOINT_ENABLED", raising=False)

    s = Settings.from_env()

    assert s.data_dir == tmp_path
    assert s.offline_cache_path == tmp_path / "offline_cache.sqlite3"
    assert s.rollover_poll_seconds == 3600.0
    assert s.sharepoint_enabled is True

    monkeypatch.setenv("FUTUREBOARD_SHAREPOINT_ENABLED", "off")
    assert Settings.from_env().sharepoint_enabled is False


def test_console_filter() -> None:
    f = _ConsoleNoiseFilter()

    def rec(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert f.filter(rec("futureboard.sync.mirror_sync", logging.INFO))
    assert not f.filter(rec("futureboard.tasks.rollover", logging.INFO))
    assert f.filter(rec("futureboard.tasks.rollover", logging.WARNING))
    assert not f.filter(rec("httpx", logging.WARNING))
    assert f.filter(rec("httpx", logging.ERROR))
