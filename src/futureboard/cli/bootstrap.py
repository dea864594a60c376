# src/futureboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the store, settings store, optional SharePoint mirror, sync engine,
  board service and rollover scheduler into AppState,
- builds the offline-capable client for the REST API.
"""

from __future__ import annotations

import logging

from ..client.api import HttpTaskApi
from ..client.offline_cache import OfflineCache
from ..client.offline_client import OfflineTaskClient
from ..config import get_settings
from ..core.ports import RemoteMirror
from ..core.state import AppState
from ..sync.mirror_sync import MirrorSync
from ..sync.sharepoint import SharePointMirror
from ..tasks.history import HistoryLog
from ..tasks.rollover import RolloverScheduler
from ..tasks.settings_store import SettingsStore
from ..tasks.task_api import BoardService
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.offline_cache_path.parent.mkdir(parents=True, exist_ok=True)


def build_mirror(settings) -> RemoteMirror | None:
    if not getattr(settings, "sharepoint_enabled", False):
        logger.info("SharePoint sync disabled; running local-only.")
        return None
    try:
        return SharePointMirror(
            access_token=settings.sharepoint_access_token or "",
            site_id=settings.sharepoint_site_id,
            list_id=settings.sharepoint_list_id,
            base_url=settings.graph_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    except Exception:
        # Local board keeps working without the mirror.
        logger.exception("SharePoint mirror unavailable; running local-only.")
        return None


def create_initial_state(*, settings=None, mirror: RemoteMirror | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the mirror) injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(HistoryLog())
    settings_store = SettingsStore()

    if mirror is None:
        mirror = build_mirror(settings)
    mirror_sync = MirrorSync(store, mirror) if mirror is not None else None

    scheduler = RolloverScheduler(
        store,
        settings_store,
        mirror_sync=mirror_sync,
        interval_seconds=settings.rollover_poll_seconds,
    )
    service = BoardService(store, settings_store, mirror_sync=mirror_sync, scheduler=scheduler)

    return AppState(
        settings=settings,
        store=store,
        settings_store=settings_store,
        service=service,
        scheduler=scheduler,
        mirror_sync=mirror_sync,
    )


def build_offline_client(settings=None) -> OfflineTaskClient:
    """Client-side counterpart: HTTP API to the board server plus the SQLite offline cache."""
    if settings is None:
        settings = get_settings()
    _ensure_local_dirs(settings)
    api = HttpTaskApi(settings.api_base_url, timeout_seconds=settings.http_timeout_seconds)
    return OfflineTaskClient(api, OfflineCache(settings.offline_cache_path))
