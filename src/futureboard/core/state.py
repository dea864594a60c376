# src/futureboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..sync.mirror_sync import MirrorSync
    from ..tasks.rollover import RolloverScheduler
    from ..tasks.settings_store import SettingsStore
    from ..tasks.task_api import BoardService
    from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    """
    Process-wide handles, built once by the composition root and passed to handlers.

    Tests build their own instance per test for isolation.
    """

    # Env-level Settings (config.Settings or a test stand-in).
    settings: Any

    store: TaskStore
    settings_store: SettingsStore
    service: BoardService
    scheduler: RolloverScheduler
    mirror_sync: MirrorSync | None = None
