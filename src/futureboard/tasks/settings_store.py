# src/futureboard/tasks/settings_store.py

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import replace
from typing import Any

from ..core.errors import ValidationError
from .task_models import UserSettings, dt_from_str
from .task_store import Clock, local_now

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

_WIRE_KEYS = {
    "theme": "theme",
    "dailyRolloverTime": "daily_rollover_time",
    "enableNotifications": "enable_notifications",
    "enableOfflineSync": "enable_offline_sync",
    "lastRolloverAt": "last_rollover_at",
    "lastRollover": "last_rollover_at",
}

_BOOL_KEYS = frozenset({"enable_notifications", "enable_offline_sync"})


def validate_rollover_time(raw: Any) -> str:
    value = str(raw or "").strip()
    if not _HHMM.match(value):
        raise ValidationError(f"daily rollover time must be HH:MM (24h), got {raw!r}")
    return value


def _normalize(patch: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, raw in patch.items():
        name = _WIRE_KEYS.get(key, key)
        if name in ("id", "created_at", "updated_at", "createdAt", "updatedAt"):
            continue
        if name == "theme":
            theme = str(raw or "").strip()
            if not theme:
                raise ValidationError("theme must not be empty")
            out[name] = theme
        elif name == "daily_rollover_time":
            out[name] = validate_rollover_time(raw)
        elif name in _BOOL_KEYS:
            if not isinstance(raw, bool):
                raise ValidationError(f"{key} must be a boolean")
            out[name] = raw
        elif name == "last_rollover_at":
            try:
                out[name] = dt_from_str(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"invalid {key}: {raw!r}") from None
        else:
            raise ValidationError(f"unknown settings field: {key}")
    return out


class SettingsStore:
    """
    Holds the single UserSettings instance of a deployment.

    Created lazily with defaults on first read through get_or_create()/update().
    """

    def __init__(self, *, clock: Clock = local_now) -> None:
        self._settings: UserSettings | None = None
        self._clock = clock

    def get(self) -> UserSettings | None:
        return self._settings

    def create(self, defaults: dict[str, Any] | None = None) -> UserSettings:
        now = self._clock()
        fields = _normalize(defaults or {})
        self._settings = UserSettings(
            id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **fields,
        )
        logger.info(
            "User settings created (rollover=%s sync=%s)",
            self._settings.daily_rollover_time,
            self._settings.enable_offline_sync,
        )
        return self._settings

    def get_or_create(self) -> UserSettings:
        if self._settings is None:
            return self.create()
        return self._settings

    def update(self, patch: dict[str, Any]) -> UserSettings:
        fields = _normalize(patch)
        current = self.get_or_create()
        self._settings = replace(current, **fields, updated_at=self._clock())
        return self._settings
