# tests/test_settings_store.py

from __future__ import annotations

import pytest

from futureboard.core.errors import ValidationError
from futureboard.tasks.settings_store import SettingsStore, validate_rollover_time

from .fakes import FrozenClock


def test_created_lazily_with_defaults(settings_store: SettingsStore) -> None:
    assert settings_store.get() is None

    s = settings_store.get_or_create()

    assert s.theme == "nebula-purple"
    assert s.daily_rollover_time == "00:00"
    assert s.enable_notifications is True
    assert s.enable_offline_sync is True
    assert s.last_rollover_at is None
    assert settings_store.get_or_create() is s


def test_update_accepts_wire_keys(settings_store: SettingsStore, clock: FrozenClock) -> None:
    clock.advance(minutes=1)
    s = settings_store.update({"dailyRolloverTime": "06:30", "enableOfflineSync": False})

    assert s.daily_rollover_time == "06:30"
    assert s.enable_offline_sync is False
    assert s.updated_at == clock()
    assert s.to_dict()["dailyRolloverTime"] == "06:30"


@pytest.mark.parametrize("raw", ["24:00", "7:00", "07:60", "", None, "noon"])
def test_rollover_time_must_be_hhmm(raw) -> None:
    with pytest.raises(ValidationError):
        validate_rollover_time(raw)


def test_update_rejects_bad_fields(settings_store: SettingsStore) -> None:
    with pytest.raises(ValidationError):
        settings_store.update({"enable_notifications": "yes"})
    with pytest.raises(ValidationError):
        settings_store.update({"font": "mono"})
    with pytest.raises(ValidationError):
        settings_store.update({"theme": "  "})

    # failed updates leave the stored settings untouched
    assert settings_store.get_or_create().enable_notifications is True
