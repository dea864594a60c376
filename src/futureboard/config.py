# src/futureboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole process (normal "settings layer").
- No secrets required at import time (SharePoint sync is off unless configured).
- Per-user board preferences (theme, rollover time, ...) are NOT here; they live
  in the UserSettings record managed by SettingsStore.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

ENV_PREFIX = "FUTUREBOARD"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    offline_cache_path: Path

    # ---- Rollover ----
    rollover_poll_seconds: float

    # ---- SharePoint mirror ----
    sharepoint_enabled: bool
    sharepoint_site_id: str
    sharepoint_list_id: str
    sharepoint_access_token: Optional[str]
    graph_base_url: str

    # ---- HTTP ----
    http_timeout_seconds: float
    api_base_url: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "FutureBoard")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/futureboard"))
        offline_cache_path = _env_path(_k("OFFLINE_CACHE_PATH"), data_dir / "offline_cache.sqlite3")

        rollover_poll_seconds = _env_float(_k("ROLLOVER_POLL_SECONDS"), 3600.0)

        sharepoint_access_token = _first_env(
            _k("SHAREPOINT_ACCESS_TOKEN"), "SHAREPOINT_ACCESS_TOKEN", default=None
        )
        # Enabled by default as soon as a token is present.
        sharepoint_enabled = _env_bool(_k("SHAREPOINT_ENABLED"), bool(sharepoint_access_token))
        sharepoint_site_id = _env(_k("SHAREPOINT_SITE_ID"), "root")
        sharepoint_list_id = _env(_k("SHAREPOINT_LIST_ID"), "FutureBoardTasks")
        graph_base_url = _env(_k("GRAPH_BASE_URL"), "https://graph.microsoft.com/v1.0")

        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 15.0)
        api_base_url = _env(_k("API_BASE_URL"), "http://127.0.0.1:5000")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            offline_cache_path=offline_cache_path,
            rollover_poll_seconds=rollover_poll_seconds,
            sharepoint_enabled=sharepoint_enabled,
            sharepoint_site_id=sharepoint_site_id,
            sharepoint_list_id=sharepoint_list_id,
            sharepoint_access_token=sharepoint_access_token,
            graph_base_url=graph_base_url,
            http_timeout_seconds=http_timeout_seconds,
            api_base_url=api_base_url,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
