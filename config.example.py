# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Keep the SharePoint token in .env (gitignored).

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "FUTUREBOARD_APP_NAME": "App display name (default: FutureBoard).",
    "FUTUREBOARD_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "FUTUREBOARD_DATA_DIR": "Local data directory for logs (default: .local/futureboard).",
    "FUTUREBOARD_OFFLINE_CACHE_PATH": (
        "Client offline cache SQLite path (default: <data_dir>/offline_cache.sqlite3)."
    ),
    # Rollover
    "FUTUREBOARD_ROLLOVER_POLL_SECONDS": "Rollover check interval in seconds (default: 3600).",
    # SharePoint mirror
    "FUTUREBOARD_SHAREPOINT_ENABLED": "Enable the SharePoint mirror (default: on when a token is set).",
    "FUTUREBOARD_SHAREPOINT_ACCESS_TOKEN": "Microsoft Graph bearer token.",
    "FUTUREBOARD_SHAREPOINT_SITE_ID": "Graph site id (default: root).",
    "FUTUREBOARD_SHAREPOINT_LIST_ID": "List id or name (default: FutureBoardTasks).",
    "FUTUREBOARD_GRAPH_BASE_URL": "Graph API base URL (default: https://graph.microsoft.com/v1.0).",
    # HTTP
    "FUTUREBOARD_HTTP_TIMEOUT_SECONDS": "Timeout for mirror / API calls (default: 15).",
    "FUTUREBOARD_API_BASE_URL": "Board REST API base URL used by the offline client.",
}
