# src/futureboard/client/api.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import RemoteSyncError

logger = logging.getLogger(__name__)


class HttpTaskApi:
    """
    httpx client for the board's REST API.

    Routes:
    - GET    /api/tasks
    - POST   /api/tasks
    - PATCH  /api/tasks/{id}
    - DELETE /api/tasks/{id}   (404 is treated as already deleted)
    - GET    /api/settings
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteSyncError(f"{method} {url} failed: {e}") from e

        if method == "DELETE" and resp.status_code == 404:
            logger.debug("DELETE %s: already gone", url)
            return resp

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise RemoteSyncError(f"{method} {url} failed: HTTP {resp.status_code}") from e
        return resp

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteSyncError(f"invalid JSON from {resp.request.url}") from e

    async def list_tasks(self) -> list[dict[str, Any]]:
        data = self._json(await self._request("GET", "/api/tasks"))
        if not isinstance(data, list):
            raise RemoteSyncError("task list response is not a list")
        return data

    async def create_task(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._json(await self._request("POST", "/api/tasks", json=payload))

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        return self._json(await self._request("PATCH", f"/api/tasks/{task_id}", json=patch))

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/api/tasks/{task_id}")

    async def get_settings(self) -> dict[str, Any]:
        data = self._json(await self._request("GET", "/api/settings"))
        if not isinstance(data, dict):
            raise RemoteSyncError("settings response is not an object")
        return data
