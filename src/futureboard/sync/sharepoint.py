# src/futureboard/sync/sharepoint.py

"""
SharePoint list adapter for the remote mirror port.

Talks to the Microsoft Graph list-items API:
- create: POST   /sites/{site}/lists/{list}/items          {"fields": {...}}
- update: PATCH  /sites/{site}/lists/{list}/items/{id}/fields
- list:   GET    /sites/{site}/lists/{list}/items?expand=fields (follows @odata.nextLink)
- delete: DELETE /sites/{site}/lists/{list}/items/{id}

Every transport or HTTP failure is raised as RemoteSyncError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import RemoteSyncError
from ..tasks.task_models import Task, dt_from_str
from .mirror import RemoteRecord, task_to_remote_fields

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _safe_dt(value: Any):
    try:
        return dt_from_str(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unparsable SharePoint date %r", value)
        return None


def record_from_item(item: dict[str, Any]) -> RemoteRecord:
    fields = item.get("fields") or {}
    return RemoteRecord(
        remote_id=str(item["id"]),
        title=str(fields.get("Title") or ""),
        description=_opt_str(fields.get("Description")),
        status=_opt_str(fields.get("Status")),
        priority=_opt_str(fields.get("Priority")),
        due_date=_safe_dt(fields.get("DueDate")),
        completed_at=_safe_dt(fields.get("CompletedAt")),
        progress=_to_int(fields.get("Progress")),
        assignee_initials=_opt_str(fields.get("AssigneeInitials")),
        category=_opt_str(fields.get("Category")),
        local_task_id=_opt_str(fields.get("LocalTaskId")),
    )


class SharePointMirror:
    def __init__(
        self,
        *,
        access_token: str,
        site_id: str = "root",
        list_id: str = "FutureBoardTasks",
        base_url: str = DEFAULT_GRAPH_BASE_URL,
        timeout_seconds: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("SharePoint access token is required")
        self._items_path = f"/sites/{site_id}/lists/{list_id}/items"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )
        logger.info("SharePointMirror ready site=%s list=%s", site_id, list_id)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self._client.request(method, url, **kwargs)
            resp.raise_for_status()
            return resp
        except httpx.HTTPStatusError as e:
            raise RemoteSyncError(
                f"SharePoint {method} {url} failed: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteSyncError(f"SharePoint {method} {url} failed: {e}") from e

    async def push(self, task: Task) -> str:
        fields = task_to_remote_fields(task)
        if task.remote_id:
            await self._request("PATCH", f"{self._items_path}/{task.remote_id}/fields", json=fields)
            logger.debug("SharePoint item updated remote_id=%s task=%s", task.remote_id, task.id)
            return task.remote_id

        resp = await self._request("POST", self._items_path, json={"fields": fields})
        try:
            remote_id = str(resp.json()["id"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteSyncError("SharePoint create response has no item id") from e
        logger.debug("SharePoint item created remote_id=%s task=%s", remote_id, task.id)
        return remote_id

    async def list_all(self) -> list[RemoteRecord]:
        records: list[RemoteRecord] = []
        url: str | None = self._items_path
        params: dict[str, str] | None = {"expand": "fields"}

        while url:
            resp = await self._request("GET", url, params=params)
            try:
                data = resp.json()
                items = data.get("value") or []
                records.extend(record_from_item(item) for item in items)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise RemoteSyncError("SharePoint list response is malformed") from e
            # nextLink is absolute and already carries the query string.
            url = data.get("@odata.nextLink")
            params = None

        logger.debug("SharePoint listed %d items", len(records))
        return records

    async def delete(self, remote_id: str) -> None:
        await self._request("DELETE", f"{self._items_path}/{remote_id}")
        logger.debug("SharePoint item deleted remote_id=%s", remote_id)
