# tests/test_task_api_client.py

from __future__ import annotations

import json

import httpx
import pytest

from futureboard.client.api import HttpTaskApi
from futureboard.core.errors import RemoteSyncError


def _api(handler) -> HttpTaskApi:
    return HttpTaskApi("http://board.example.test/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_routes_and_payloads() -> None:
    seen: list[tuple[str, str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        seen.append((request.method, request.url.path, body))
        if request.method == "GET":
            return httpx.Response(200, json=[])
        if request.method == "DELETE":
            return httpx.Response(204)
        return httpx.Response(200, json={"id": "srv-1", **(body or {})})

    api = _api(handler)
    assert await api.list_tasks() == []
    assert (await api.create_task({"title": "A"}))["id"] == "srv-1"
    await api.update_task("srv-1", {"status": "done"})
    await api.delete_task("srv-1")
    await api.aclose()

    assert seen == [
        ("GET", "/api/tasks", None),
        ("POST", "/api/tasks", {"title": "A"}),
        ("PATCH", "/api/tasks/srv-1", {"status": "done"}),
        ("DELETE", "/api/tasks/srv-1", None),
    ]


@pytest.mark.asyncio
async def test_delete_404_is_success() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    api = _api(handler)
    await api.delete_task("gone")

    with pytest.raises(RemoteSyncError):
        await api.update_task("gone", {"title": "x"})


@pytest.mark.asyncio
async def test_server_errors_and_bad_payloads() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json={"not": "a list"})
        return httpx.Response(500)

    api = _api(handler)
    with pytest.raises(RemoteSyncError):
        await api.list_tasks()
    with pytest.raises(RemoteSyncError):
        await api.create_task({"title": "A"})


@pytest.mark.asyncio
async def test_connection_refused() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(RemoteSyncError):
        await _api(handler).list_tasks()


@pytest.mark.asyncio
async def test_settings_route() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert (request.method, request.url.path) == ("GET", "/api/settings")
        return httpx.Response(200, json={"id": "s-1", "theme": "nebula-purple"})

    def broken(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=["not", "an", "object"])

    assert (await _api(handler).get_settings())["id"] == "s-1"
    with pytest.raises(RemoteSyncError):
        await _api(broken).get_settings()
