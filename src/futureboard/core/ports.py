# src/futureboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the remote mirror and the client network API swappable
(SharePoint today, anything with the same four calls tomorrow) and makes testing easier.
"""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..sync.mirror import RemoteRecord
    from ..tasks.task_models import Task


class RemoteMirror(Protocol):
    """
    External system of record holding a copy of the tasks.

    push() creates the item when task.remote_id is empty, otherwise updates it,
    and returns the remote id either way.
    """

    async def push(self, task: Task) -> str: ...

    async def list_all(self) -> list[RemoteRecord]: ...

    async def delete(self, remote_id: str) -> None: ...


class TaskApi(Protocol):
    """
    Client-side view of the board's REST API.

    Implementations raise RemoteSyncError when the server cannot be reached
    or answers with an error.
    """

    async def list_tasks(self) -> list[dict[str, Any]]: ...

    async def create_task(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> dict[str, Any]: ...

    async def delete_task(self, task_id: str) -> None: ...

    async def get_settings(self) -> dict[str, Any]: ...
