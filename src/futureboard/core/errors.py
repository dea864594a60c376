# src/futureboard/core/errors.py

"""
Error taxonomy shared by the core.

- ValidationError: bad input shape/values; the request is rejected, nothing changes.
- NotFoundError: unknown task id.
- RemoteSyncError: network / remote mirror failure; callers degrade to local-only.
- SchedulerError: a rollover or queue-drain pass failed; the next trigger retries.
"""

from __future__ import annotations


class BoardError(Exception):
    """Base class for all FutureBoard errors."""


class ValidationError(BoardError):
    pass


class NotFoundError(BoardError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class RemoteSyncError(BoardError):
    pass


class SchedulerError(BoardError):
    pass
