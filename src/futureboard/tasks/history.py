# src/futureboard/tasks/history.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from .task_models import NewHistoryEntry, TaskHistoryEntry

logger = logging.getLogger(__name__)


class HistoryLog:
    """
    Append-only audit log of task mutations.

    Entries are ordered by a monotonically increasing seq and are never edited.
    task_id is a weak reference: entries of deleted tasks stay retrievable by id.
    """

    def __init__(self) -> None:
        self._entries: list[TaskHistoryEntry] = []
        self._seq = 0

    def append(self, entry: NewHistoryEntry, *, timestamp: datetime) -> TaskHistoryEntry:
        self._seq += 1
        stamped = TaskHistoryEntry(
            id=str(uuid.uuid4()),
            seq=self._seq,
            task_id=entry.task_id,
            action=entry.action,
            previous_data=entry.previous_data,
            new_data=entry.new_data,
            timestamp=timestamp,
        )
        self._entries.append(stamped)
        logger.debug("History seq=%s task=%s action=%s", stamped.seq, entry.task_id, entry.action.value)
        return stamped

    def list_for_task(self, task_id: str) -> list[TaskHistoryEntry]:
        return [e for e in self._entries if e.task_id == task_id]

    def list_all(self) -> list[TaskHistoryEntry]:
        return list(self._entries)

    def count(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
