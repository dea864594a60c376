# src/futureboard/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import Any, cast

from ..core.errors import BoardError, NotFoundError, ValidationError
from ..core.state import AppState
from ..tasks.board import group_by_status, start_of_day
from ..tasks.task_models import Task, TaskHistoryEntry, TaskStatus, dt_from_str

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], Awaitable[str]]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Validation and not-found errors become replies; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return await h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return await h2(state, args)
        except NotFoundError as e:
            return f"Not found: {e.task_id}"
        except ValidationError as e:
            return f"Invalid request: {e}"
        except BoardError as e:
            logger.info("Command /%s failed: %s", name, e)
            return f"Failed: {e}. Please retry."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- formatting helpers ----


def _fmt_dt(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")


def _fmt_task(t: Task) -> str:
    parts = [f"{t.id[:8]}", f"[{t.priority.value}]", t.title]
    if t.status == TaskStatus.IN_PROGRESS and t.progress:
        parts.append(f"{t.progress}%")
    if t.due_date is not None:
        parts.append(f"due {_fmt_dt(t.due_date)}")
    if t.assignee_initials:
        parts.append(f"@{t.assignee_initials}")
    if t.category:
        parts.append(f"#{t.category}")
    return " ".join(parts)


def _fmt_history(e: TaskHistoryEntry) -> str:
    title = (e.new_data or {}).get("title", "")
    status = (e.new_data or {}).get("status", "")
    return f"#{e.seq} {_fmt_dt(e.timestamp)} {e.action.value}: {title} ({status})"


def _parse_due(raw: str, now: datetime) -> datetime | None:
    word = raw.strip().lower()
    if word in ("none", "-", ""):
        return None
    if word == "today":
        return start_of_day(now)
    if word == "tomorrow":
        return start_of_day(now) + timedelta(days=1)
    try:
        return dt_from_str(raw)
    except ValueError:
        raise ValidationError(f"bad date: {raw!r} (use YYYY-MM-DD, today, tomorrow or none)") from None


def _split_options(args: list[str]) -> tuple[list[str], dict[str, str]]:
    """Split '--key value' pairs out of free text args."""
    words: list[str] = []
    opts: dict[str, str] = {}
    i = 0
    while i < len(args):
        a = args[i]
        if a.startswith("--") and i + 1 < len(args):
            opts[a[2:].lower()] = args[i + 1]
            i += 2
            continue
        words.append(a)
        i += 1
    return words, opts


def _need(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise ValidationError(f"usage: {usage}")


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    """
    /list          -> today's board grouped by column
    /list <status> -> one column
    """
    tasks = state.service.active_today()
    columns = group_by_status(tasks)
    if args:
        wanted = TaskStatus.parse(args[0])
        columns = {wanted: columns[wanted]}

    lines: list[str] = []
    for status, items in columns.items():
        lines.append(f"{status.value.upper()} ({len(items)})")
        lines.extend(f"  {_fmt_task(t)}" for t in items)
    return "\n".join(lines) if lines else "Board is empty."


async def cmd_scheduled(state: AppState, args: list[str]) -> str:
    tasks = state.service.scheduled()
    if not tasks:
        return "Nothing scheduled after today."
    return "Scheduled:\n" + "\n".join(f"  {_fmt_task(t)}" for t in tasks)


async def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <title> [--due DATE] [--priority low|medium|high] [--category X] [--who ABC]
    """
    words, opts = _split_options(args)
    data: dict[str, Any] = {"title": " ".join(words)}
    if "due" in opts:
        data["due_date"] = _parse_due(opts["due"], state.store.now())
    if "priority" in opts:
        data["priority"] = opts["priority"].lower()
    if "category" in opts:
        data["category"] = opts["category"]
    if "who" in opts:
        data["assignee_initials"] = opts["who"].upper()

    task = await state.service.create_task(data)
    return f"Created {_fmt_task(task)}"


async def cmd_move(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/move <id> <backlog|in-progress|review|done>")
    task_id = state.service.resolve_task_id(args[0])
    task = await state.service.update_task(task_id, {"status": args[1].lower()})
    return f"Moved to {task.status.value}: {_fmt_task(task)}"


async def cmd_progress(state: AppState, args: list[str]) -> str:
    _need(args, 2, "/progress <id> <0-100>")
    task_id = state.service.resolve_task_id(args[0])
    task = await state.service.update_task(task_id, {"progress": args[1]})
    return f"Progress {task.progress}%: {_fmt_task(task)}"


async def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <field> <value...>
    Fields: title, description, priority, due, category, who
    """
    _need(args, 3, "/edit <id> <field> <value...>")
    task_id = state.service.resolve_task_id(args[0])
    field_name = args[1].lower()
    value = " ".join(args[2:])

    aliases = {"due": "due_date", "who": "assignee_initials"}
    name = aliases.get(field_name, field_name)
    if name not in ("title", "description", "priority", "due_date", "category", "assignee_initials"):
        raise ValidationError(f"field cannot be edited from the console: {field_name}")

    patch: dict[str, Any] = {name: value}
    if name == "due_date":
        patch[name] = _parse_due(value, state.store.now())
    task = await state.service.update_task(task_id, patch)
    return f"Updated {_fmt_task(task)}"


async def cmd_archive(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/archive <id>")
    task = state.service.archive_task(state.service.resolve_task_id(args[0]))
    return f"Archived {_fmt_task(task)}"


async def cmd_delete(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/delete <id>")
    task_id = state.service.resolve_task_id(args[0])
    await state.service.delete_task(task_id)
    return f"Deleted {task_id}"


async def cmd_history(state: AppState, args: list[str]) -> str:
    _need(args, 1, "/history <id>")
    ref = args[0]
    with contextlib.suppress(NotFoundError):
        ref = state.service.resolve_task_id(ref)
    entries = state.service.task_history(ref)
    if not entries:
        return f"No history for {ref}."
    return "\n".join(_fmt_history(e) for e in entries)


async def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done [days] -> tasks completed in the last N days (default 7), archived ones included
    """
    try:
        days = int(args[0]) if args else 7
    except ValueError:
        raise ValidationError("usage: /done [days]") from None
    now = state.store.now()
    tasks = state.service.completed_tasks(start_of_day(now) - timedelta(days=max(0, days)), now)
    if not tasks:
        return "No completed tasks in that range."
    tasks.sort(key=lambda t: t.completed_at or now)
    return "\n".join(f"  {_fmt_dt(t.completed_at)} {_fmt_task(t)}" for t in tasks)


async def cmd_stats(state: AppState, args: list[str]) -> str:
    s = state.service.stats()
    by_status = ", ".join(f"{k}={v}" for k, v in s.tasks_by_status.items())
    return (
        "Stats:\n"
        f"  Completed today: {s.today_completed}\n"
        f"  7-day average: {s.weekly_average}\n"
        f"  On board: {s.total_tasks} ({by_status})"
    )


async def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                 -> show
    /settings rollover HH:MM  -> daily rollover time
    /settings theme NAME
    /settings sync on|off
    /settings notify on|off
    """
    if len(args) >= 2:
        key, value = args[0].lower(), args[1]
        flags = {"on": True, "off": False, "true": True, "false": False}
        if key == "rollover":
            state.service.update_settings({"daily_rollover_time": value})
        elif key == "theme":
            state.service.update_settings({"theme": value})
        elif key in ("sync", "notify"):
            if value.lower() not in flags:
                raise ValidationError(f"usage: /settings {key} on|off")
            field = "enable_offline_sync" if key == "sync" else "enable_notifications"
            state.service.update_settings({field: flags[value.lower()]})
        else:
            raise ValidationError(f"unknown setting: {key}")

    s = state.service.get_settings()
    return (
        "Settings:\n"
        f"  Theme: {s.theme}\n"
        f"  Daily rollover: {s.daily_rollover_time}\n"
        f"  Notifications: {'ON' if s.enable_notifications else 'OFF'}\n"
        f"  Remote sync: {'ON' if s.enable_offline_sync else 'OFF'}"
        f"{'' if state.mirror_sync else ' (no mirror configured)'}\n"
        f"  Last rollover: {_fmt_dt(s.last_rollover_at)}"
    )


async def cmd_rollover(state: AppState, args: list[str]) -> str:
    result = await state.service.rollover_now()
    if result is None:
        return "A rollover is already running."
    return f"Rollover complete: {result.rolled_over} tasks rolled over, {result.archived} archived."


async def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if emit:
        with contextlib.suppress(Exception):
            emit("[SYNC] Syncing with the remote mirror...")
    report = await state.service.sync_now()
    return (
        f"Sync done: pushed {report.pushed} (failed {report.push_failed}), "
        f"pulled {report.pulled_updated} updated / {report.pulled_created} new "
        f"(failed {report.pull_failed})."
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Today's board: /list [status].", aliases=["ls"])
registry.register("scheduled", cmd_scheduled, help_text="Tasks due after today.")
registry.register(
    "add", cmd_add, help_text="Add a task: /add <title> [--due DATE] [--priority P] [--category C] [--who ABC]."
)
registry.register("move", cmd_move, help_text="Change status: /move <id> <status>.", aliases=["mv"])
registry.register("progress", cmd_progress, help_text="Set progress: /progress <id> <0-100>.")
registry.register("edit", cmd_edit, help_text="Edit a field: /edit <id> <field> <value>.")
registry.register("archive", cmd_archive, help_text="Archive a task: /archive <id>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("history", cmd_history, help_text="Change log of a task: /history <id>.")
registry.register("done", cmd_done, help_text="Completed tasks: /done [days].")
registry.register("stats", cmd_stats, help_text="Completion stats.")
registry.register("settings", cmd_settings, help_text="Show/change settings: /settings [key value].")
registry.register("rollover", cmd_rollover, help_text="Run the daily rollover now.")
registry.register("sync", cmd_sync, help_text="Sync with the remote mirror now.")
