# src/taskdeck/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.state import AppState
from ..tasks import task_api
from ..tasks.task_models import TaskRecord, TierStatus
from ..tasks.view import TaskFilter, TaskSort

CommandEmitter = Callable[[str], None]
CommandReply = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandReply]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandReply]
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
        Handlers may be plain functions or coroutines.
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
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            reply = cast(CommandHandler3, handler)(state, args, emit)
        else:
            reply = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(reply):
            reply = await reply
        return reply

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_id(args: list[str]) -> int | None:
    if not args:
        return None
    try:
        return int(args[0].lstrip("#"))
    except ValueError:
        return None


def format_task(r: TaskRecord) -> str:
    mark = "x" if r.completed else " "
    due = f" (due {r.due_date})" if r.due_date else ""
    return f"[{mark}] #{r.id} {r.label}{due}"


def _format_tier(name: str, st: TierStatus) -> str:
    state = "enabled" if st.enabled else "disabled"
    err = f" - {st.error}" if st.error else ""
    return f"  {name}: {state}{err}"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    items = await task_api.visible_tasks(state)
    v = state.view
    header = f"View: filter={v.filter.value} sort={v.sort.value}"
    if v.query:
        header += f" search={v.query!r}"
    if not items:
        return f"{header}\nNo tasks."
    return "\n".join([header, *(format_task(r) for r in items)])


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add Write report
    /add Write report --due 2030-01-01
    """
    due: str | None = None
    words = list(args)
    if "--due" in words:
        i = words.index("--due")
        if i + 1 >= len(words):
            return "Usage: /add <label> [--due YYYY-MM-DD]"
        due = words[i + 1]
        del words[i : i + 2]

    result = state.task_store.add(" ".join(words), due)
    if result.error or result.item is None:
        return f"Not added: {result.error}"
    return f"Added {format_task(result.item)}"


def cmd_toggle(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /toggle <id>"
    result = state.task_store.toggle(task_id)
    if result.error or result.item is None:
        return str(result.error)
    return format_task(result.item)


def cmd_remove(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args)
    if task_id is None:
        return "Usage: /rm <id>"
    result = state.task_store.remove(task_id)
    if result.error or result.removed is None:
        return str(result.error)
    return f"Removed #{result.removed.id} {result.removed.label}"


def cmd_all_done(state: AppState, args: list[str]) -> str:
    result = state.task_store.mark_all_complete()
    return f"All {result.count} tasks marked complete."


def cmd_clear_done(state: AppState, args: list[str]) -> str:
    result = state.task_store.clear_completed()
    if not result.count:
        return "No completed tasks to clear."
    return f"Cleared {result.count} completed tasks."


def cmd_search(state: AppState, args: list[str]) -> str:
    view = task_api.set_query(state, " ".join(args))
    return f"Search: {view.query!r}" if view.query else "Search cleared."


def cmd_filter(state: AppState, args: list[str]) -> str:
    options = " | ".join(f.value for f in TaskFilter)
    if not args or args[0].lower() not in {f.value for f in TaskFilter}:
        return f"Usage: /filter {options}"
    view = task_api.set_filter(state, args[0])
    return f"Filter: {view.filter.value}"


def cmd_sort(state: AppState, args: list[str]) -> str:
    options = " | ".join(s.value for s in TaskSort)
    if not args or args[0].lower() not in {s.value for s in TaskSort}:
        return f"Usage: /sort {options}"
    view = task_api.set_sort(state, args[0])
    return f"Sort: {view.sort.value}"


def cmd_import(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        return "Usage: /import <path.json>"
    path = " ".join(args)
    if emit:
        with contextlib.suppress(Exception):
            emit(f"Importing {path} (replaces the current list)...")
    result = task_api.import_file(state, path)
    if result.error:
        return f"Import failed: {result.error}"
    return f"Imported {result.imported} tasks."


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /export <path.json>"
    path = " ".join(args)
    try:
        count = task_api.export_file(state, path)
    except OSError as e:
        logger.warning("Export to %s failed: %s", path, e)
        return f"Export failed: {e}"
    return f"Exported {count} tasks to {path}."


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.task_store
    return "\n".join(
        [
            "Status:",
            f"  Tasks: {store.count()}",
            _format_tier("Local storage", store.get_storage_status()),
            _format_tier("Remote API", store.get_api_status()),
            f"  Pending saves: {state.persistence.pending_saves}",
        ]
    )


def cmd_state(state: AppState, args: list[str]) -> str:
    state.task_store.log_state()
    return "Current collection written to the log."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks for the current view.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <label> [--due YYYY-MM-DD].")
registry.register("toggle", cmd_toggle, help_text="Flip completion: /toggle <id>.", aliases=["t"])
registry.register("rm", cmd_remove, help_text="Remove a task: /rm <id>.", aliases=["remove", "del"])
registry.register("all-done", cmd_all_done, help_text="Mark every task complete.")
registry.register("clear-done", cmd_clear_done, help_text="Remove completed tasks.")
registry.register("search", cmd_search, help_text="Filter by text: /search [text] (empty clears).")
registry.register("filter", cmd_filter, help_text="Show all | active | completed tasks.")
registry.register("sort", cmd_sort, help_text="Order by recent | oldest | due.")
registry.register("import", cmd_import, help_text="Replace the list from a JSON file.")
registry.register("export", cmd_export, help_text="Write the list to a JSON file.")
registry.register("status", cmd_status, help_text="Show storage tier status.")
registry.register("state", cmd_state, help_text="Dump the collection to the log.")
