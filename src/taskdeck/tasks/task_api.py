# src/taskdeck/tasks/task_api.py

from __future__ import annotations

import logging
from pathlib import Path

from ..core.state import AppState
from .codec import ERR_INVALID_FORMAT, export_json, import_text
from .task_models import ErrorKind, ImportResult, TaskRecord
from .view import TaskFilter, TaskSort, ViewState, project

logger = logging.getLogger(__name__)


def _set_view(state: AppState, view: ViewState) -> ViewState:
    state.view = view
    state.prefs.save_prefs(view.to_prefs())
    return view


def set_query(state: AppState, query: str) -> ViewState:
    # search text lives for the session only; no prefs write
    state.view = state.view.with_query(query)
    return state.view


def set_filter(state: AppState, raw: str) -> ViewState:
    return _set_view(
        state,
        ViewState(query=state.view.query, filter=TaskFilter.parse(raw, state.view.filter), sort=state.view.sort),
    )


def set_sort(state: AppState, raw: str) -> ViewState:
    return _set_view(
        state,
        ViewState(query=state.view.query, filter=state.view.filter, sort=TaskSort.parse(raw, state.view.sort)),
    )


async def visible_tasks(state: AppState) -> list[TaskRecord]:
    """Refresh from storage and apply the current view."""
    records = await state.task_store.fetch_all()
    return project(records, state.view)


def import_file(state: AppState, path: str | Path) -> ImportResult:
    try:
        text = Path(path).expanduser().read_text("utf-8")
    except (OSError, UnicodeDecodeError):
        logger.warning("Import file unreadable: %s", path, exc_info=True)
        return ImportResult(0, ERR_INVALID_FORMAT, ErrorKind.IMPORT_FORMAT)
    return import_text(state.task_store, text)


def export_file(state: AppState, path: str | Path) -> int:
    """Write the pretty-printed export. Returns the number of records written; OSError propagates."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(export_json(state.task_store), "utf-8")
    count = state.task_store.count()
    logger.info("Exported %d tasks to %s", count, target)
    return count
