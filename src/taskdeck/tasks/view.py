# src/taskdeck/tasks/view.py

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Any

from .task_models import TaskRecord


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: Any, default: TaskFilter | None = None) -> TaskFilter:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return default or cls.ALL


class TaskSort(StrEnum):
    RECENT = "recent"
    OLDEST = "oldest"
    DUE = "due"

    @classmethod
    def parse(cls, raw: Any, default: TaskSort | None = None) -> TaskSort:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return default or cls.RECENT


@dataclass(slots=True, frozen=True)
class ViewState:
    query: str = ""
    filter: TaskFilter = TaskFilter.ALL
    sort: TaskSort = TaskSort.RECENT

    @classmethod
    def from_prefs(cls, prefs: Mapping[str, Any] | None) -> ViewState:
        """Build from a stored {filter, sort} blob; bad or missing fields fall back per field."""
        if not isinstance(prefs, Mapping):
            return cls()
        return cls(
            filter=TaskFilter.parse(prefs.get("filter")),
            sort=TaskSort.parse(prefs.get("sort")),
        )

    def to_prefs(self) -> dict[str, str]:
        # query is per-session and not persisted
        return {"filter": self.filter.value, "sort": self.sort.value}

    def with_query(self, query: str) -> ViewState:
        return replace(self, query=query or "")


def _time_key(r: TaskRecord) -> int:
    return r.updated_at or r.created_at or 0


def _due_key(r: TaskRecord) -> tuple[int, date]:
    # missing or unparseable due dates rank after every real date
    if r.due_date:
        try:
            return (0, date.fromisoformat(r.due_date[:10]))
        except ValueError:
            pass
    return (1, date.min)


def _matches_query(r: TaskRecord, folded_query: str) -> bool:
    return folded_query in r.label.casefold()


def project(records: Sequence[TaskRecord], view: ViewState) -> list[TaskRecord]:
    """
    Visible subset for a view: search, then filter, then sort.
    The input sequence is never modified.
    """
    q = (view.query or "").strip().casefold()
    out = [r for r in records if _matches_query(r, q)] if q else list(records)

    if view.filter is TaskFilter.ACTIVE:
        out = [r for r in out if not r.completed]
    elif view.filter is TaskFilter.COMPLETED:
        out = [r for r in out if r.completed]

    if view.sort is TaskSort.OLDEST:
        out.sort(key=lambda r: (_time_key(r), r.id))
    elif view.sort is TaskSort.DUE:
        out.sort(key=lambda r: (*_due_key(r), r.id))
    else:
        out.sort(key=lambda r: (_time_key(r), r.id), reverse=True)

    return out
