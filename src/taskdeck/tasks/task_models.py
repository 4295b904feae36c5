# src/taskdeck/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Category of an inline error carried by a result object."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    IMPORT_FORMAT = "import_format"


@dataclass(slots=True)
class TaskRecord:
    id: int
    label: str
    completed: bool
    created_at: int
    updated_at: int
    due_date: str | None = None

    def copy(self) -> TaskRecord:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape used by snapshots, imports and exports."""
        return {
            "id": self.id,
            "label": self.label,
            "completed": self.completed,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "dueDate": self.due_date,
        }


@dataclass(slots=True, frozen=True)
class TierStatus:
    enabled: bool
    error: str | None = None


@dataclass(slots=True, frozen=True)
class ItemResult:
    item: TaskRecord | None
    error: str | None = None
    error_kind: ErrorKind | None = None


@dataclass(slots=True, frozen=True)
class RemoveResult:
    removed: TaskRecord | None
    error: str | None = None
    error_kind: ErrorKind | None = None


@dataclass(slots=True, frozen=True)
class CountResult:
    count: int
    error: str | None = None
    error_kind: ErrorKind | None = None


@dataclass(slots=True, frozen=True)
class ImportResult:
    imported: int
    error: str | None = None
    error_kind: ErrorKind | None = None
