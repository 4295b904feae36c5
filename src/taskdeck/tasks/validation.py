# src/taskdeck/tasks/validation.py

"""
Label and due date rules.

Everything here is pure: same inputs, same verdict, no logging, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

MIN_LABEL_LENGTH = 3
MAX_LABEL_LENGTH = 100

ERR_BLANK = "Label must not be blank"
ERR_TOO_SHORT = f"Label must be at least {MIN_LABEL_LENGTH} characters"
ERR_TOO_LONG = f"Label must be under {MAX_LABEL_LENGTH} characters"
ERR_DUPLICATE = "A task with this name already exists"


@dataclass(slots=True, frozen=True)
class LabelCheck:
    label: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_label(candidate: Any, existing_labels: Iterable[str]) -> LabelCheck:
    """
    Check a label candidate. Rules run in order and the first failure wins:
    blank, too short, too long, case-insensitive duplicate.
    """
    label = candidate.strip() if isinstance(candidate, str) else ""
    if not label:
        return LabelCheck(None, ERR_BLANK)
    if len(label) < MIN_LABEL_LENGTH:
        return LabelCheck(None, ERR_TOO_SHORT)
    if len(label) > MAX_LABEL_LENGTH:
        return LabelCheck(None, ERR_TOO_LONG)

    folded = label.casefold()
    for existing in existing_labels:
        if (existing or "").strip().casefold() == folded:
            return LabelCheck(None, ERR_DUPLICATE)

    return LabelCheck(label)


def normalize_due_date(value: Any) -> str | None:
    """Coerce a due date to a string or None. No range or format check."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    return text or None
