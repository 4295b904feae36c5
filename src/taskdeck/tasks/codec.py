# src/taskdeck/tasks/codec.py

"""
Import/export of task lists.

Imports are untrusted: every entry is rebuilt field by field and anything that
cannot become a valid TaskRecord is dropped. A successful import replaces the
whole collection (no merge).
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .task_models import ErrorKind, ImportResult, TaskRecord
from .validation import normalize_due_date, validate_label

if TYPE_CHECKING:
    from .task_store import TaskStore

logger = logging.getLogger(__name__)

ERR_INVALID_FORMAT = "Invalid import format"
ERR_NOTHING_VALID = "No valid tasks found in import"

_TRUE_STRINGS = {"1", "true", "yes", "y", "on"}


def _is_finite_number(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, int):
        return True
    return isinstance(v, float) and math.isfinite(v)


def _as_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in _TRUE_STRINGS
    return bool(v)


def _stored_label(raw: Any) -> str | None:
    label = raw.strip() if isinstance(raw, str) else ""
    return label or None


def sanitize_items(
    raw_items: list[Any],
    *,
    now_ms: int,
    strict: bool = True,
    known: Mapping[int, TaskRecord] | None = None,
) -> list[TaskRecord]:
    """
    Rebuild valid records from a list of task-like dicts.

    strict (imports): entries whose label fails validation (blank, length,
    duplicate of an earlier entry) are dropped.
    lenient (stored snapshots): only blank labels are dropped, with a warning;
    everything else that was once saved is kept as-is.

    Missing or non-finite timestamps are back-filled, first from the `known`
    record with the same id and label, then from now_ms. Ids that collide with
    an earlier entry are moved past the current maximum.
    """
    out: list[TaskRecord] = []
    used_ids: set[int] = set()
    known = known or {}

    for index, entry in enumerate(raw_items):
        if not isinstance(entry, dict):
            if not strict:
                logger.warning("Dropping stored entry #%d: not an object", index)
            continue

        if strict:
            check = validate_label(entry.get("label"), (r.label for r in out))
            label = check.label
            if label is None:
                logger.debug("Dropping entry #%d: %s", index, check.error)
                continue
        else:
            label = _stored_label(entry.get("label"))
            if label is None:
                logger.warning("Dropping stored entry #%d: blank label", index)
                continue

        raw_id = entry.get("id")
        task_id = int(raw_id) if _is_finite_number(raw_id) else index + 1
        if task_id in used_ids:
            task_id = max(used_ids) + 1
        used_ids.add(task_id)

        prior = known.get(task_id)
        if prior is not None and prior.label != label:
            prior = None

        raw_created = entry.get("createdAt")
        if _is_finite_number(raw_created):
            created_at = int(raw_created)
        else:
            created_at = prior.created_at if prior else now_ms
        raw_updated = entry.get("updatedAt")
        if _is_finite_number(raw_updated):
            updated_at = int(raw_updated)
        else:
            updated_at = prior.updated_at if prior else created_at

        out.append(
            TaskRecord(
                id=task_id,
                label=label,
                completed=_as_bool(entry.get("completed", False)),
                created_at=created_at,
                updated_at=max(created_at, updated_at),
                due_date=normalize_due_date(entry.get("dueDate")),
            )
        )

    return out


def import_items(store: TaskStore, raw_items: Any) -> ImportResult:
    if not isinstance(raw_items, list):
        return ImportResult(0, ERR_INVALID_FORMAT, ErrorKind.IMPORT_FORMAT)

    records = sanitize_items(raw_items, now_ms=store.now_ms())
    if not records:
        return ImportResult(0, ERR_NOTHING_VALID, ErrorKind.IMPORT_FORMAT)

    store.replace_all(records)
    logger.info("Imported %d of %d entries", len(records), len(raw_items))
    return ImportResult(len(records))


def import_text(store: TaskStore, text: str) -> ImportResult:
    """Import from the text of a JSON file."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return ImportResult(0, ERR_INVALID_FORMAT, ErrorKind.IMPORT_FORMAT)
    return import_items(store, data)


def export_snapshot(store: TaskStore) -> list[dict[str, Any]]:
    """Current collection in insertion order, in wire shape."""
    return [r.to_dict() for r in store.snapshot()]


def export_json(store: TaskStore) -> str:
    return json.dumps(export_snapshot(store), ensure_ascii=False, indent=2) + "\n"
