# src/taskdeck/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from ..core.ports import SnapshotRepo
from ..storage.tiers import LOCAL, REMOTE
from .task_models import (
    CountResult,
    ErrorKind,
    ItemResult,
    RemoveResult,
    TaskRecord,
    TierStatus,
)
from .codec import sanitize_items
from .validation import normalize_due_date, validate_label

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _not_found(task_id: int) -> str:
    return f"No item found for id {task_id}"


class TaskStore:
    """
    In-memory task collection with write-behind persistence.

    Ownership:
    - the list in self._items is never handed out; readers get copies

    Mutations:
    - run synchronously, never yield mid-update
    - return a result object with `error` set instead of raising
    - schedule a full-snapshot save and return before it settles
    """

    def __init__(
        self,
        persistence: SnapshotRepo,
        *,
        initial: Iterable[TaskRecord] = (),
        clock: Clock | None = None,
    ) -> None:
        self._persistence = persistence
        self._clock = clock or _wall_clock_ms
        self._items: list[TaskRecord] = [r.copy() for r in initial]
        self._closed = False
        logger.info("TaskStore ready total=%s", len(self._items))

    async def aclose(self) -> None:
        """Wait for pending saves. The store must not be used afterwards."""
        await self._persistence.drain()
        self._closed = True
        logger.debug("TaskStore closed")

    def close(self) -> None:
        """Sync counterpart of aclose() for callers without an event loop."""
        self._persistence.close()
        self._closed = True
        logger.debug("TaskStore closed")

    # ---- low-level helpers ----

    def now_ms(self) -> int:
        return int(self._clock())

    def _find(self, task_id: int) -> TaskRecord | None:
        for item in self._items:
            if item.id == task_id:
                return item
        return None

    def _next_id(self) -> int:
        return max((r.id for r in self._items), default=0) + 1

    def _touch(self, item: TaskRecord) -> None:
        # Never move updated_at backwards, even if the clock does.
        item.updated_at = max(self.now_ms(), item.updated_at, item.created_at)

    def _persist(self) -> None:
        if self._closed:
            logger.warning("Mutation after close; snapshot not persisted")
            return
        self._persistence.schedule_save([r.to_dict() for r in self._items])

    # ---- public API ----

    def snapshot(self) -> list[TaskRecord]:
        """Deep copy of the collection without touching storage."""
        return [r.copy() for r in self._items]

    def count(self) -> int:
        return len(self._items)

    async def fetch_all(self) -> list[TaskRecord]:
        """
        Refresh from storage when a snapshot is available, then return a copy.

        Storage problems never surface here; on failure the in-memory
        collection is returned as-is.
        """
        try:
            loaded = await self._persistence.load()
        except Exception:
            logger.exception("Snapshot load failed; serving in-memory collection")
            loaded = None

        if loaded is not None:
            known = {r.id: r for r in self._items}
            self._items = sanitize_items(loaded, now_ms=self.now_ms(), strict=False, known=known)
            logger.debug("Collection refreshed from storage total=%d", len(self._items))

            # Back-filled or cleaned-up fields are written back once so the
            # next read sees the same values.
            if [r.to_dict() for r in self._items] != loaded:
                logger.info("Stored snapshot needed normalizing; saving cleaned copy")
                self._persist()

        return self.snapshot()

    def add(self, label: str, due_date: object = None) -> ItemResult:
        check = validate_label(label, (r.label for r in self._items))
        if check.label is None:
            return ItemResult(None, check.error, ErrorKind.VALIDATION)

        now = self.now_ms()
        item = TaskRecord(
            id=self._next_id(),
            label=check.label,
            completed=False,
            created_at=now,
            updated_at=now,
            due_date=normalize_due_date(due_date),
        )
        self._items.append(item)
        self._persist()
        logger.debug("Task added id=%s due=%s", item.id, item.due_date)
        return ItemResult(item.copy())

    def toggle(self, task_id: int) -> ItemResult:
        item = self._find(task_id)
        if item is None:
            logger.warning("toggle: no item found for id %s", task_id)
            return ItemResult(None, _not_found(task_id), ErrorKind.NOT_FOUND)

        item.completed = not item.completed
        self._touch(item)
        self._persist()
        logger.debug("Task toggled id=%s completed=%s", item.id, item.completed)
        return ItemResult(item.copy())

    def remove(self, task_id: int) -> RemoveResult:
        for i, item in enumerate(self._items):
            if item.id == task_id:
                del self._items[i]
                self._persist()
                logger.debug("Task removed id=%s", task_id)
                return RemoveResult(item.copy())

        logger.warning("remove: no item found for id %s", task_id)
        return RemoveResult(None, _not_found(task_id), ErrorKind.NOT_FOUND)

    def mark_all_complete(self) -> CountResult:
        changed = 0
        for item in self._items:
            if not item.completed:
                item.completed = True
                self._touch(item)
                changed += 1
        self._persist()
        logger.debug("mark_all_complete changed=%d total=%d", changed, len(self._items))
        return CountResult(len(self._items))

    def clear_completed(self) -> CountResult:
        before = len(self._items)
        self._items = [r for r in self._items if not r.completed]
        removed = before - len(self._items)
        if removed:
            self._persist()
        logger.debug("clear_completed removed=%d", removed)
        return CountResult(removed)

    def replace_all(self, records: Iterable[TaskRecord]) -> None:
        """Swap in a new collection in one step and persist it (used by imports)."""
        self._items = [r.copy() for r in records]
        remote = self._persistence.status(REMOTE)
        if not remote.enabled:
            logger.warning(
                "Remote tier disabled; replaced collection persisted locally only (error=%s)",
                remote.error,
            )
        self._persist()

    def get_storage_status(self) -> TierStatus:
        return self._persistence.status(LOCAL)

    def get_api_status(self) -> TierStatus:
        return self._persistence.status(REMOTE)

    def log_state(self) -> None:
        """Dump the collection as a table (debugging aid)."""
        lines = [f"{'id':>4}  {'done':<5} {'due':<10}  label"]
        for r in self._items:
            lines.append(f"{r.id:>4}  {str(r.completed):<5} {r.due_date or '-':<10}  {r.label}")
        logger.info("TaskStore state (%d items):\n%s", len(self._items), "\n".join(lines))
