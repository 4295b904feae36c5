# src/taskdeck/storage/persistence.py

"""
Dual-tier persistence.

Reads walk the tiers in priority order and take the first non-empty snapshot.
Writes send the full snapshot to every enabled tier at once; a failing tier is
disabled on its own and never blocks or rolls back the others.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import threading
from collections.abc import Sequence

from ..core.ports import Snapshot
from ..tasks.task_models import TierStatus
from .tiers import StorageTier

logger = logging.getLogger(__name__)


class PersistenceLayer:
    def __init__(self, tiers: Sequence[StorageTier]) -> None:
        names = [t.name for t in tiers]
        if len(set(names)) != len(names):
            raise ValueError(f"duplicate tier names: {names}")
        self._tiers = list(tiers)
        self._pending: set[asyncio.Task[None]] = set()

        # Saves scheduled by callers without a running loop.
        self._bg_lock = threading.Lock()
        self._bg_loop: asyncio.AbstractEventLoop | None = None
        self._bg_thread: threading.Thread | None = None
        self._bg_pending: set[concurrent.futures.Future[None]] = set()

    @property
    def tier_names(self) -> list[str]:
        return [t.name for t in self._tiers]

    def tier(self, name: str) -> StorageTier | None:
        for t in self._tiers:
            if t.name == name:
                return t
        return None

    def status(self, tier_name: str) -> TierStatus:
        t = self.tier(tier_name)
        if t is None:
            return TierStatus(enabled=False, error=None)
        return t.status

    async def load(self) -> Snapshot | None:
        """
        Freshest available snapshot, or None if no tier has one.

        In-flight saves are awaited first so a read never returns a snapshot
        older than this session's own writes.
        """
        await self.drain()

        saw_empty = False
        for t in self._tiers:
            if not t.enabled:
                continue
            snapshot = await t.load()
            if snapshot:
                logger.debug("Loaded %d records from tier=%s", len(snapshot), t.name)
                return snapshot
            if snapshot is not None:
                saw_empty = True

        return [] if saw_empty else None

    async def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot to all enabled tiers concurrently and wait for them."""
        targets = [t for t in self._tiers if t.enabled]
        skipped = [t.name for t in self._tiers if not t.enabled]
        if skipped:
            logger.debug("Save skipping disabled tiers: %s", ", ".join(skipped))
        if not targets:
            return
        await asyncio.gather(*(t.save(snapshot) for t in targets))

    def schedule_save(self, snapshot: Snapshot) -> None:
        """
        Fire-and-forget save.

        Inside a running event loop the save becomes a task on that loop.
        Sync callers hand it to a background loop thread; either way this
        returns before any tier is written.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            fut = asyncio.run_coroutine_threadsafe(self.save(snapshot), self._background_loop())
            with self._bg_lock:
                self._bg_pending.add(fut)
            fut.add_done_callback(self._forget_background)
            return

        task = loop.create_task(self.save(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _background_loop(self) -> asyncio.AbstractEventLoop:
        with self._bg_lock:
            if self._bg_loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name="taskdeck-saves", daemon=True)
                thread.start()
                self._bg_loop, self._bg_thread = loop, thread
                logger.debug("Started background save loop")
            return self._bg_loop

    def _forget_background(self, fut: concurrent.futures.Future[None]) -> None:
        with self._bg_lock:
            self._bg_pending.discard(fut)

    def _background_futures(self) -> list[concurrent.futures.Future[None]]:
        with self._bg_lock:
            return list(self._bg_pending)

    @property
    def pending_saves(self) -> int:
        return len(self._pending) + len(self._background_futures())

    async def drain(self) -> None:
        """Wait until every scheduled save has settled."""
        while self._pending or self._background_futures():
            waiting = [*self._pending, *(asyncio.wrap_future(f) for f in self._background_futures())]
            await asyncio.gather(*waiting, return_exceptions=True)

    def wait_background(self, timeout: float | None = None) -> bool:
        """Block until saves scheduled by sync callers settle. False on timeout."""
        futures = self._background_futures()
        if not futures:
            return True
        done, not_done = concurrent.futures.wait(futures, timeout=timeout)
        with self._bg_lock:
            self._bg_pending.difference_update(done)
        return not not_done

    def close(self, timeout: float | None = 10.0) -> None:
        """Flush saves from sync callers and stop the background loop (if it was started)."""
        if not self.wait_background(timeout):
            logger.warning("Background saves still pending at close")
        with self._bg_lock:
            loop, thread = self._bg_loop, self._bg_thread
            self._bg_loop = self._bg_thread = None
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout)
        if not thread.is_alive():
            loop.close()
