# src/taskdeck/storage/tiers.py

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import Any

from ..core.ports import AsyncKeyValueStore, KeyValueStore, Snapshot
from ..tasks.task_models import TierStatus

logger = logging.getLogger(__name__)

LOCAL = "local"
REMOTE = "remote"


def parse_snapshot(raw: str | None, *, source: str = "?") -> Snapshot | None:
    """
    Decode a stored snapshot.

    Missing, corrupt and non-list payloads all come back as None.
    Non-dict entries are dropped here; field-level cleanup happens in the codec.
    """
    if raw is None or not str(raw).strip():
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring corrupt snapshot from tier=%s", source)
        return None
    if not isinstance(data, list):
        logger.warning("Ignoring non-list snapshot from tier=%s type=%s", source, type(data).__name__)
        return None
    return [entry for entry in data if isinstance(entry, dict)]


class StorageTier:
    """
    One persistence backend plus its session status.

    The first read or write failure disables the tier for the rest of the
    session; there is no retry. A tier built without a backend starts disabled.
    """

    def __init__(
        self,
        name: str,
        backend: KeyValueStore | AsyncKeyValueStore | None,
        *,
        key: str = "taskdeck.tasks",
        serialize_saves: bool = False,
    ) -> None:
        self.name = name
        self._backend = backend
        self._key = key
        self._enabled = backend is not None
        self._error: str | None = None
        self._write_lock = asyncio.Lock() if serialize_saves else None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def status(self) -> TierStatus:
        return TierStatus(enabled=self._enabled, error=self._error)

    def _fail(self, op: str, exc: BaseException) -> None:
        self._enabled = False
        self._error = f"{op} failed: {exc}"
        logger.warning("Storage tier %s disabled after %s failure: %s", self.name, op, exc)

    async def _call(self, result: Any) -> Any:
        if inspect.isawaitable(result):
            return await result
        return result

    async def load(self) -> Snapshot | None:
        if not self._enabled or self._backend is None:
            return None
        try:
            raw = await self._call(self._backend.get_item(self._key))
        except Exception as e:
            self._fail("read", e)
            return None
        return parse_snapshot(raw, source=self.name)

    async def save(self, snapshot: Snapshot) -> bool:
        """Write the full snapshot. Returns False if the tier is (or just became) disabled."""
        if not self._enabled or self._backend is None:
            return False

        try:
            payload = json.dumps(snapshot, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.exception("Snapshot is not JSON-serializable; skipping save to tier=%s", self.name)
            self._fail("encode", e)
            return False

        if self._write_lock is None:
            return await self._write(payload)
        async with self._write_lock:
            return await self._write(payload)

    async def _write(self, payload: str) -> bool:
        # Re-check: an earlier queued write may have disabled the tier.
        if not self._enabled or self._backend is None:
            return False
        try:
            await self._call(self._backend.set_item(self._key, payload))
        except Exception as e:
            self._fail("write", e)
            return False
        logger.debug("Saved snapshot to tier=%s bytes=%d", self.name, len(payload))
        return True
