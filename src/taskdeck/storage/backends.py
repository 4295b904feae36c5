# src/taskdeck/storage/backends.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import random
import re
from pathlib import Path

from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StorageError(Exception):
    """A backend could not read or write. Caught at the tier boundary."""


class MemoryKeyValueStore:
    """Dict-backed store. Used for tests and as the inner store of ephemeral remotes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value


class NullKeyValueStore:
    """No-op store: reads find nothing, writes are dropped."""

    def get_item(self, key: str) -> str | None:
        return None

    def set_item(self, key: str, value: str) -> None:
        return


class JsonFileKeyValueStore:
    """
    One file per key under a directory.

    Writes go through a temp file + os.replace so a crash mid-write never
    leaves a half-written snapshot behind.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key) or "_"
        return self._root / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            if not path.exists():
                return None
            return path.read_text("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"read failed for {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(value, "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageError(f"write failed for {path}: {e}") from e


class SimulatedRemoteStore:
    """
    Async facade over a synchronous store that sleeps before every call,
    standing in for a network round-trip.

    With jitter > 0 two back-to-back writes may land out of order; the one
    whose sleep ends last overwrites the other.
    """

    def __init__(
        self,
        inner: KeyValueStore,
        *,
        latency_seconds: float = 0.3,
        jitter_seconds: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        self._inner = inner
        self._latency = max(0.0, float(latency_seconds))
        self._jitter = max(0.0, float(jitter_seconds))
        self._rng = rng or random.Random()

    def _delay(self) -> float:
        if self._jitter <= 0:
            return self._latency
        return self._latency + self._rng.uniform(0.0, self._jitter)

    async def get_item(self, key: str) -> str | None:
        await asyncio.sleep(self._delay())
        return self._inner.get_item(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.sleep(self._delay())
        self._inner.set_item(key, value)
