# src/taskdeck/storage/preferences.py

from __future__ import annotations

import json
import logging
from typing import Any

from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)


class KeyValuePreferencesRepo:
    """
    View preferences ({filter, sort}) stored as one JSON object in a
    synchronous key-value backend. Best-effort: failures are logged and
    reads fall back to an empty dict.
    """

    def __init__(self, backend: KeyValueStore | None, *, key: str = "taskdeck.prefs") -> None:
        self._backend = backend
        self._key = key

    def load_prefs(self) -> dict[str, Any]:
        if self._backend is None:
            return {}
        try:
            raw = self._backend.get_item(self._key)
        except Exception:
            logger.warning("Failed to read preferences key=%s", self._key, exc_info=True)
            return {}
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt preferences blob key=%s", self._key)
            return {}
        return data if isinstance(data, dict) else {}

    def save_prefs(self, prefs: dict[str, Any]) -> None:
        if self._backend is None:
            return
        try:
            self._backend.set_item(self._key, json.dumps(prefs, ensure_ascii=False))
        except Exception:
            logger.warning("Failed to save preferences key=%s", self._key, exc_info=True)
