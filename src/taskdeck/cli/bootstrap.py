# src/taskdeck/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete storage backends into tiers in the configured priority order,
- builds the TaskStore and restores view preferences into AppState.
"""

from __future__ import annotations

import logging
import time

from ..config import get_settings
from ..core.ports import KeyValueStore
from ..core.state import AppState
from ..storage import (
    LOCAL,
    REMOTE,
    JsonFileKeyValueStore,
    KeyValuePreferencesRepo,
    PersistenceLayer,
    SimulatedRemoteStore,
    StorageTier,
)
from ..tasks.task_models import TaskRecord
from ..tasks.task_store import TaskStore
from ..tasks.view import ViewState

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    if settings.local_enabled:
        settings.local_store_dir.mkdir(parents=True, exist_ok=True)
    if settings.remote_enabled:
        settings.remote_store_dir.mkdir(parents=True, exist_ok=True)


def demo_items(now_ms: int) -> list[TaskRecord]:
    """Starter collection used when nothing has been stored yet."""
    return [
        TaskRecord(id=1, label="First task", completed=False, created_at=now_ms, updated_at=now_ms),
        TaskRecord(id=2, label="Second task", completed=True, created_at=now_ms, updated_at=now_ms),
    ]


def build_persistence(settings) -> tuple[PersistenceLayer, KeyValueStore | None]:
    """
    Tiers in settings.tier_order. Returns the layer plus the local backend
    (shared with the preferences repo), or None when the local tier is off.
    """
    local_backend: KeyValueStore | None = None
    if settings.local_enabled:
        local_backend = JsonFileKeyValueStore(settings.local_store_dir)

    remote_backend = None
    if settings.remote_enabled:
        remote_backend = SimulatedRemoteStore(
            JsonFileKeyValueStore(settings.remote_store_dir),
            latency_seconds=settings.remote_latency_ms / 1000.0,
            jitter_seconds=settings.remote_jitter_ms / 1000.0,
        )

    backends = {LOCAL: local_backend, REMOTE: remote_backend}
    tiers = [
        StorageTier(
            name,
            backends[name],
            key=settings.tasks_key,
            serialize_saves=settings.serialize_saves,
        )
        for name in settings.tier_order
    ]
    return PersistenceLayer(tiers), local_backend


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    persistence, local_backend = build_persistence(settings)
    prefs = KeyValuePreferencesRepo(local_backend, key=settings.prefs_key)

    now_ms = int(time.time() * 1000)
    initial = demo_items(now_ms) if settings.seed_demo else []

    state = AppState(
        settings=settings,
        persistence=persistence,
        task_store=TaskStore(persistence, initial=initial),
        prefs=prefs,
        view=ViewState.from_prefs(prefs.load_prefs()),
    )
    logger.info(
        "State ready tiers=%s filter=%s sort=%s",
        ",".join(persistence.tier_names),
        state.view.filter.value,
        state.view.sort.value,
    )
    return state


async def hydrate(state: AppState) -> int:
    """Pull the stored collection (if any) into the store. Returns the resulting size."""
    records = await state.task_store.fetch_all()
    local = state.task_store.get_storage_status()
    remote = state.task_store.get_api_status()
    logger.info(
        "Loaded %d tasks (local=%s remote=%s)",
        len(records),
        "on" if local.enabled else "off",
        "on" if remote.enabled else "off",
    )
    return len(records)


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown: flush pending saves (no exceptions should escape)."""
    try:
        await state.task_store.aclose()
    except Exception:
        logger.exception("Failed to flush pending saves.")
    state.persistence.close()
