# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskdeck.core.state import AppState
from taskdeck.storage import (
    LOCAL,
    REMOTE,
    KeyValuePreferencesRepo,
    MemoryKeyValueStore,
    PersistenceLayer,
    SimulatedRemoteStore,
    StorageTier,
)
from taskdeck.tasks.task_models import TaskRecord
from taskdeck.tasks.task_store import TaskStore
from taskdeck.tasks.view import ViewState

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskdeck-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        local_store_dir=tmp_path / "data" / "local",
        remote_store_dir=tmp_path / "data" / "remote",
        local_enabled=True,
        remote_enabled=True,
        remote_latency_ms=0,
        remote_jitter_ms=0,
        tier_order=["remote", "local"],
        serialize_saves=False,
        tasks_key="taskdeck.tasks",
        prefs_key="taskdeck.prefs",
        seed_demo=True,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def local_kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def remote_kv() -> MemoryKeyValueStore:
    """Inner store of the simulated remote tier (inspect it directly in tests)."""
    return MemoryKeyValueStore()


@pytest.fixture()
def persistence(local_kv: MemoryKeyValueStore, remote_kv: MemoryKeyValueStore) -> Iterator[PersistenceLayer]:
    layer = PersistenceLayer(
        [
            StorageTier(REMOTE, SimulatedRemoteStore(remote_kv, latency_seconds=0.0)),
            StorageTier(LOCAL, local_kv),
        ]
    )
    yield layer
    layer.close()


@pytest.fixture()
def seed(clock: FakeClock) -> list[TaskRecord]:
    now = clock()
    return [
        TaskRecord(id=1, label="First task", completed=False, created_at=now, updated_at=now),
        TaskRecord(id=2, label="Second task", completed=True, created_at=now, updated_at=now),
    ]


@pytest.fixture()
def store(persistence: PersistenceLayer, seed: list[TaskRecord], clock: FakeClock) -> TaskStore:
    return TaskStore(persistence, initial=seed, clock=clock)


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    persistence: PersistenceLayer,
    store: TaskStore,
    local_kv: MemoryKeyValueStore,
) -> AppState:
    """AppState wired with in-memory backends (no files, no latency)."""
    return AppState(
        settings=settings,
        persistence=persistence,
        task_store=store,
        prefs=KeyValuePreferencesRepo(local_kv, key=settings.prefs_key),
        view=ViewState(),
    )
