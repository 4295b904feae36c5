# tests/test_persistence.py

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from taskdeck.storage import (
    LOCAL,
    REMOTE,
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    NullKeyValueStore,
    PersistenceLayer,
    SimulatedRemoteStore,
    StorageError,
    StorageTier,
    parse_snapshot,
)

from .fakes import FailingKeyValueStore, ScriptedLatencyStore

KEY = "taskdeck.tasks"


def _dump(*labels: str) -> str:
    return json.dumps([{"id": i + 1, "label": lbl} for i, lbl in enumerate(labels)])


@pytest.mark.parametrize("raw", [None, "", "not json", '{"id": 1}', "42", "null"])
def test_parse_snapshot_treats_bad_payloads_as_absent(raw) -> None:
    assert parse_snapshot(raw) is None


def test_parse_snapshot_drops_non_dict_entries() -> None:
    assert parse_snapshot('[1, "x", {"label": "ok"}]') == [{"label": "ok"}]


@pytest.mark.asyncio
async def test_load_falls_back_to_local_when_remote_empty() -> None:
    local = MemoryKeyValueStore({KEY: _dump("Local task")})
    layer = PersistenceLayer([StorageTier(REMOTE, MemoryKeyValueStore()), StorageTier(LOCAL, local)])
    assert await layer.load() == [{"id": 1, "label": "Local task"}]


@pytest.mark.asyncio
async def test_load_falls_back_when_remote_read_fails() -> None:
    remote = FailingKeyValueStore()
    local = MemoryKeyValueStore({KEY: _dump("Local task")})
    layer = PersistenceLayer([StorageTier(REMOTE, remote), StorageTier(LOCAL, local)])

    assert await layer.load() == [{"id": 1, "label": "Local task"}]
    status = layer.status(REMOTE)
    assert status.enabled is False
    assert status.error is not None and "read failed" in status.error

    # disabled for the session: no second attempt
    await layer.load()
    assert remote.reads == 1


@pytest.mark.asyncio
async def test_load_returns_none_when_nothing_stored_or_corrupt() -> None:
    local = MemoryKeyValueStore({KEY: "{broken"})
    layer = PersistenceLayer([StorageTier(REMOTE, NullKeyValueStore()), StorageTier(LOCAL, local)])
    assert await layer.load() is None
    # corrupt data is not a tier failure
    assert layer.status(LOCAL).enabled is True


@pytest.mark.asyncio
async def test_load_returns_empty_list_when_last_snapshot_was_empty() -> None:
    layer = PersistenceLayer(
        [StorageTier(REMOTE, MemoryKeyValueStore({KEY: "[]"})), StorageTier(LOCAL, MemoryKeyValueStore())]
    )
    assert await layer.load() == []


@pytest.mark.asyncio
async def test_tier_order_is_configurable() -> None:
    remote = MemoryKeyValueStore({KEY: _dump("Remote task")})
    local = MemoryKeyValueStore({KEY: _dump("Local task")})
    layer = PersistenceLayer([StorageTier(LOCAL, local), StorageTier(REMOTE, remote)])
    assert (await layer.load())[0]["label"] == "Local task"


@pytest.mark.asyncio
async def test_write_failure_disables_only_that_tier() -> None:
    broken = FailingKeyValueStore(fail_reads=False)
    local = MemoryKeyValueStore()
    layer = PersistenceLayer([StorageTier(REMOTE, broken), StorageTier(LOCAL, local)])

    await layer.save([{"id": 1, "label": "Kept"}])
    assert json.loads(local.items[KEY]) == [{"id": 1, "label": "Kept"}]
    assert layer.status(REMOTE).enabled is False
    assert layer.status(LOCAL).enabled is True

    await layer.save([{"id": 1, "label": "Again"}])
    assert broken.writes == 1
    assert json.loads(local.items[KEY])[0]["label"] == "Again"


def test_tier_without_backend_starts_disabled() -> None:
    tier = StorageTier(REMOTE, None)
    assert tier.status.enabled is False
    assert tier.status.error is None


def test_duplicate_tier_names_rejected() -> None:
    with pytest.raises(ValueError):
        PersistenceLayer([StorageTier(LOCAL, NullKeyValueStore()), StorageTier(LOCAL, NullKeyValueStore())])


def test_unknown_tier_status_is_disabled() -> None:
    layer = PersistenceLayer([StorageTier(LOCAL, NullKeyValueStore())])
    assert layer.status(REMOTE).enabled is False


@pytest.mark.asyncio
async def test_schedule_save_returns_before_remote_settles() -> None:
    inner = MemoryKeyValueStore()
    remote = SimulatedRemoteStore(inner, latency_seconds=0.05)
    local = MemoryKeyValueStore()
    layer = PersistenceLayer([StorageTier(REMOTE, remote), StorageTier(LOCAL, local)])

    layer.schedule_save([{"id": 1, "label": "Later"}])
    assert layer.pending_saves == 1
    assert KEY not in inner.items

    await layer.drain()
    assert layer.pending_saves == 0
    assert json.loads(inner.items[KEY])[0]["label"] == "Later"


@pytest.mark.asyncio
async def test_unserialized_saves_are_last_write_wins() -> None:
    remote = ScriptedLatencyStore(write_delays=[0.05, 0.0])
    layer = PersistenceLayer([StorageTier(REMOTE, remote)])

    layer.schedule_save([{"id": 1, "label": "older"}])
    layer.schedule_save([{"id": 1, "label": "newer"}])
    await layer.drain()

    # the slower first write lands last and wins
    assert json.loads(remote.items[KEY])[0]["label"] == "older"


@pytest.mark.asyncio
async def test_serialized_saves_keep_mutation_order() -> None:
    remote = ScriptedLatencyStore(write_delays=[0.05, 0.0])
    layer = PersistenceLayer([StorageTier(REMOTE, remote, serialize_saves=True)])

    layer.schedule_save([{"id": 1, "label": "older"}])
    layer.schedule_save([{"id": 1, "label": "newer"}])
    await layer.drain()

    assert json.loads(remote.items[KEY])[0]["label"] == "newer"


@pytest.mark.asyncio
async def test_load_waits_for_pending_saves() -> None:
    remote = SimulatedRemoteStore(MemoryKeyValueStore(), latency_seconds=0.02)
    layer = PersistenceLayer([StorageTier(REMOTE, remote)])

    layer.schedule_save([{"id": 1, "label": "Fresh"}])
    assert await layer.load() == [{"id": 1, "label": "Fresh"}]


@pytest.mark.asyncio
async def test_simulated_remote_sleeps_before_each_call() -> None:
    remote = SimulatedRemoteStore(MemoryKeyValueStore(), latency_seconds=0.05)
    loop = asyncio.get_running_loop()
    started = loop.time()
    await remote.set_item("k", "v")
    assert await remote.get_item("k") == "v"
    assert loop.time() - started >= 0.09


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileKeyValueStore(tmp_path / "kv")
    assert store.get_item(KEY) is None

    store.set_item(KEY, "[1]")
    assert store.get_item(KEY) == "[1]"
    assert (tmp_path / "kv" / "taskdeck.tasks.json").exists()
    assert not list((tmp_path / "kv").glob("*.tmp"))


def test_json_file_store_wraps_os_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", "utf-8")
    store = JsonFileKeyValueStore(blocker)

    with pytest.raises(StorageError):
        store.set_item(KEY, "[]")
