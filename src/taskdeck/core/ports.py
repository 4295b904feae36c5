# src/taskdeck/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps storage backends swappable and makes testing easier.
"""

from typing import Any, Awaitable, Protocol

Snapshot = list[dict[str, Any]]
# Full task collection in wire shape: [{"id": ..., "label": ..., "createdAt": ...}, ...].


class KeyValueStore(Protocol):
    """
    Synchronous string key-value backend (the local tier).

    Implementations raise storage.StorageError on I/O failure.
    get_item returns None when the key was never written.
    """

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...


class AsyncKeyValueStore(Protocol):
    """Latent key-value backend (the simulated remote tier)."""

    def get_item(self, key: str) -> Awaitable[str | None]: ...
    def set_item(self, key: str, value: str) -> Awaitable[None]: ...


class SnapshotRepo(Protocol):
    """What TaskStore needs from the persistence layer."""

    async def load(self) -> Snapshot | None: ...
    def schedule_save(self, snapshot: Snapshot) -> None: ...
    async def drain(self) -> None: ...
    def close(self) -> None: ...
    def status(self, tier_name: str) -> Any: ...


class PreferencesRepo(Protocol):
    def load_prefs(self) -> dict[str, Any]: ...
    def save_prefs(self, prefs: dict[str, Any]) -> None: ...
