"""
Storage subsystem.

Components:
- backends.py: key-value backends (JSON files, in-memory, no-op, simulated remote)
- tiers.py: StorageTier (one backend + its enabled/error status)
- persistence.py: PersistenceLayer (tier priority, fallback reads, fan-out writes)
- preferences.py: view preferences blob
"""

from .backends import (
    JsonFileKeyValueStore,
    MemoryKeyValueStore,
    NullKeyValueStore,
    SimulatedRemoteStore,
    StorageError,
)
from .persistence import PersistenceLayer
from .preferences import KeyValuePreferencesRepo
from .tiers import LOCAL, REMOTE, StorageTier, parse_snapshot

__all__ = [
    "LOCAL",
    "REMOTE",
    "JsonFileKeyValueStore",
    "KeyValuePreferencesRepo",
    "MemoryKeyValueStore",
    "NullKeyValueStore",
    "PersistenceLayer",
    "SimulatedRemoteStore",
    "StorageError",
    "StorageTier",
    "parse_snapshot",
]
