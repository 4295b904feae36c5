# src/taskdeck/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read from disk at import time except the optional .env file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from dotenv import load_dotenv

ENV_PREFIX = "TASKDECK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    parts = [p.strip() for p in raw.replace(",", " ").split() if p.strip()]
    return parts


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    local_store_dir: Path
    remote_store_dir: Path

    # ---- Storage tiers ----
    local_enabled: bool
    remote_enabled: bool
    remote_latency_ms: int
    remote_jitter_ms: int
    tier_order: List[str]
    serialize_saves: bool

    # ---- Keys ----
    tasks_key: str
    prefs_key: str

    # ---- Startup ----
    seed_demo: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskdeck").strip() or "taskdeck"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskdeck"))
        local_store_dir = _env_path(_k("LOCAL_STORE_DIR"), data_dir / "local")
        remote_store_dir = _env_path(_k("REMOTE_STORE_DIR"), data_dir / "remote")

        local_enabled = _env_bool(_k("LOCAL_ENABLED"), True)
        remote_enabled = _env_bool(_k("REMOTE_ENABLED"), True)
        remote_latency_ms = max(0, _env_int(_k("REMOTE_LATENCY_MS"), 300))
        remote_jitter_ms = max(0, _env_int(_k("REMOTE_JITTER_MS"), 0))

        # Unknown names are dropped; missing tiers are appended so both are always wired.
        order = [t.lower() for t in _env_list(_k("TIER_ORDER"), ["remote", "local"])]
        tier_order = [t for t in dict.fromkeys(order) if t in ("remote", "local")]
        for t in ("remote", "local"):
            if t not in tier_order:
                tier_order.append(t)

        serialize_saves = _env_bool(_k("SERIALIZE_SAVES"), False)

        tasks_key = _env(_k("TASKS_KEY"), "taskdeck.tasks").strip() or "taskdeck.tasks"
        prefs_key = _env(_k("PREFS_KEY"), "taskdeck.prefs").strip() or "taskdeck.prefs"

        seed_demo = _env_bool(_k("SEED_DEMO"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            local_store_dir=local_store_dir,
            remote_store_dir=remote_store_dir,
            local_enabled=local_enabled,
            remote_enabled=remote_enabled,
            remote_latency_ms=remote_latency_ms,
            remote_jitter_ms=remote_jitter_ms,
            tier_order=tier_order,
            serialize_saves=serialize_saves,
            tasks_key=tasks_key,
            prefs_key=prefs_key,
            seed_demo=seed_demo,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
