# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "TASKDECK_APP_NAME": "App display name (default: taskdeck).",
    "TASKDECK_LOG_LEVEL": "Console logging level (default: INFO).",
    # Paths (gitignored)
    "TASKDECK_DATA_DIR": "Local data directory (default: .local/taskdeck).",
    "TASKDECK_LOCAL_STORE_DIR": "Local tier directory (default: <data_dir>/local).",
    "TASKDECK_REMOTE_STORE_DIR": "Simulated remote tier directory (default: <data_dir>/remote).",
    # Storage tiers
    "TASKDECK_LOCAL_ENABLED": "Use the local tier (true/false, default: true).",
    "TASKDECK_REMOTE_ENABLED": "Use the simulated remote tier (true/false, default: true).",
    "TASKDECK_REMOTE_LATENCY_MS": "Simulated remote latency per call (default: 300).",
    "TASKDECK_REMOTE_JITTER_MS": "Random extra remote latency (default: 0).",
    "TASKDECK_TIER_ORDER": "Read priority, comma separated (default: remote,local).",
    "TASKDECK_SERIALIZE_SAVES": "Queue writes per tier instead of last-write-wins (default: false).",
    # Keys
    "TASKDECK_TASKS_KEY": "Storage key of the task snapshot (default: taskdeck.tasks).",
    "TASKDECK_PREFS_KEY": "Storage key of the view preferences (default: taskdeck.prefs).",
    # Startup
    "TASKDECK_SEED_DEMO": "Start with two demo tasks when nothing is stored (default: true).",
}
