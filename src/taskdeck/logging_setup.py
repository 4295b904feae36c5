# src/taskdeck/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Lowest level that reaches the console, by logger-name prefix (longest match wins).
# Tier failures log at WARNING, so they still show up next to the prompt while
# per-save and per-load chatter stays in the file.
CONSOLE_FLOORS: dict[str, int] = {
    "taskdeck.": logging.DEBUG,
    "taskdeck.storage.": logging.WARNING,
    "taskdeck.tasks.codec": logging.INFO,
    "py.warnings": logging.ERROR,
}


class TaskdeckConsoleFilter(logging.Filter):
    """Per-prefix console floors; anything not listed needs ERROR+."""

    def __init__(self, floors: dict[str, int] | None = None, default: int = logging.ERROR) -> None:
        super().__init__()
        self._floors = sorted((floors or CONSOLE_FLOORS).items(), key=lambda kv: len(kv[0]), reverse=True)
        self._default = default

    def floor_for(self, name: str) -> int:
        for prefix, level in self._floors:
            if name == prefix.rstrip(".") or name.startswith(prefix):
                return level
        return self._default

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= self.floor_for(record.name)


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskdeck",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    file_name: str = "taskdeck.log",
) -> Path:
    """
    Console (filtered, prompt-friendly) plus a full log file.

    The file format carries the thread name because saves from sync callers
    run on the background "taskdeck-saves" thread.

    Returns the log file path. Call once, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / file_name

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    datefmt = "%Y-%m-%d %H:%M:%S"

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt))
    console.addFilter(TaskdeckConsoleFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s.%(msecs)03d %(levelname)s [%(threadName)s] %(name)s: %(message)s",
            datefmt,
        )
    )
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return log_file
