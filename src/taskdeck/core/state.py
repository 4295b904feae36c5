# src/taskdeck/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..storage.persistence import PersistenceLayer
from ..tasks.task_store import TaskStore
from ..tasks.view import ViewState
from .ports import PreferencesRepo


@dataclass
class AppState:
    """
    Everything one session needs, built once by cli.bootstrap.

    Consumers receive this object explicitly; nothing here is a module global.
    """

    settings: Any
    persistence: PersistenceLayer
    task_store: TaskStore
    prefs: PreferencesRepo
    view: ViewState = field(default_factory=ViewState)
