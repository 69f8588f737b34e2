# src/dayline/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_registry import TaskRegistry
from .ports import KeyValueStorage


@dataclass
class AppState:
    # Settings kept on the state for easy access in commands/connectors.
    settings: Any

    storage: KeyValueStorage
    registry: TaskRegistry
