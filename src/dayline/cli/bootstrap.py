# src/dayline/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires storage, clock and id source into the TaskRegistry and AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import Clock, IdSource, KeyValueStorage
from ..core.runtime import SystemClock, UuidIdSource
from ..core.state import AppState
from ..storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore
from ..tasks.task_registry import TaskRegistry

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_path.parent.mkdir(parents=True, exist_ok=True)


def open_storage(settings) -> KeyValueStorage:
    """
    SQLite storage when persistence is on; falls back to memory if the
    database cannot be opened so the session still works.
    """
    if not getattr(settings, "persist", True):
        logger.info("Persistence disabled; using in-memory storage.")
        return MemoryKeyValueStore()

    try:
        _ensure_local_dirs(settings)
        return SQLiteKeyValueStore(settings.store_path)
    except Exception:
        logger.exception("Failed to open %s; using in-memory storage.", settings.store_path)
        return MemoryKeyValueStore()


def create_initial_state(
    *,
    settings=None,
    storage: KeyValueStorage | None = None,
    clock: Clock | None = None,
    id_source: IdSource | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Everything is injectable for tests; if settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        storage = open_storage(settings)

    registry = TaskRegistry(
        storage,
        clock=clock or SystemClock(),
        id_source=id_source or UuidIdSource(),
    )
    return AppState(settings=settings, storage=storage, registry=registry)
