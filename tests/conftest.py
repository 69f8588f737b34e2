# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from dayline.cli.bootstrap import create_initial_state
from dayline.core.state import AppState
from dayline.tasks.task_registry import TaskRegistry

from .fakes import CounterIds, FakeStorage, FixedClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the commands.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="dayline-test",
        log_level="WARNING",
        persist=True,
        console_enabled=False,
        data_dir=tmp_path,
        store_path=tmp_path / "dayline.sqlite3",
        timeline_width=48,
    )


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def registry(storage: FakeStorage, clock: FixedClock) -> TaskRegistry:
    return TaskRegistry(storage, clock=clock, id_source=CounterIds())


@pytest.fixture()
def state(settings: SimpleNamespace, storage: FakeStorage, clock: FixedClock) -> AppState:
    """
    AppState wired with deterministic fakes (no SQLite, fixed clock, predictable ids).
    """
    return create_initial_state(
        settings=settings,
        storage=storage,
        clock=clock,
        id_source=CounterIds(),
    )
