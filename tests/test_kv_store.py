# tests/test_kv_store.py

from __future__ import annotations

from pathlib import Path

from dayline.storage.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore
from dayline.tasks.task_models import TaskDraft
from dayline.tasks.task_registry import TaskRegistry

from .fakes import CounterIds, FixedClock


def test_sqlite_set_get_overwrite(tmp_path: Path) -> None:
    store = SQLiteKeyValueStore(tmp_path / "nested" / "kv.sqlite3")

    assert store.get("missing") is None
    assert store.count_keys() == 0

    store.set("k", "[1, 2]")
    assert store.get("k") == "[1, 2]"

    store.set("k", "[]")
    assert store.get("k") == "[]"
    assert store.count_keys() == 1


def test_sqlite_store_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    SQLiteKeyValueStore(db).set("start", "600")
    assert SQLiteKeyValueStore(db).get("start") == "600"


def test_registry_round_trip_through_sqlite(tmp_path: Path) -> None:
    db = tmp_path / "dayline.sqlite3"
    clock = FixedClock()

    reg = TaskRegistry(SQLiteKeyValueStore(db), clock=clock, id_source=CounterIds())
    reg.add(TaskDraft(title="Deep work", priority=1, estimate_minutes=90))
    reg.add(TaskDraft(title="", priority=2, is_rest=True))
    reg.set_start_offset(540)

    again = TaskRegistry(SQLiteKeyValueStore(db), clock=clock, id_source=CounterIds(n=50))
    assert [t.title for t in again.sorted_tasks] == ["Deep work", "Rest time"]
    assert again.start_offset == 540
    assert again.total_minutes == 105


def test_memory_store() -> None:
    store = MemoryKeyValueStore({"a": "1"})
    assert store.get("a") == "1"
    store.set("b", "2")
    store.set("a", "3")
    assert store.get("a") == "3"
    assert store.get("b") == "2"
