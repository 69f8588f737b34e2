# src/dayline/tasks/task_registry.py

from __future__ import annotations

import json
import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any, TypeVar

from ..core.ports import Clock, IdSource, KeyValueStorage
from ..core.runtime import SystemClock, UuidIdSource
from .normalize import (
    effective_duration,
    normalize_description,
    normalize_minutes,
    normalize_priority,
    normalize_start_minutes,
    normalize_status,
    normalize_task_record,
    normalize_title,
)
from .reindex import (
    apply_order,
    normalize_priorities_if_needed,
    shift_for_insert,
    shift_for_rank_change,
    sort_tasks,
)
from .task_models import DAY_MINUTES, MIN_PRIORITY, Task, TaskDraft, TimelineSegment
from .timeline import project

logger = logging.getLogger(__name__)

TASKS_KEY = "todo.tasks.v1"
START_MINUTES_KEY = "todo.start-minutes.v1"
START_HOUR_KEY = "todo.start-hour.v1"  # legacy, hour precision

_UNSET: Any = object()
_T = TypeVar("_T")


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        num = float(value)
    except OverflowError:
        return None
    return num if math.isfinite(num) else None


class TaskRegistry:
    """
    Owner of the task collection and the timeline start offset.

    - Loads state from storage on construction (bad data is normalized away).
    - Every mutation runs normalization, then priority maintenance, then
      replaces the collection and writes it back to storage.
    - Read views (sorted list, totals, timeline) are recomputed lazily and
      cached per state version.

    Nothing here raises to the caller: invalid requests return False and
    leave the state untouched, storage failures are logged and the session
    continues in memory.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Clock | None = None,
        id_source: IdSource | None = None,
    ) -> None:
        self._storage = storage
        self._clock: Clock = clock or SystemClock()
        self._ids: IdSource = id_source or UuidIdSource()

        self._tasks: list[Task] = []
        self._start_offset = 0
        self._last_created_at = 0.0

        self._version = 0
        self._cache: dict[str, tuple[int, Any]] = {}

        self._restore()
        self._persist_tasks()
        self._persist_start_offset()
        logger.info(
            "TaskRegistry ready tasks=%d start=%d", len(self._tasks), self._start_offset
        )

    # ---- read views ----

    @property
    def version(self) -> int:
        return self._version

    @property
    def tasks(self) -> tuple[Task, ...]:
        """Tasks in collection (insertion) order."""
        return tuple(self._tasks)

    @property
    def start_offset(self) -> int:
        return self._start_offset

    @property
    def sorted_tasks(self) -> tuple[Task, ...]:
        return self._memo("sorted", lambda: tuple(sort_tasks(self._tasks)))

    @property
    def total_minutes(self) -> int:
        return self._memo("total", lambda: sum(effective_duration(t) for t in self._tasks))

    @property
    def overbooked(self) -> bool:
        return self.total_minutes > DAY_MINUTES

    @property
    def timeline(self) -> tuple[TimelineSegment, ...]:
        return self._memo(
            "timeline", lambda: tuple(project(self.sorted_tasks, self._start_offset))
        )

    @property
    def next_priority(self) -> int:
        """Priority suggested for a new task: right after the least important one."""
        if not self._tasks:
            return MIN_PRIORITY
        return max(MIN_PRIORITY, max(t.priority for t in self._tasks) + 1)

    def get(self, task_id: str) -> Task | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    @staticmethod
    def effective_duration(task: Task) -> int:
        return effective_duration(task)

    # ---- mutations ----

    def add(self, draft: TaskDraft) -> Task:
        is_rest = bool(draft.is_rest)
        priority = normalize_priority(draft.priority)

        task = Task(
            id=self._make_id(),
            title=normalize_title(draft.title, is_rest),
            description=normalize_description(draft.description),
            priority=priority,
            estimate_minutes=normalize_minutes(draft.estimate_minutes, is_rest),
            status=normalize_status(draft.status),
            is_rest=is_rest,
            created_at=self._next_created_at(),
        )

        self._tasks = [*shift_for_insert(self._tasks, priority), task]
        self._commit_tasks()
        logger.info("Task added id=%s priority=%d rest=%s", task.id, priority, is_rest)
        return task

    def update(
        self,
        task_id: str,
        *,
        title: Any = _UNSET,
        description: Any = _UNSET,
        priority: Any = _UNSET,
        estimate_minutes: Any = _UNSET,
        status: Any = _UNSET,
        is_rest: Any = _UNSET,
    ) -> bool:
        """
        Patch a task. Fields left out keep their current value.

        - priority: other tasks are shifted first so ranks stay unique
        - title: empty text means "Rest time" for rest tasks, else keep current
        - description: empty text or None clears it
        - estimate_minutes: None switches back to the automatic duration

        Returns False (and changes nothing) when the id is unknown.
        """
        current = self.get(task_id)
        if current is None:
            logger.debug("update ignored: unknown task id=%s", task_id)
            return False

        tasks = self._tasks
        if priority is not _UNSET:
            tasks = shift_for_rank_change(tasks, task_id, normalize_priority(priority))

        rest = current.is_rest if is_rest is _UNSET else bool(is_rest)

        fields: dict[str, Any] = {"is_rest": rest}
        if isinstance(title, str):
            fields["title"] = normalize_title(title, rest, fallback=None if rest else current.title)
        if description is not _UNSET:
            fields["description"] = normalize_description(description)
        if estimate_minutes is not _UNSET:
            fields["estimate_minutes"] = normalize_minutes(estimate_minutes, rest)
        if status is not _UNSET:
            fields["status"] = normalize_status(status)

        updated = [replace(t, **fields) if t.id == task_id else t for t in tasks]
        if updated == self._tasks:
            return True

        self._tasks = updated
        self._commit_tasks()
        logger.info("Task updated id=%s fields=%s", task_id, sorted(fields))
        return True

    def remove(self, task_id: str) -> bool:
        kept = [t for t in self._tasks if t.id != task_id]
        if len(kept) == len(self._tasks):
            logger.debug("remove ignored: unknown task id=%s", task_id)
            return False

        self._tasks = kept
        self._commit_tasks()
        logger.info("Task removed id=%s", task_id)
        return True

    def reorder(self, order: Iterable[str]) -> bool:
        """
        Assign priorities 1..N from an explicit ordering of all task ids.

        Returns False (and changes nothing) unless `order` is exactly a
        permutation of the live ids.
        """
        wanted = list(order)
        reordered = apply_order(self._tasks, wanted)
        if reordered is None:
            logger.info(
                "reorder rejected: got %d ids for %d tasks", len(wanted), len(self._tasks)
            )
            return False

        self._tasks = reordered
        self._commit_tasks()
        logger.info("Tasks reordered n=%d", len(reordered))
        return True

    def move(self, task_id: str, position: int) -> bool:
        """Move a task to a 0-based position of the sorted view (drag and drop)."""
        ordered = [t.id for t in self.sorted_tasks]
        if task_id not in ordered:
            return False

        ordered.remove(task_id)
        index = max(0, min(len(ordered), int(position)))
        ordered.insert(index, task_id)
        return self.reorder(ordered)

    def set_start_offset(self, minutes: Any) -> int:
        value = normalize_start_minutes(minutes)
        if value != self._start_offset:
            self._start_offset = value
            self._version += 1
        self._persist_start_offset()
        logger.debug("Start offset set to %d", value)
        return value

    def sync_start_to_now(self) -> int:
        return self.set_start_offset(self._clock.now_minutes())

    # ---- internals ----

    def _memo(self, name: str, compute: Callable[[], _T]) -> _T:
        hit = self._cache.get(name)
        if hit is not None and hit[0] == self._version:
            return hit[1]
        value = compute()
        self._cache[name] = (self._version, value)
        return value

    def _commit_tasks(self) -> None:
        self._version += 1
        self._persist_tasks()

    def _make_id(self) -> str:
        live = {t.id for t in self._tasks}
        while True:
            new_id = self._ids.new_id()
            if new_id not in live:
                return new_id

    def _next_created_at(self) -> float:
        ts = float(self._clock.now_ts())
        if ts <= self._last_created_at:
            ts = self._last_created_at + 0.001
        self._last_created_at = ts
        return ts

    def _restore(self) -> None:
        raw_tasks = self._read_json(TASKS_KEY, [])
        if isinstance(raw_tasks, list):
            self._tasks = self._restore_tasks(raw_tasks)
        else:
            logger.warning("Stored tasks are not a list; starting empty.")

        if self._tasks:
            self._last_created_at = max(t.created_at for t in self._tasks)

        self._start_offset = self._restore_start_offset()

    def _restore_tasks(self, raw_tasks: Sequence[Any]) -> list[Task]:
        now_ts = float(self._clock.now_ts())

        # Replacement ids must not collide with any stored id, earlier or later.
        taken = {
            raw["id"] for raw in raw_tasks if isinstance(raw, dict) and isinstance(raw.get("id"), str)
        }

        def fresh_id() -> str:
            while True:
                new_id = self._ids.new_id()
                if new_id not in taken:
                    taken.add(new_id)
                    return new_id

        seen: set[str] = set()
        out: list[Task] = []
        dropped = 0

        for raw in raw_tasks:
            task = normalize_task_record(raw, make_id=fresh_id, now_ts=now_ts)
            if task is None:
                dropped += 1
                continue
            if task.id in seen:
                task = replace(task, id=fresh_id())
            seen.add(task.id)
            out.append(task)

        if dropped:
            logger.warning("Dropped %d malformed task record(s) on load.", dropped)
        return normalize_priorities_if_needed(out)

    def _restore_start_offset(self) -> int:
        minutes = _finite_number(self._read_json(START_MINUTES_KEY, None))
        if minutes is not None:
            return normalize_start_minutes(minutes)

        hour = _finite_number(self._read_json(START_HOUR_KEY, None))
        if hour is not None:
            return min(23, max(0, int(math.floor(hour + 0.5)))) * 60

        return normalize_start_minutes(self._clock.now_minutes())

    def _read_json(self, key: str, fallback: Any) -> Any:
        try:
            raw = self._storage.get(key)
        except Exception:
            logger.warning("Storage read failed key=%s; using defaults.", key, exc_info=True)
            return fallback
        if not raw:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Malformed JSON in storage key=%s; using defaults.", key)
            return fallback

    def _write_json(self, key: str, value: Any) -> None:
        try:
            self._storage.set(key, json.dumps(value, ensure_ascii=False))
        except Exception:
            logger.exception("Storage write failed key=%s; keeping state in memory only.", key)

    def _persist_tasks(self) -> None:
        self._write_json(TASKS_KEY, [t.to_record() for t in self._tasks])

    def _persist_start_offset(self) -> None:
        self._write_json(START_MINUTES_KEY, self._start_offset)
