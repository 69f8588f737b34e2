# src/dayline/tasks/normalize.py

"""
Field normalization.

Every function here is total: whatever the caller (or the storage file) hands
in, a valid domain value comes out. The registry runs these on create, on
every patched field and on every record restored from storage.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any

from .task_models import (
    DAY_MINUTES,
    DEFAULT_REST_MINUTES,
    DEFAULT_WORK_MINUTES,
    MIN_PRIORITY,
    REST_TITLE,
    UNTITLED_TITLE,
    Task,
    TaskStatus,
)


def _to_number(value: Any) -> float | None:
    """Parse ints, floats and numeric strings. Returns None for anything non-finite."""
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            num = float(value)
        elif isinstance(value, str):
            num = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        # ints too large for a float count as non-finite
        return None
    return num if math.isfinite(num) else None


def _round_half_up(num: float) -> int:
    return int(math.floor(num + 0.5))


def default_minutes(is_rest: bool) -> int:
    return DEFAULT_REST_MINUTES if is_rest else DEFAULT_WORK_MINUTES


def normalize_priority(value: Any) -> int:
    num = _to_number(value)
    if num is None:
        return MIN_PRIORITY
    return max(MIN_PRIORITY, _round_half_up(num))


def normalize_minutes(value: Any, is_rest: bool) -> int | None:
    """
    None means "auto" and is kept as None.
    Garbage, zero and negatives fall back to the default for the task kind.
    """
    if value is None:
        return None
    num = _to_number(value)
    if num is None or num <= 0:
        return default_minutes(is_rest)
    rounded = _round_half_up(num)
    # Sub-minute estimates would round to 0, which is not a valid estimate.
    if rounded <= 0:
        return default_minutes(is_rest)
    return rounded


def normalize_title(value: Any, is_rest: bool, fallback: str | None = None) -> str:
    title = value.strip() if isinstance(value, str) else ""
    if title:
        return title
    if fallback:
        return fallback
    return REST_TITLE if is_rest else UNTITLED_TITLE


def normalize_description(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


def normalize_status(value: Any) -> TaskStatus:
    return TaskStatus.from_raw(value)


def normalize_start_minutes(value: Any) -> int:
    num = _to_number(value)
    if num is None:
        return 0
    return min(DAY_MINUTES - 1, max(0, _round_half_up(num)))


def effective_duration(task: Task) -> int:
    """Duration used for totals and timeline placement."""
    if task.estimate_minutes and task.estimate_minutes > 0:
        return task.estimate_minutes
    return default_minutes(task.is_rest)


def normalize_task_record(
    raw: Any,
    *,
    make_id: Callable[[], str],
    now_ts: float,
) -> Task | None:
    """
    Coerce one stored record into a Task.

    Records that are not objects, or have no string title, are dropped (None).
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("title"), str):
        return None

    is_rest = bool(raw.get("isRest"))

    raw_id = raw.get("id")
    task_id = raw_id if isinstance(raw_id, str) and raw_id else make_id()

    # createdAt must already be numeric; numeric strings are not accepted here.
    raw_created = raw.get("createdAt")
    created_at = None if isinstance(raw_created, str) else _to_number(raw_created)

    raw_priority = raw.get("priority")
    return Task(
        id=task_id,
        title=normalize_title(raw["title"], is_rest),
        description=normalize_description(raw.get("description")),
        priority=normalize_priority(MIN_PRIORITY if raw_priority is None else raw_priority),
        estimate_minutes=normalize_minutes(raw.get("estimateMinutes"), is_rest),
        status=normalize_status(raw.get("status")),
        is_rest=is_rest,
        created_at=created_at if created_at is not None else float(now_ts),
    )
