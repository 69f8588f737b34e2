# src/dayline/tasks/reindex.py

"""
Priority maintenance.

Lower priority number = more important. All functions are pure: they take the
full task collection and return a new list, keeping the input order of the
collection. Each is a single O(n) pass (plus a sort for densifying).

Uniqueness argument for the rank change: tasks shifted down land in
[oldP, newP - 1], tasks shifted up land in [newP + 1, oldP], and the only task
that held a value inside the closed range without being shifted is the target
itself. Gaps in the range only leave gaps behind; they cannot create a
collision as long as the input was unique.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace

from .task_models import Task


def task_sort_key(task: Task) -> tuple[int, str, str, float]:
    """Canonical order: priority, then title (case-insensitive first), then creation time."""
    return (task.priority, task.title.casefold(), task.title, task.created_at)


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    return sorted(tasks, key=task_sort_key)


def has_duplicate_priorities(tasks: Sequence[Task]) -> bool:
    priorities = [t.priority for t in tasks]
    return len(set(priorities)) != len(priorities)


def shift_for_insert(tasks: Sequence[Task], priority: int) -> list[Task]:
    """Open a free slot at `priority` by pushing everything at or after it down by one."""
    return [replace(t, priority=t.priority + 1) if t.priority >= priority else t for t in tasks]


def shift_for_rank_change(tasks: Sequence[Task], task_id: str, new_priority: int) -> list[Task]:
    """
    Move one task to `new_priority` and shift the block in between.

    - newP > oldP: others in (oldP, newP] move up one rank (priority - 1)
    - newP < oldP: others in [newP, oldP) move down one rank (priority + 1)

    Unknown id or unchanged priority returns an unchanged copy.
    """
    target = next((t for t in tasks if t.id == task_id), None)
    if target is None or target.priority == new_priority:
        return list(tasks)

    old_priority = target.priority
    out: list[Task] = []

    for t in tasks:
        if t.id == task_id:
            out.append(replace(t, priority=new_priority))
        elif new_priority > old_priority and old_priority < t.priority <= new_priority:
            out.append(replace(t, priority=t.priority - 1))
        elif new_priority < old_priority and new_priority <= t.priority < old_priority:
            out.append(replace(t, priority=t.priority + 1))
        else:
            out.append(t)

    return out


def apply_order(tasks: Sequence[Task], order: Sequence[str]) -> list[Task] | None:
    """
    Bulk reorder: priority = position + 1 for every id in `order`.

    `order` must be a permutation of the live ids (same length, no duplicates,
    no foreign ids). Returns None when it is not, so the caller can keep its
    state untouched.
    """
    if len(order) != len(tasks):
        return None

    live_ids = {t.id for t in tasks}
    if len(live_ids) != len(tasks):
        return None

    wanted = list(order)
    if len(set(wanted)) != len(wanted) or set(wanted) != live_ids:
        return None

    rank = {task_id: index + 1 for index, task_id in enumerate(wanted)}
    return [replace(t, priority=rank[t.id]) for t in tasks]


def densify(tasks: Sequence[Task]) -> list[Task]:
    """Reassign priorities 1..N following the canonical order."""
    rank = {t.id: index + 1 for index, t in enumerate(sort_tasks(tasks))}
    return [t if t.priority == rank[t.id] else replace(t, priority=rank[t.id]) for t in tasks]


def normalize_priorities_if_needed(tasks: Sequence[Task]) -> list[Task]:
    """Densify only when restored data contains duplicate priorities."""
    if not has_duplicate_priorities(tasks):
        return list(tasks)
    return densify(tasks)
