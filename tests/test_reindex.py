# tests/test_reindex.py

from __future__ import annotations

from dayline.tasks.reindex import (
    apply_order,
    has_duplicate_priorities,
    normalize_priorities_if_needed,
    shift_for_insert,
    shift_for_rank_change,
    sort_tasks,
)
from dayline.tasks.task_models import Task, TaskStatus


def _task(task_id: str, priority: int, title: str = "", created_at: float = 0.0) -> Task:
    return Task(
        id=task_id,
        title=title or task_id,
        priority=priority,
        status=TaskStatus.UNCOMPLETED,
        is_rest=False,
        created_at=created_at,
    )


def _priorities(tasks: list[Task]) -> dict[str, int]:
    return {t.id: t.priority for t in tasks}


def test_shift_for_insert_opens_one_slot() -> None:
    tasks = [_task("a", 1), _task("b", 2), _task("c", 3)]
    shifted = shift_for_insert(tasks, 2)
    assert _priorities(shifted) == {"a": 1, "b": 3, "c": 4}
    # input untouched
    assert _priorities(tasks) == {"a": 1, "b": 2, "c": 3}


def test_rank_change_towards_more_important() -> None:
    tasks = [_task("o1", 1), _task("o2", 2), _task("o3", 3), _task("o4", 4), _task("a", 5)]
    moved = shift_for_rank_change(tasks, "a", 2)
    assert _priorities(moved) == {"o1": 1, "o2": 3, "o3": 4, "o4": 5, "a": 2}


def test_rank_change_towards_less_important() -> None:
    tasks = [_task("a", 1), _task("b", 2), _task("c", 3), _task("d", 4)]
    moved = shift_for_rank_change(tasks, "a", 3)
    assert _priorities(moved) == {"a": 3, "b": 1, "c": 2, "d": 4}


def test_rank_change_across_gaps_keeps_uniqueness() -> None:
    tasks = [_task("a", 1), _task("b", 4), _task("c", 7), _task("d", 9)]
    for target, new_p in [("a", 8), ("d", 2), ("c", 4), ("b", 10)]:
        tasks = shift_for_rank_change(tasks, target, new_p)
        assert not has_duplicate_priorities(tasks)
        assert _priorities(tasks)[target] == new_p


def test_rank_change_noop_cases() -> None:
    tasks = [_task("a", 1), _task("b", 2)]
    assert _priorities(shift_for_rank_change(tasks, "a", 1)) == {"a": 1, "b": 2}
    assert _priorities(shift_for_rank_change(tasks, "zzz", 1)) == {"a": 1, "b": 2}


def test_apply_order_assigns_dense_ranks() -> None:
    tasks = [_task("a", 1), _task("b", 2), _task("c", 3)]
    ordered = apply_order(tasks, ["c", "a", "b"])
    assert ordered is not None
    assert _priorities(ordered) == {"c": 1, "a": 2, "b": 3}


def test_apply_order_rejects_bad_permutations() -> None:
    tasks = [_task("a", 1), _task("b", 2), _task("c", 3)]
    assert apply_order(tasks, ["a", "b"]) is None
    assert apply_order(tasks, ["a", "b", "x"]) is None
    assert apply_order(tasks, ["a", "a", "b"]) is None
    assert apply_order(tasks, ["a", "b", "c", "c"]) is None


def test_normalize_priorities_tie_break() -> None:
    tasks = [
        _task("b", 1, title="B"),
        _task("a", 1, title="A"),
        _task("late", 3, title="Z", created_at=20.0),
        _task("early", 3, title="Z", created_at=10.0),
    ]
    fixed = normalize_priorities_if_needed(tasks)
    assert _priorities(fixed) == {"a": 1, "b": 2, "early": 3, "late": 4}
    # collection order preserved
    assert [t.id for t in fixed] == ["b", "a", "late", "early"]


def test_normalize_priorities_leaves_gaps_when_unique() -> None:
    tasks = [_task("a", 2), _task("b", 5)]
    assert _priorities(normalize_priorities_if_needed(tasks)) == {"a": 2, "b": 5}


def test_sort_tasks_uses_title_then_created_at() -> None:
    tasks = [_task("x", 2, "b"), _task("y", 1, "z"), _task("z", 2, "a")]
    assert [t.id for t in sort_tasks(tasks)] == ["y", "z", "x"]


def test_sort_tasks_compares_titles_ignoring_case() -> None:
    tasks = [_task("upper", 1, "Banana"), _task("lower", 1, "apple"), _task("mixed", 1, "apple pie")]
    assert [t.id for t in sort_tasks(tasks)] == ["lower", "mixed", "upper"]
    fixed = normalize_priorities_if_needed(tasks)
    assert _priorities(fixed) == {"lower": 1, "mixed": 2, "upper": 3}
