# src/dayline/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

DAY_MINUTES = 24 * 60
DEFAULT_WORK_MINUTES = 60
DEFAULT_REST_MINUTES = 15
MIN_PRIORITY = 1

REST_TITLE = "Rest time"
UNTITLED_TITLE = "Untitled task"


class TaskStatus(StrEnum):
    """
    Task completion status.

    Every transition is allowed through an explicit update; nothing changes
    status on its own.
    """

    UNCOMPLETED = "uncompleted"
    FAILED = "failed"
    COMPLETED = "completed"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not isinstance(raw, str) or not raw:
            return cls.UNCOMPLETED
        try:
            return cls(raw)
        except ValueError:
            return cls.UNCOMPLETED


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    priority: int
    status: TaskStatus
    is_rest: bool
    created_at: float

    description: str | None = None
    estimate_minutes: int | None = None

    def to_record(self) -> dict[str, Any]:
        """Storage layout (camelCase keys, absent optionals omitted)."""
        record: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "priority": self.priority,
            "status": self.status.value,
            "isRest": self.is_rest,
            "createdAt": self.created_at,
        }
        if self.description is not None:
            record["description"] = self.description
        if self.estimate_minutes is not None:
            record["estimateMinutes"] = self.estimate_minutes
        return record


@dataclass(slots=True)
class TaskDraft:
    """
    Raw input for a new task.

    Values are taken as-is from the caller (form fields, command arguments)
    and normalized by the registry, so any type is accepted here.
    """

    title: Any = ""
    priority: Any = MIN_PRIORITY
    description: Any = None
    estimate_minutes: Any = None
    status: Any = TaskStatus.UNCOMPLETED
    is_rest: bool = False


@dataclass(frozen=True, slots=True)
class TimelineSegment:
    task_id: str
    title: str
    label: str
    is_rest: bool
    status: TaskStatus

    start_minute: int  # clipped to the day
    end_minute: int  # clipped to the day
    left_percent: float
    width_percent: float
    duration_minutes: int  # full effective duration, not clipped
