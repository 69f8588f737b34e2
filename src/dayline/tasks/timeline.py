# src/dayline/tasks/timeline.py

"""
Timeline projection.

Turns a priority-sorted task list and a start offset (minutes since midnight)
into segments on a single 24-hour axis. Tasks run back to back; whatever
falls past midnight is clipped, and tasks starting at or after midnight are
dropped (there is no next day).
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .normalize import effective_duration
from .task_models import DAY_MINUTES, Task, TaskStatus, TimelineSegment

_TIME_RE = re.compile(r"^\s*(\d{1,2})(?::(\d{2}))?\s*$")

_STATUS_MARK = {
    TaskStatus.UNCOMPLETED: " ",
    TaskStatus.COMPLETED: "x",
    TaskStatus.FAILED: "!",
}


def _clip(minute: int) -> int:
    return max(0, min(DAY_MINUTES, minute))


def project(sorted_tasks: Sequence[Task], start_offset: int) -> list[TimelineSegment]:
    segments: list[TimelineSegment] = []
    cursor = int(start_offset)

    for task in sorted_tasks:
        duration = effective_duration(task)
        seg_start = cursor
        seg_end = cursor + duration
        clipped_start = _clip(seg_start)
        clipped_end = _clip(seg_end)
        visible = clipped_end - clipped_start

        if visible > 0 and seg_start < DAY_MINUTES:
            segments.append(
                TimelineSegment(
                    task_id=task.id,
                    title=task.title,
                    label="Rest" if task.is_rest else task.title,
                    is_rest=task.is_rest,
                    status=task.status,
                    start_minute=clipped_start,
                    end_minute=clipped_end,
                    left_percent=clipped_start / DAY_MINUTES * 100,
                    width_percent=visible / DAY_MINUTES * 100,
                    duration_minutes=duration,
                )
            )

        cursor = seg_end

    return segments


def format_time(minutes: int | float) -> str:
    clamped = min(DAY_MINUTES - 1, max(0, int(round(minutes))))
    hours, mins = divmod(clamped, 60)
    return f"{hours:02d}:{mins:02d}"


def format_duration(minutes: int | None) -> str:
    if not minutes or minutes <= 0:
        return "Auto"
    hours, mins = divmod(int(minutes), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def parse_time(text: str) -> int | None:
    """
    Parse "HH:MM" or a bare hour ("9") into minutes since midnight.
    Returns None for anything else or for out-of-range values.
    """
    m = _TIME_RE.match(text or "")
    if not m:
        return None
    hours = int(m.group(1))
    mins = int(m.group(2) or 0)
    if hours > 23 or mins > 59:
        return None
    return hours * 60 + mins


def render_bar(segments: Sequence[TimelineSegment], width: int = 48) -> str:
    """
    Draw the day as a fixed-width text bar.

    Work blocks are drawn with '#', rest blocks with '~', free time with '.'.
    Every segment gets at least one cell so short tasks stay visible.
    """
    width = max(8, int(width))
    cells = ["."] * width

    for seg in segments:
        first = int(seg.start_minute * width / DAY_MINUTES)
        last = max(first + 1, int(round(seg.end_minute * width / DAY_MINUTES)))
        fill = "~" if seg.is_rest else "#"
        for i in range(first, min(last, width)):
            cells[i] = fill

    ticks = [" "] * width
    for hour in (0, 6, 12, 18):
        pos = int(hour * 60 * width / DAY_MINUTES)
        label = f"{hour:02d}"
        for i, ch in enumerate(label):
            if pos + i < width:
                ticks[pos + i] = ch

    return "|" + "".join(cells) + "|\n " + "".join(ticks)


def describe_segments(segments: Sequence[TimelineSegment]) -> list[str]:
    lines: list[str] = []
    for seg in segments:
        mark = _STATUS_MARK.get(seg.status, " ")
        lines.append(
            f"[{mark}] {format_time(seg.start_minute)}-{format_time(seg.end_minute)} "
            f"{seg.label} ({format_duration(seg.duration_minutes)})"
        )
    return lines
