# src/dayline/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Callable
from typing import Any, cast

from ..core.state import AppState
from ..tasks.task_models import DAY_MINUTES, Task, TaskDraft, TaskStatus
from ..tasks.timeline import (
    describe_segments,
    format_duration,
    format_time,
    parse_time,
    render_bar,
)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off"}

_FIELD_ALIASES = {
    "title": "title",
    "p": "priority",
    "priority": "priority",
    "min": "estimate_minutes",
    "minutes": "estimate_minutes",
    "estimate": "estimate_minutes",
    "desc": "description",
    "description": "description",
    "status": "status",
    "rest": "is_rest",
}

_STATUS_MARK = {
    TaskStatus.UNCOMPLETED: " ",
    TaskStatus.COMPLETED: "x",
    TaskStatus.FAILED: "!",
}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        try:
            parts = shlex.split(line[1:])
        except ValueError as e:
            return f"Cannot parse command: {e}."
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def resolve_task(state: AppState, ref: str) -> Task | None:
    """
    A task reference is either a 1-based position in the sorted list
    or a unique prefix of the task id.
    """
    tasks = state.registry.sorted_tasks
    if ref.isdigit():
        index = int(ref) - 1
        return tasks[index] if 0 <= index < len(tasks) else None

    matches = [t for t in tasks if t.id.startswith(ref)]
    return matches[0] if len(matches) == 1 else None


def _parse_bool(raw: str) -> bool | None:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return None


def parse_fields(args: list[str]) -> tuple[list[str], dict[str, Any]]:
    """
    Split arguments into free words and key=value fields.

    Unknown keys stay in the free words, so a title may contain '='.
    "min=auto" maps to None (automatic duration).
    Raises ValueError when "rest=" is not a yes/no value.
    """
    words: list[str] = []
    fields: dict[str, Any] = {}

    for arg in args:
        key, sep, value = arg.partition("=")
        field_name = _FIELD_ALIASES.get(key.lower()) if sep else None
        if field_name is None:
            words.append(arg)
            continue

        if field_name == "is_rest":
            flag = _parse_bool(value)
            if flag is None:
                raise ValueError(f"rest= takes yes or no, got '{value}'")
            fields[field_name] = flag
        elif field_name == "estimate_minutes" and value.strip().lower() in ("", "auto"):
            fields[field_name] = None
        else:
            fields[field_name] = value

    return words, fields


def _position(state: AppState, task: Task) -> int:
    return [t.id for t in state.registry.sorted_tasks].index(task.id) + 1


def format_task_line(state: AppState, task: Task) -> str:
    mark = _STATUS_MARK.get(task.status, " ")
    kind = " (rest)" if task.is_rest else ""
    line = (
        f"{_position(state, task)}. [{mark}] P{task.priority} {task.title}{kind}"
        f" | {format_duration(state.registry.effective_duration(task))}"
        f" | id={task.id[:8]}"
    )
    if task.description:
        line += f"\n     {task.description}"
    return line


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.registry.sorted_tasks
    if not tasks:
        return "No tasks yet. Use /add <title> to create one."
    return "\n".join(format_task_line(state, t) for t in tasks)


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add Write report p=2 min=45 desc="quarterly numbers"
    /add rest=yes min=20
    """
    try:
        words, fields = parse_fields(args)
    except ValueError as e:
        return f"Usage: /add <title> key=value ... ({e})."
    is_rest = bool(fields.get("is_rest", False))

    draft = TaskDraft(
        title=fields.get("title", " ".join(words)),
        priority=fields.get("priority", state.registry.next_priority),
        description=fields.get("description"),
        estimate_minutes=fields.get("estimate_minutes"),
        status=fields.get("status", TaskStatus.UNCOMPLETED),
        is_rest=is_rest,
    )
    task = state.registry.add(draft)
    return f"Added: {format_task_line(state, task)}"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """/edit <ref> title="New title" p=1 min=30 desc= status=completed rest=no"""
    if not args:
        return "Usage: /edit <n|id> key=value ... (title, p, min, desc, status, rest)."

    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."

    try:
        words, fields = parse_fields(args[1:])
    except ValueError as e:
        return f"Usage: /edit <n|id> key=value ... ({e})."
    if words and "title" not in fields:
        fields["title"] = " ".join(words)
    if not fields:
        return "Nothing to change."

    state.registry.update(task.id, **fields)
    updated = state.registry.get(task.id)
    return f"Updated: {format_task_line(state, updated)}" if updated else "Task vanished."


def _set_status(state: AppState, args: list[str], status: TaskStatus) -> str:
    if not args:
        return "Usage: give a task number or id."
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."
    if task.status == status:
        return f"'{task.title}' is already {status.value}."
    state.registry.update(task.id, status=status)
    return f"'{task.title}' -> {status.value}."


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.COMPLETED)


def cmd_fail(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.FAILED)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_status(state, args, TaskStatus.UNCOMPLETED)


def cmd_rm(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n|id>."
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."
    state.registry.remove(task.id)
    return f"Removed '{task.title}'."


def cmd_move(state: AppState, args: list[str]) -> str:
    """/move <ref> <position>  (positions are 1-based, like /list)"""
    if len(args) != 2 or not args[1].isdigit():
        return "Usage: /move <n|id> <position>."
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task matches '{args[0]}'."
    if not state.registry.move(task.id, int(args[1]) - 1):
        return "Move rejected."
    return f"Moved '{task.title}' to position {_position(state, task)}."


def cmd_order(state: AppState, args: list[str]) -> str:
    """/order 3 1 2  -> new order given as current positions or ids, all tasks required."""
    if not args:
        return "Usage: /order <n|id> <n|id> ... (every task exactly once)."

    ids: list[str] = []
    for ref in args:
        task = resolve_task(state, ref)
        if task is None:
            return f"No task matches '{ref}'."
        ids.append(task.id)

    if not state.registry.reorder(ids):
        return "Reorder rejected: list every task exactly once."
    return cmd_list(state, [])


def cmd_start(state: AppState, args: list[str]) -> str:
    """
    /start         -> show start time
    /start 08:30   -> set start time
    /start now     -> set start time to the current time
    """
    reg = state.registry
    if not args:
        return f"Day starts at {format_time(reg.start_offset)}."

    if args[0].lower() == "now":
        value = reg.sync_start_to_now()
    else:
        minutes = parse_time(args[0])
        if minutes is None:
            return "Usage: /start HH:MM | /start now."
        value = reg.set_start_offset(minutes)
    return f"Day starts at {format_time(value)}."


def cmd_timeline(state: AppState, args: list[str]) -> str:
    reg = state.registry
    segments = reg.timeline
    width = int(getattr(state.settings, "timeline_width", 48) or 48)

    lines = [render_bar(segments, width=width)]
    lines.extend(describe_segments(segments))

    hidden = len(reg.sorted_tasks) - len(segments)
    if hidden > 0:
        lines.append(f"({hidden} task(s) do not fit before midnight)")
    return "\n".join(lines)


def cmd_status(state: AppState, args: list[str]) -> str:
    reg = state.registry
    total = reg.total_minutes
    end = reg.start_offset + total
    ends = format_time(end) if end < DAY_MINUTES else "after midnight"
    lines = [
        "Status:",
        f"  Tasks: {len(reg.tasks)}",
        f"  Planned: {format_duration(total) if total else '0m'}",
        f"  Starts: {format_time(reg.start_offset)}, ends: {ends}",
    ]
    if reg.overbooked:
        lines.append(f"  Overbooked by {format_duration(total - DAY_MINUTES)}!")
    return "\n".join(lines)


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """/clear done  -> remove completed tasks"""
    if not args or args[0].lower() != "done":
        return "Usage: /clear done."

    done = [t for t in state.registry.tasks if t.status == TaskStatus.COMPLETED]
    for t in done:
        if emit:
            with contextlib.suppress(Exception):
                emit(f"Removing '{t.title}'...")
        state.registry.remove(t.id)
    return f"Removed {len(done)} completed task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="List tasks in priority order.", aliases=["ls"])
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add <title> [p=N] [min=M] [desc=...] [rest=yes].",
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <n|id> [title=...] [p=N] [min=M|auto] [desc=...] [status=...].",
)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <n|id>.")
registry.register("fail", cmd_fail, help_text="Mark a task failed: /fail <n|id>.")
registry.register("undo", cmd_undo, help_text="Mark a task uncompleted again: /undo <n|id>.")
registry.register("rm", cmd_rm, help_text="Remove a task: /rm <n|id>.", aliases=["del"])
registry.register("move", cmd_move, help_text="Move a task: /move <n|id> <position>.")
registry.register("order", cmd_order, help_text="Reorder all tasks: /order <n|id> ...")
registry.register("start", cmd_start, help_text="Show or set day start: /start [HH:MM|now].")
registry.register("timeline", cmd_timeline, help_text="Show the day timeline.", aliases=["tl"])
registry.register("status", cmd_status, help_text="Show totals and overbooking.")
registry.register("clear", cmd_clear, help_text="Remove completed tasks: /clear done.")
