# tests/test_commands.py

from __future__ import annotations

import pytest

from dayline.cli.commands import CommandRegistry, parse_fields, resolve_task
from dayline.cli.commands import registry as commands
from dayline.connectors.console_connector import handle_line
from dayline.tasks.task_models import TaskStatus


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x 'y z'") == "h2:x,y z"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Cannot parse" in (reg.handle(state, "/a 'open") or "")


def test_parse_fields() -> None:
    words, fields = parse_fields(["Write", "report", "p=2", "min=auto", "rest=yes", "x=1"])
    assert words == ["Write", "report", "x=1"]
    assert fields == {"priority": "2", "estimate_minutes": None, "is_rest": True}


def test_parse_fields_rejects_unknown_rest_value() -> None:
    with pytest.raises(ValueError):
        parse_fields(["Nap", "rest=maybe"])


def test_add_and_edit_report_bad_rest_value(state) -> None:
    assert "Usage" in (commands.handle(state, "/add Nap rest=maybe") or "")
    assert state.registry.tasks == ()

    commands.handle(state, "/add Nap rest=yes")
    assert "Usage" in (commands.handle(state, "/edit 1 rest=sometimes") or "")
    assert state.registry.sorted_tasks[0].is_rest is True


def test_add_list_and_edit(state) -> None:
    reply = commands.handle(state, '/add Write report p=1 min=45 desc="numbers for Q3"')
    assert reply is not None and "Write report" in reply

    task = state.registry.sorted_tasks[0]
    assert task.priority == 1
    assert task.estimate_minutes == 45
    assert task.description == "numbers for Q3"

    commands.handle(state, "/add Coffee rest=yes p=1")
    listing = commands.handle(state, "/list") or ""
    assert listing.index("Coffee") < listing.index("Write report")

    commands.handle(state, "/edit 2 title='Write final report' p=1 min=auto")
    first = state.registry.sorted_tasks[0]
    assert first.title == "Write final report"
    assert first.estimate_minutes is None


def test_add_defaults_to_next_priority(state) -> None:
    commands.handle(state, "/add first")
    commands.handle(state, "/add second")
    assert [t.title for t in state.registry.sorted_tasks] == ["first", "second"]
    assert [t.priority for t in state.registry.sorted_tasks] == [1, 2]


def test_status_commands_and_remove(state) -> None:
    commands.handle(state, "/add one")
    commands.handle(state, "/add two")

    commands.handle(state, "/done 1")
    commands.handle(state, "/fail t2")
    assert state.registry.get("t1").status is TaskStatus.COMPLETED
    assert state.registry.get("t2").status is TaskStatus.FAILED

    assert "already" in (commands.handle(state, "/done 1") or "")
    commands.handle(state, "/undo 1")
    assert state.registry.get("t1").status is TaskStatus.UNCOMPLETED

    commands.handle(state, "/rm 2")
    assert [t.id for t in state.registry.tasks] == ["t1"]
    assert "No task matches" in (commands.handle(state, "/rm 9") or "")


def test_move_and_order(state) -> None:
    for title in ("a", "b", "c"):
        commands.handle(state, f"/add {title}")

    commands.handle(state, "/move 3 1")
    assert [t.title for t in state.registry.sorted_tasks] == ["c", "a", "b"]

    commands.handle(state, "/order 2 3 1")
    assert [t.title for t in state.registry.sorted_tasks] == ["a", "b", "c"]

    assert "rejected" in (commands.handle(state, "/order 1 2") or "")


def test_start_timeline_and_status(state) -> None:
    assert commands.handle(state, "/start 08:30") == "Day starts at 08:30."
    assert state.registry.start_offset == 510
    assert "Usage" in (commands.handle(state, "/start later") or "")

    commands.handle(state, "/add Long min=1000")
    commands.handle(state, "/add Longer min=500")

    timeline = commands.handle(state, "/timeline") or ""
    assert timeline.startswith("|")
    assert "08:30-" in timeline
    assert "do not fit" in timeline

    status = commands.handle(state, "/status") or ""
    assert "Overbooked by 1h" in status


def test_resolve_task_by_prefix(state) -> None:
    commands.handle(state, "/add one")
    assert resolve_task(state, "t1") is not None
    assert resolve_task(state, "zz") is None
    assert resolve_task(state, "0") is None


def test_console_plain_text_adds_task(state) -> None:
    reply = handle_line(state, "Call mom's friend")
    assert "Added" in reply
    assert state.registry.sorted_tasks[0].title == "Call mom's friend"
