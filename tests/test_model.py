"""Tests for the task model and status boundary conversion."""

from __future__ import annotations

from datetime import date, datetime, time

import pytest

from task_lifecycle.model import (
    ActivityEntry,
    Scenario,
    ScenarioOption,
    Status,
    Subtask,
    Task,
    chosen_option,
    parse_status,
    status_to_wire,
)


class TestStatusBoundary:
    def test_parse_all_wire_values(self) -> None:
        for wire in ("backlog", "todo", "in-progress", "done", "overdue", "archive"):
            assert status_to_wire(parse_status(wire)) == wire

    def test_parse_passes_enum_through(self) -> None:
        assert parse_status(Status.DONE) is Status.DONE

    def test_parse_strips_whitespace(self) -> None:
        assert parse_status(" todo ") == Status.TODO

    def test_unknown_status_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            parse_status("in_progress")


class TestTaskSerialization:
    def test_to_dict_uses_wire_format(self) -> None:
        task = Task(
            id="t1",
            title="Write report",
            status=Status.IN_PROGRESS,
            start_date=date(2026, 10, 1),
            start_time=time(9, 30),
        )
        data = task.to_dict()
        assert data["status"] == "in-progress"
        assert data["start_date"] == "2026-10-01"
        assert data["start_time"] == "09:30:00"
        assert data["due_date"] is None

    def test_from_dict_reads_to_dict_output(self) -> None:
        task = Task(
            id="t1",
            title="Write report",
            status=Status.TODO,
            due_date=date(2026, 10, 20),
            due_time=time(17, 0),
            subtasks=[Subtask(id="s1", title="Outline", required_completed=True)],
            activity_log=[ActivityEntry(action="created", details="Created", timestamp=datetime(2026, 10, 1, 8))],
            tags=["work"],
        )
        loaded = Task.from_dict(task.to_dict())
        assert loaded.status == Status.TODO
        assert loaded.due_date == date(2026, 10, 20)
        assert loaded.due_time == time(17, 0)
        assert loaded.subtasks[0].required_completed is True
        assert loaded.activity_log[0].timestamp == datetime(2026, 10, 1, 8)
        assert loaded.tags == ["work"]

    def test_from_dict_accepts_camel_case(self) -> None:
        task = Task.from_dict({
            "id": "t2",
            "status": "overdue",
            "startDate": "2026-10-01T00:00:00",
            "dueDate": "2026-10-05",
            "subtasks": [{"id": "s1", "completed": False, "requiredCompleted": True}],
            "activityLog": [{"id": "a1", "action": "status_changed", "details": "x", "userId": "alice"}],
        })
        assert task.status == Status.OVERDUE
        assert task.start_date == date(2026, 10, 1)
        assert task.due_date == date(2026, 10, 5)
        assert task.subtasks[0].required_completed is True
        assert task.activity_log[0].user_id == "alice"

    def test_from_dict_defaults(self) -> None:
        task = Task.from_dict({})
        assert task.id.startswith("task-")
        assert task.status == Status.BACKLOG
        assert task.subtasks == []
        assert task.completed is False

    def test_from_dict_rejects_bad_date(self) -> None:
        with pytest.raises(ValueError):
            Task.from_dict({"status": "todo", "due_date": "next tuesday"})

    def test_from_dict_rejects_bad_status(self) -> None:
        with pytest.raises(ValueError):
            Task.from_dict({"status": "waiting"})


class TestTaskHelpers:
    def test_has_dates(self) -> None:
        assert not Task().has_dates
        assert Task(due_date=date(2026, 1, 1)).has_dates
        assert Task(start_date=date(2026, 1, 1)).has_dates

    def test_incomplete_required_subtasks(self) -> None:
        task = Task(subtasks=[
            Subtask(id="a", required_completed=True, completed=False),
            Subtask(id="b", required_completed=True, completed=True),
            Subtask(id="c", required_completed=False, completed=False),
        ])
        assert [s.id for s in task.incomplete_required_subtasks] == ["a"]


class TestChosenOption:
    def test_lookup_by_key_then_index(self) -> None:
        scenario = Scenario(key="k", title="T", options=(ScenarioOption("A", "a"),))
        assert chosen_option({"k": "a"}, scenario, 0) == "a"
        assert chosen_option({"0": "a"}, scenario, 0) == "a"
        assert chosen_option({"1": "a"}, scenario, 0) is None
