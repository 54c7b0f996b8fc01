"""Tests for the scenario catalog."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from task_lifecycle.constants import (
    OPTION_CANCEL,
    OPTION_CREATE_COPY,
    OPTION_FORCE_COMPLETE,
    OPTION_TREAT_AS_COMPLETED,
    OPTION_TREAT_AS_OVERDUE,
    SCENARIO_CREATE_COPY,
    SCENARIO_DATE_CONFLICT,
    SCENARIO_DATE_STRATEGY,
    SCENARIO_REQUIRED_SUBTASKS,
)
from task_lifecycle.model import Status, Subtask, Task
from task_lifecycle.scenarios import (
    get_suggested_alternatives,
    get_transition_scenarios,
    has_incomplete_required_subtasks,
    requires_user_input,
)

NOW = datetime(2026, 10, 18, 12, 0)
YESTERDAY = NOW.date() - timedelta(days=1)
TOMORROW = NOW.date() + timedelta(days=1)


@pytest.fixture
def gated_task() -> Task:
    return Task(
        id="t1",
        status=Status.TODO,
        due_date=TOMORROW,
        subtasks=[Subtask(id="s1", title="Sign-off", required_completed=True, completed=False)],
    )


def _keys(scenarios) -> list[str]:
    return [s.key for s in scenarios]


class TestRequiredSubtasks:
    def test_gate_detection(self, gated_task: Task) -> None:
        assert has_incomplete_required_subtasks(gated_task)
        gated_task.subtasks[0].completed = True
        assert not has_incomplete_required_subtasks(gated_task)

    def test_optional_subtask_is_not_a_gate(self) -> None:
        task = Task(subtasks=[Subtask(required_completed=False, completed=False)])
        assert not has_incomplete_required_subtasks(task)

    def test_done_with_gate_returns_single_scenario(self, gated_task: Task) -> None:
        scenarios = get_transition_scenarios(Status.TODO, Status.DONE, gated_task, now=NOW)
        assert _keys(scenarios) == [SCENARIO_REQUIRED_SUBTASKS]
        assert scenarios[0].values == [OPTION_FORCE_COMPLETE, OPTION_CANCEL]

    def test_gate_overrides_other_policies(self) -> None:
        task = Task(
            status=Status.DONE,
            subtasks=[Subtask(required_completed=True, completed=False)],
            due_date=YESTERDAY,
        )
        scenarios = get_transition_scenarios(Status.DONE, Status.DONE, task, now=NOW, supports_revert_done=False)
        assert _keys(scenarios) == [SCENARIO_REQUIRED_SUBTASKS]

    def test_gate_only_applies_to_done(self, gated_task: Task) -> None:
        assert get_transition_scenarios(Status.TODO, Status.IN_PROGRESS, gated_task, now=NOW) == []


class TestDateStrategy:
    @pytest.mark.parametrize("target", [Status.TODO, Status.IN_PROGRESS])
    def test_undated_task_into_dated_state(self, target: Status) -> None:
        task = Task(status=Status.BACKLOG)
        scenarios = get_transition_scenarios(Status.BACKLOG, target, task, now=NOW)
        assert _keys(scenarios) == [SCENARIO_DATE_STRATEGY]
        assert scenarios[0].values == ["today", "tomorrow", "next_week", "custom", "no_date"]

    def test_dated_task_moves_directly(self) -> None:
        task = Task(status=Status.BACKLOG, start_date=TOMORROW)
        assert get_transition_scenarios(Status.BACKLOG, Status.TODO, task, now=NOW) == []

    @pytest.mark.parametrize("target", [Status.BACKLOG, Status.DONE, Status.OVERDUE, Status.ARCHIVE])
    def test_undated_task_into_other_states(self, target: Status) -> None:
        task = Task(status=Status.TODO)
        assert get_transition_scenarios(Status.TODO, target, task, now=NOW) == []


class TestCreateCopy:
    @pytest.mark.parametrize("target", [Status.BACKLOG, Status.TODO, Status.IN_PROGRESS, Status.OVERDUE])
    def test_done_to_earlier_on_non_revertible_provider(self, target: Status) -> None:
        task = Task(status=Status.DONE, completed=True, start_date=TOMORROW)
        scenarios = get_transition_scenarios(Status.DONE, target, task, now=NOW, supports_revert_done=False)
        assert SCENARIO_CREATE_COPY in _keys(scenarios)
        copy_scenario = next(s for s in scenarios if s.key == SCENARIO_CREATE_COPY)
        assert copy_scenario.values == [OPTION_CREATE_COPY, OPTION_CANCEL]

    def test_revertible_provider_needs_no_copy(self) -> None:
        task = Task(status=Status.DONE, completed=True, start_date=TOMORROW)
        assert get_transition_scenarios(Status.DONE, Status.TODO, task, now=NOW) == []

    def test_done_to_archive_is_direct(self) -> None:
        task = Task(status=Status.DONE, completed=True)
        assert get_transition_scenarios(Status.DONE, Status.ARCHIVE, task, now=NOW, supports_revert_done=False) == []


class TestDateConflict:
    @pytest.mark.parametrize("target", [Status.BACKLOG, Status.TODO, Status.IN_PROGRESS])
    def test_past_due_contradicts_open_target(self, target: Status) -> None:
        task = Task(status=Status.BACKLOG, due_date=YESTERDAY)
        scenarios = get_transition_scenarios(Status.BACKLOG, target, task, now=NOW)
        assert _keys(scenarios) == [SCENARIO_DATE_CONFLICT]
        assert scenarios[0].values == [OPTION_TREAT_AS_COMPLETED, OPTION_TREAT_AS_OVERDUE, OPTION_CANCEL]

    def test_completed_flag_does_not_hide_conflict(self) -> None:
        task = Task(status=Status.DONE, completed=True, due_date=YESTERDAY)
        scenarios = get_transition_scenarios(Status.DONE, Status.TODO, task, now=NOW)
        assert _keys(scenarios) == [SCENARIO_DATE_CONFLICT]

    def test_overdue_target_has_no_conflict(self) -> None:
        task = Task(status=Status.TODO, due_date=YESTERDAY)
        assert get_transition_scenarios(Status.TODO, Status.OVERDUE, task, now=NOW) == []

    def test_future_due_has_no_conflict(self) -> None:
        task = Task(status=Status.BACKLOG, due_date=TOMORROW)
        assert get_transition_scenarios(Status.BACKLOG, Status.TODO, task, now=NOW) == []


class TestOrderingAndHelpers:
    def test_copy_and_conflict_are_both_returned_in_order(self) -> None:
        task = Task(status=Status.DONE, completed=True, due_date=YESTERDAY)
        scenarios = get_transition_scenarios(Status.DONE, Status.TODO, task, now=NOW, supports_revert_done=False)
        assert _keys(scenarios) == [SCENARIO_CREATE_COPY, SCENARIO_DATE_CONFLICT]

    def test_date_strategy_and_copy_are_both_returned(self) -> None:
        task = Task(status=Status.DONE, completed=True)
        scenarios = get_transition_scenarios(Status.DONE, Status.TODO, task, now=NOW, supports_revert_done=False)
        assert _keys(scenarios) == [SCENARIO_DATE_STRATEGY, SCENARIO_CREATE_COPY]

    def test_plain_transition_has_no_scenarios(self) -> None:
        task = Task(status=Status.TODO, start_date=YESTERDAY, due_date=TOMORROW)
        assert get_transition_scenarios(Status.TODO, Status.IN_PROGRESS, task, now=NOW) == []

    def test_requires_user_input_for_date_picker(self) -> None:
        assert requires_user_input(Status.BACKLOG, Status.TODO, Task(status=Status.BACKLOG), now=NOW)
        assert not requires_user_input(Status.TODO, Status.DONE, Task(status=Status.TODO), now=NOW)

    def test_suggested_alternatives_from_conflict(self) -> None:
        task = Task(status=Status.BACKLOG, due_date=YESTERDAY)
        assert get_suggested_alternatives(Status.BACKLOG, Status.TODO, task, now=NOW) == [
            Status.DONE,
            Status.OVERDUE,
        ]
