"""Scenario catalog: which status changes need a human decision first.

Each scenario is a single decision point with mutually exclusive options.
When several policies apply, all of their scenarios are returned in policy
order and every one of them must be answered before the transition runs.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from .constants import (
    DATE_STRATEGY_CUSTOM,
    DATE_STRATEGY_NEXT_WEEK,
    DATE_STRATEGY_NO_DATE,
    DATE_STRATEGY_TODAY,
    DATE_STRATEGY_TOMORROW,
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
from .derivation import derive_status
from .model import Scenario, ScenarioOption, Status, Task

# Statuses that carry a schedule
DATED_STATUSES = {Status.TODO, Status.IN_PROGRESS}

# Targets that count as "earlier" than done when reopening
REOPEN_TARGETS = {Status.BACKLOG, Status.TODO, Status.IN_PROGRESS, Status.OVERDUE}

# Targets a past due date contradicts
_OPEN_TARGETS = {Status.BACKLOG, Status.TODO, Status.IN_PROGRESS}

# Options that hand off to an external picker
_USER_INPUT_OPTIONS = {DATE_STRATEGY_CUSTOM}

_CANCEL = ScenarioOption(label="Cancel", value=OPTION_CANCEL)


def has_incomplete_required_subtasks(task: Task) -> bool:
    return any(s.required_completed and not s.completed for s in task.subtasks)


def required_subtasks_scenario() -> Scenario:
    return Scenario(
        key=SCENARIO_REQUIRED_SUBTASKS,
        title="Incomplete Required Subtasks",
        options=(
            ScenarioOption(
                label="Complete the task anyway",
                value=OPTION_FORCE_COMPLETE,
                description="Mark the task as done even though some required subtasks are incomplete",
            ),
            _CANCEL,
        ),
    )


def date_strategy_scenario() -> Scenario:
    return Scenario(
        key=SCENARIO_DATE_STRATEGY,
        title="Schedule Task",
        options=(
            ScenarioOption(label="Today", value=DATE_STRATEGY_TODAY, description="Start the task today"),
            ScenarioOption(label="Tomorrow", value=DATE_STRATEGY_TOMORROW, description="Start the task tomorrow"),
            ScenarioOption(label="Next week", value=DATE_STRATEGY_NEXT_WEEK, description="Start the task in a week"),
            ScenarioOption(label="Custom", value=DATE_STRATEGY_CUSTOM, description="Pick specific dates"),
            ScenarioOption(label="No date", value=DATE_STRATEGY_NO_DATE, description="Keep the task unscheduled"),
        ),
    )


def create_copy_scenario(to_status: Status) -> Scenario:
    return Scenario(
        key=SCENARIO_CREATE_COPY,
        title="Restore Completed Task",
        options=(
            ScenarioOption(
                label="Create a new task",
                value=OPTION_CREATE_COPY,
                description=(
                    f"The task provider cannot reopen completed tasks. A new task with the same "
                    f"content is created in \"{to_status.value}\"; the completed task stays done."
                ),
            ),
            _CANCEL,
        ),
    )


def date_conflict_scenario(to_status: Status) -> Scenario:
    return Scenario(
        key=SCENARIO_DATE_CONFLICT,
        title="Due Date Already Passed",
        options=(
            ScenarioOption(
                label="Treat as completed",
                value=OPTION_TREAT_AS_COMPLETED,
                description="Mark the task as done instead",
            ),
            ScenarioOption(
                label="Treat as overdue",
                value=OPTION_TREAT_AS_OVERDUE,
                description=f"Keep the task open as overdue instead of \"{to_status.value}\"",
            ),
            _CANCEL,
        ),
    )


def date_effective_status(task: Task, now: datetime) -> Status:
    """Effective status from dates alone, ignoring the completion flag."""
    return derive_status(replace(task, completed=False), now)


def get_transition_scenarios(
    from_status: Status,
    to_status: Status,
    task: Task,
    now: Optional[datetime] = None,
    supports_revert_done: bool = True,
) -> list[Scenario]:
    """Return the scenarios that must be resolved before moving *task*.

    Args:
        from_status: Status the transition starts from (stored or effective).
        to_status: Requested status.
        task: Current task value.
        now: Wall-clock time; read from the system clock when omitted.
        supports_revert_done: False when the task provider cannot reopen a
            completed item in place.

    Returns:
        Scenarios in policy order; empty when the change may run directly.
    """
    if now is None:
        now = datetime.now()

    if to_status == Status.DONE and has_incomplete_required_subtasks(task):
        return [required_subtasks_scenario()]

    scenarios: list[Scenario] = []

    if to_status in DATED_STATUSES and not task.has_dates:
        scenarios.append(date_strategy_scenario())

    if from_status == Status.DONE and to_status in REOPEN_TARGETS and not supports_revert_done:
        scenarios.append(create_copy_scenario(to_status))

    if to_status in _OPEN_TARGETS and date_effective_status(task, now) == Status.OVERDUE:
        scenarios.append(date_conflict_scenario(to_status))

    return scenarios


def requires_user_input(
    from_status: Status,
    to_status: Status,
    task: Task,
    now: Optional[datetime] = None,
    supports_revert_done: bool = True,
) -> bool:
    """True when a scenario offers an option that needs an external picker."""
    scenarios = get_transition_scenarios(from_status, to_status, task, now, supports_revert_done)
    return any(value in _USER_INPUT_OPTIONS for scenario in scenarios for value in scenario.values)


def get_suggested_alternatives(
    from_status: Status,
    to_status: Status,
    task: Task,
    now: Optional[datetime] = None,
    supports_revert_done: bool = True,
) -> list[Status]:
    """Statuses the scenarios offer instead of *to_status*."""
    suggestions: list[Status] = []
    for scenario in get_transition_scenarios(from_status, to_status, task, now, supports_revert_done):
        for value in scenario.values:
            if value == OPTION_TREAT_AS_COMPLETED:
                suggestions.append(Status.DONE)
            elif value == OPTION_TREAT_AS_OVERDUE:
                suggestions.append(Status.OVERDUE)
    return suggestions
