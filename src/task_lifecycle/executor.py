"""Apply a resolved status transition to a task.

The executor either fully applies a transition to a copy of the task or fully
refuses it with a :class:`TransitionError` value. The input task is never
touched, so callers can always fall back to what they had.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional, Sequence, Union

from loguru import logger

from .constants import (
    ACTION_RESTORED,
    ACTION_STATUS_CHANGED,
    ACTION_STATUS_FORCED,
    DATE_STRATEGY_CUSTOM,
    DATE_STRATEGY_NEXT_WEEK,
    DATE_STRATEGY_NO_DATE,
    DATE_STRATEGY_TODAY,
    DATE_STRATEGY_TOMORROW,
    DEFAULT_COPY_TAG,
    DEFAULT_COPY_TITLE_SUFFIX,
    DEFAULT_NEXT_WEEK_DAYS,
    DEFAULT_USER_ID,
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
from .errors import ErrorKind, TransitionError
from .model import (
    ActivityEntry,
    Resolution,
    Scenario,
    Status,
    Task,
    _generate_id,
    chosen_option,
    status_to_wire,
)
from .scenarios import get_transition_scenarios, has_incomplete_required_subtasks
from .utils import parse_date, parse_time


@dataclass(frozen=True)
class CopyRequest:
    """Ask the caller to create *template* as a new task.

    Returned instead of an updated task when the user chose to copy a
    completed task the provider cannot reopen. ``original`` is the untouched
    input task. ``created`` holds the task the provider returned once the
    orchestrator has handed the template to ``create_task``.
    """

    original: Task
    template: Task
    created: Optional[Task] = None

    def to_dict(self) -> dict[str, Any]:
        data = {"create_task": self.template.to_dict(), "original_id": self.original.id}
        if self.created is not None:
            data["created"] = self.created.to_dict()
        return data


TransitionOutcome = Union[Task, CopyRequest, TransitionError]


def _final_target(to_status: Status, conflict_answer: Optional[str]) -> Status:
    if conflict_answer == OPTION_TREAT_AS_COMPLETED:
        return Status.DONE
    if conflict_answer == OPTION_TREAT_AS_OVERDUE:
        return Status.OVERDUE
    return to_status


def _check_resolution(
    scenarios: Sequence[Scenario],
    answers: Sequence[Optional[str]],
) -> Optional[TransitionError]:
    if scenarios and all(a is None for a in answers):
        titles = ", ".join(s.title for s in scenarios)
        return TransitionError(ErrorKind.UNSUPPORTED, f"Transition requires confirmation: {titles}")

    for scenario, answer in zip(scenarios, answers):
        if answer is None:
            return TransitionError(ErrorKind.INVALID_TRANSITION, f"No choice made for \"{scenario.title}\"")
        if answer not in scenario.values:
            return TransitionError(
                ErrorKind.INVALID_TRANSITION,
                f"Invalid choice {answer!r} for \"{scenario.title}\"; expected one of {scenario.values}",
            )
        if answer == OPTION_CANCEL:
            return TransitionError(ErrorKind.INVALID_TRANSITION, f"Transition cancelled at \"{scenario.title}\"")
    return None


def _apply_date_strategy(
    task: Task,
    strategy: str,
    resolution: Resolution,
    now: datetime,
    next_week_days: int,
) -> Optional[TransitionError]:
    today = now.date()
    if strategy == DATE_STRATEGY_TODAY:
        task.start_date, task.start_time = today, None
    elif strategy == DATE_STRATEGY_TOMORROW:
        task.start_date, task.start_time = today + timedelta(days=1), None
    elif strategy == DATE_STRATEGY_NEXT_WEEK:
        task.start_date, task.start_time = today + timedelta(days=next_week_days), None
    elif strategy == DATE_STRATEGY_CUSTOM:
        try:
            start_date = parse_date(resolution.get("start_date"))
            start_time = parse_time(resolution.get("start_time"))
            due_date = parse_date(resolution.get("due_date"))
            due_time = parse_time(resolution.get("due_time"))
        except ValueError as exc:
            return TransitionError(ErrorKind.INVALID_TRANSITION, f"Invalid custom date: {exc}")
        if start_date is None and due_date is None:
            return TransitionError(ErrorKind.INVALID_TRANSITION, "Custom schedule needs a start or due date")
        task.start_date, task.start_time = start_date, start_time
        task.due_date, task.due_time = due_date, due_time
    elif strategy != DATE_STRATEGY_NO_DATE:
        return TransitionError(ErrorKind.INVALID_TRANSITION, f"Unknown date strategy {strategy!r}")
    return None


def _describe(from_status: Status, to_status: Status, applied: dict[str, str]) -> str:
    details = f'Status changed from "{status_to_wire(from_status)}" to "{status_to_wire(to_status)}"'
    if applied:
        details += " (" + ", ".join(f"{k}={v}" for k, v in applied.items()) + ")"
    return details


def _build_copy(
    updated: Task,
    original: Task,
    final: Status,
    now: datetime,
    user_id: str,
    title_suffix: str,
    tag: str,
) -> Task:
    template = copy.deepcopy(updated)
    template.id = _generate_id()
    template.title = original.title + title_suffix
    if tag and tag not in template.tags:
        template.tags.append(tag)
    template.activity_log = copy.deepcopy(original.activity_log)
    template.activity_log.append(
        ActivityEntry(
            action=ACTION_RESTORED,
            details=f'Task restored from completed state to "{status_to_wire(final)}" as a new task',
            user_id=user_id,
            timestamp=now,
        )
    )
    return template


def execute_status_transition(
    task: Task,
    from_status: Status,
    to_status: Status,
    resolution: Optional[Resolution],
    is_create_mode: bool,
    *,
    now: Optional[datetime] = None,
    scenarios: Optional[Sequence[Scenario]] = None,
    supports_revert_done: bool = True,
    user_id: str = DEFAULT_USER_ID,
    next_week_days: int = DEFAULT_NEXT_WEEK_DAYS,
    copy_title_suffix: str = DEFAULT_COPY_TITLE_SUFFIX,
    copy_tag: str = DEFAULT_COPY_TAG,
) -> TransitionOutcome:
    """Apply the transition ``from_status -> to_status`` to a copy of *task*.

    Args:
        task: Current task value; never mutated.
        from_status: Status the transition starts from.
        to_status: Requested status.
        resolution: Chosen option per scenario key (or index).
        is_create_mode: True while the task is not persisted yet; the status
            is then simply overwritten and no copy is ever requested.
        now: Wall-clock time; read from the system clock when omitted.
        scenarios: Scenarios the user was shown. Recomputed from the catalog
            when omitted.
        supports_revert_done: False when the provider cannot reopen done tasks.
        user_id: Author recorded in the activity log.

    Returns:
        The updated task, a :class:`CopyRequest`, or a :class:`TransitionError`.
    """
    if now is None:
        now = datetime.now()
    resolution = dict(resolution or {})

    if scenarios is None:
        scenarios = get_transition_scenarios(
            from_status,
            to_status,
            task,
            now=now,
            supports_revert_done=supports_revert_done or is_create_mode,
        )
    # Index keys refer to the scenarios as shown, before create mode drops any
    offered = [(s, chosen_option(resolution, s, i)) for i, s in enumerate(scenarios)]
    if is_create_mode:
        offered = [(s, a) for s, a in offered if s.key != SCENARIO_CREATE_COPY]
    scenarios = [s for s, _ in offered]
    answers = {s.key: a for s, a in offered}
    final = _final_target(to_status, answers.get(SCENARIO_DATE_CONFLICT))

    forced = False
    if final == Status.DONE and has_incomplete_required_subtasks(task):
        force_choice = answers.get(SCENARIO_REQUIRED_SUBTASKS) or resolution.get(SCENARIO_REQUIRED_SUBTASKS)
        if force_choice != OPTION_FORCE_COMPLETE:
            pending = ", ".join(s.title or s.id for s in task.incomplete_required_subtasks)
            return TransitionError(
                ErrorKind.GATE_VIOLATION,
                f"Cannot mark {task.id} as done; required subtasks incomplete: {pending}",
            )
        forced = True

    error = _check_resolution(scenarios, [a for _, a in offered])
    if error is not None:
        return error

    updated = copy.deepcopy(task)

    strategy = answers.get(SCENARIO_DATE_STRATEGY)
    if strategy is not None:
        error = _apply_date_strategy(updated, strategy, resolution, now, next_week_days)
        if error is not None:
            return error

    updated.status = final
    updated.completed = final == Status.DONE

    applied = {key: value for key, value in answers.items() if value is not None}
    if answers.get(SCENARIO_CREATE_COPY) == OPTION_CREATE_COPY and not is_create_mode:
        template = _build_copy(updated, task, final, now, user_id, copy_title_suffix, copy_tag)
        logger.info(
            "Copy requested for completed task {}: {} -> {}",
            task.id,
            status_to_wire(from_status),
            status_to_wire(final),
        )
        return CopyRequest(original=task, template=template)

    updated.activity_log.append(
        ActivityEntry(
            action=ACTION_STATUS_FORCED if forced else ACTION_STATUS_CHANGED,
            details=_describe(from_status, final, applied),
            user_id=user_id,
            timestamp=now,
        )
    )
    logger.info(
        "Transition applied: task={} {} -> {} forced={}",
        task.id,
        status_to_wire(from_status),
        status_to_wire(final),
        forced,
    )
    return updated
