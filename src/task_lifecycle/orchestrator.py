"""Coordinate status changes requested by the view layer.

The orchestrator owns no task data. It reads the task through a caller
accessor, asks the scenario catalog whether the change needs confirmation,
parks at most one pending transition while the dialog is open, and hands the
executor's result back through caller callbacks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from loguru import logger

from .config import EngineConfig
from .constants import OPTION_CANCEL
from .errors import ErrorKind, TransitionError
from .executor import CopyRequest, TransitionOutcome, execute_status_transition
from .logging_utils import pretty, summarize_outcome
from .model import Resolution, Status, Task, Transition, chosen_option, status_to_wire
from .scenarios import (
    get_transition_scenarios,
    has_incomplete_required_subtasks,
    required_subtasks_scenario,
)
from .utils import Clock, system_clock


@dataclass(frozen=True)
class Idle:
    """No transition pending."""


@dataclass(frozen=True)
class AwaitingConfirmation:
    """A transition waits for the user's choices; the dialog is open."""

    transition: Transition


OrchestratorState = Union[Idle, AwaitingConfirmation]

_IDLE = Idle()


class TransitionOrchestrator:
    """Drive one task's status changes through confirmation and execution.

    Parameters
    ----------
    get_task:
        Returns the task currently being edited (or None).
    set_task:
        Receives the updated task after a successful transition.
    on_save:
        Optional persistence callback, invoked when a transition is saved.
    create_task:
        Creates a new task for the "create copy" resolution and returns it.
    effective_status:
        Accessor for the status transitions start from. Defaults to the
        stored status.
    is_create_mode:
        True while the task has not been persisted yet.
    clock:
        Source of "now"; injectable for tests.
    config:
        Engine settings (author id, provider capabilities, copy naming).
    """

    def __init__(
        self,
        get_task: Callable[[], Optional[Task]],
        set_task: Callable[[Task], None],
        on_save: Optional[Callable[[Task], None]] = None,
        create_task: Optional[Callable[[Task], Task]] = None,
        *,
        effective_status: Optional[Callable[[Task], Status]] = None,
        is_create_mode: bool = False,
        clock: Clock = system_clock,
        config: Optional[EngineConfig] = None,
    ) -> None:
        self._get_task = get_task
        self._set_task = set_task
        self._on_save = on_save
        self._create_task = create_task
        self._effective_status = effective_status
        self.is_create_mode = is_create_mode
        self.clock = clock
        self.config = config or EngineConfig()
        self._state: OrchestratorState = _IDLE
        self.last_error: Optional[TransitionError] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        return self._state

    @property
    def pending_transition(self) -> Optional[Transition]:
        if isinstance(self._state, AwaitingConfirmation):
            return self._state.transition
        return None

    @property
    def is_awaiting_confirmation(self) -> bool:
        return isinstance(self._state, AwaitingConfirmation)

    @property
    def _supports_revert_done(self) -> bool:
        return self.config.provider.supports_revert_done or self.is_create_mode

    def _current_status(self, task: Task) -> Status:
        if self._effective_status is None:
            return task.status
        return self._effective_status(task)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def handle_status_change(self, new_status: Status, save: bool = False) -> Optional[TransitionOutcome]:
        """Request a move to *new_status*.

        Runs the transition right away when no decision is needed and returns
        its outcome; otherwise parks it (replacing any pending one) and
        returns None.
        """
        task = self._get_task()
        if task is None:
            return None

        current = self._current_status(task)
        if new_status == current and new_status == task.status:
            logger.debug("Ignoring no-op status change for {}: {}", task.id, status_to_wire(new_status))
            return None

        now = self.clock()
        if new_status == Status.DONE and has_incomplete_required_subtasks(task):
            scenarios = [required_subtasks_scenario()]
        else:
            scenarios = get_transition_scenarios(
                current,
                new_status,
                task,
                now=now,
                supports_revert_done=self._supports_revert_done,
            )

        if scenarios:
            if self.is_awaiting_confirmation:
                logger.debug("Replacing pending transition for {}", task.id)
            transition = Transition(from_status=current, to_status=new_status, scenarios=tuple(scenarios))
            self._state = AwaitingConfirmation(transition)
            self.last_error = None
            logger.info(
                "Awaiting confirmation for {}: {} -> {} ({} scenario(s))",
                task.id,
                status_to_wire(current),
                status_to_wire(new_status),
                len(scenarios),
            )
            return None

        self._state = _IDLE
        return self._run(task, Transition(current, new_status), {}, save=save)

    def confirm(self, resolution: Resolution, save: bool = True) -> Optional[TransitionOutcome]:
        """Execute the pending transition with the user's choices.

        A no-op (returns None, state unchanged) unless every pending scenario
        has a choice. Choosing "cancel" anywhere cancels the transition.
        """
        transition = self.pending_transition
        if transition is None:
            return None

        answers = [chosen_option(resolution, s, i) for i, s in enumerate(transition.scenarios)]
        if any(a is None for a in answers):
            logger.debug("Ignoring incomplete resolution: {}/{} answered",
                         sum(a is not None for a in answers), len(answers))
            return None
        if OPTION_CANCEL in answers:
            self.cancel()
            return None

        task = self._get_task()
        if task is None:
            self.cancel()
            return None
        return self._run(task, transition, resolution, save=save)

    def cancel(self) -> None:
        """Discard the pending transition without touching the task."""
        if self.is_awaiting_confirmation:
            logger.debug("Pending transition cancelled")
        self._state = _IDLE
        self.last_error = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        task: Task,
        transition: Transition,
        resolution: Resolution,
        *,
        save: bool,
    ) -> TransitionOutcome:
        cfg = self.config
        outcome = execute_status_transition(
            task,
            transition.from_status,
            transition.to_status,
            resolution,
            self.is_create_mode,
            now=self.clock(),
            scenarios=list(transition.scenarios),
            supports_revert_done=self._supports_revert_done,
            user_id=cfg.user_id,
            next_week_days=cfg.next_week_days,
            copy_title_suffix=cfg.copy_title_suffix,
            copy_tag=cfg.copy_tag,
        )

        if isinstance(outcome, TransitionError):
            self.last_error = outcome
            logger.warning("Transition refused for {}: {}", task.id, outcome.message)
            return outcome

        if isinstance(outcome, CopyRequest):
            if self._create_task is None:
                error = TransitionError(ErrorKind.UNSUPPORTED, "No create_task collaborator to copy the task")
                self.last_error = error
                logger.warning("Transition refused for {}: {}", task.id, error.message)
                return error
            outcome = replace(outcome, created=self._create_task(outcome.template))
        else:
            self._set_task(outcome)
            if save and self._on_save is not None:
                self._on_save(outcome)

        self._state = _IDLE
        self.last_error = None
        logger.debug("Transition outcome:\n{}", pretty(summarize_outcome(outcome)))
        return outcome
