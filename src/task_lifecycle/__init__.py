"""Provide the public `task_lifecycle` package exports."""

from __future__ import annotations

from .config import EngineConfig, ProviderConfig, load_engine_config
from .derivation import derive_status, suggest_status
from .errors import ErrorKind, TransitionError, is_error
from .executor import CopyRequest, execute_status_transition
from .model import (
    ActivityEntry,
    Scenario,
    ScenarioOption,
    Status,
    Subtask,
    Task,
    Transition,
    parse_status,
    status_to_wire,
)
from .orchestrator import AwaitingConfirmation, Idle, TransitionOrchestrator
from .scenarios import (
    get_suggested_alternatives,
    get_transition_scenarios,
    has_incomplete_required_subtasks,
    requires_user_input,
)

__all__ = [
    "ActivityEntry",
    "AwaitingConfirmation",
    "CopyRequest",
    "EngineConfig",
    "ErrorKind",
    "Idle",
    "ProviderConfig",
    "Scenario",
    "ScenarioOption",
    "Status",
    "Subtask",
    "Task",
    "Transition",
    "TransitionError",
    "TransitionOrchestrator",
    "derive_status",
    "execute_status_transition",
    "get_suggested_alternatives",
    "get_transition_scenarios",
    "has_incomplete_required_subtasks",
    "is_error",
    "load_engine_config",
    "parse_status",
    "requires_user_input",
    "status_to_wire",
    "suggest_status",
]
