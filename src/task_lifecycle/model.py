"""Task model for the status lifecycle engine.

This module defines the task value the engine reads and rewrites (status,
schedule dates, completion flag, subtasks and the activity log) together with
the ephemeral transition types handed to the confirmation dialog.

Status strings cross the persistence boundary in exactly one place each way:
``parse_status()`` on the way in, ``status_to_wire()`` on the way out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Optional

from .utils import _parse_iso, _short_id, parse_date, parse_time


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Status(str, Enum):
    """Board-level status used for kanban columns."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    OVERDUE = "overdue"
    ARCHIVE = "archive"


def parse_status(raw: Any) -> Status:
    """Convert a persisted status string into a :class:`Status`.

    Raises:
        ValueError: If *raw* is not one of the six known statuses.
    """
    if isinstance(raw, Status):
        return raw
    try:
        return Status(str(raw).strip())
    except ValueError:
        valid = [s.value for s in Status]
        raise ValueError(f"Unknown status {raw!r}; expected one of {valid}") from None


def status_to_wire(status: Status) -> str:
    return status.value


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _generate_id() -> str:
    """Short task ID: ``task-<8hex>``."""
    return _short_id("task")


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, so camelCase payloads load too."""
    for key in keys:
        if key in data:
            return data[key]
    return default


def _iso(value: Optional[Any]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Task parts
# ---------------------------------------------------------------------------

@dataclass
class Subtask:
    """A checklist item; ``required_completed`` makes it a gate on ``done``."""

    id: str = field(default_factory=lambda: _short_id("sub"))
    title: str = ""
    completed: bool = False
    required_completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "required_completed": self.required_completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Subtask":
        return cls(
            id=str(data.get("id") or _short_id("sub")),
            title=str(data.get("title") or ""),
            completed=bool(data.get("completed", False)),
            required_completed=bool(_pick(data, "required_completed", "requiredCompleted", default=False)),
        )


@dataclass
class ActivityEntry:
    """One append-only audit record."""

    action: str
    details: str
    user_id: str = "user"
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=_short_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "action": self.action,
            "details": self.details,
            "user_id": self.user_id,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActivityEntry":
        raw_ts = data.get("timestamp")
        timestamp = raw_ts if isinstance(raw_ts, datetime) else _parse_iso(raw_ts)
        return cls(
            id=str(data.get("id") or _short_id()),
            action=str(data.get("action") or ""),
            details=str(data.get("details") or ""),
            user_id=str(_pick(data, "user_id", "userId", default="user")),
            timestamp=timestamp or datetime.now(),
        )


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A task as seen by the lifecycle engine.

    The surrounding application owns the task; the engine only reads these
    fields and returns rewritten copies. Dates and times are independent:
    a time refines its date but either may be absent.
    """

    id: str = field(default_factory=_generate_id)
    title: str = ""
    description: str = ""
    status: Status = Status.BACKLOG

    # Schedule
    start_date: Optional[date] = None
    start_time: Optional[time] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None

    completed: bool = False
    subtasks: list[Subtask] = field(default_factory=list)
    activity_log: list[ActivityEntry] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    # Extensible metadata
    metadata: dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for YAML/JSON persistence."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": status_to_wire(self.status),
            "start_date": _iso(self.start_date),
            "start_time": _iso(self.start_time),
            "due_date": _iso(self.due_date),
            "due_time": _iso(self.due_time),
            "completed": self.completed,
            "subtasks": [s.to_dict() for s in self.subtasks],
            "activity_log": [e.to_dict() for e in self.activity_log],
            "tags": list(self.tags),
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict.

        Accepts snake_case keys as written by :meth:`to_dict` as well as the
        camelCase keys used by the front-end (``startDate``, ``activityLog``).

        Raises:
            ValueError: On an unknown status or a malformed date/time.
        """
        d = dict(data)
        subtasks = [Subtask.from_dict(s) for s in list(d.get("subtasks") or []) if isinstance(s, dict)]
        log_raw = _pick(d, "activity_log", "activityLog", default=[]) or []
        activity_log = [ActivityEntry.from_dict(e) for e in list(log_raw) if isinstance(e, dict)]
        return cls(
            id=str(d.get("id") or _generate_id()),
            title=str(d.get("title") or ""),
            description=str(d.get("description") or ""),
            status=parse_status(d.get("status") or Status.BACKLOG.value),
            start_date=parse_date(_pick(d, "start_date", "startDate")),
            start_time=parse_time(_pick(d, "start_time", "startTime")),
            due_date=parse_date(_pick(d, "due_date", "dueDate")),
            due_time=parse_time(_pick(d, "due_time", "dueTime")),
            completed=bool(d.get("completed", False)),
            subtasks=subtasks,
            activity_log=activity_log,
            tags=list(d.get("tags") or []),
            metadata=dict(d.get("metadata") or {}),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None or self.due_date is not None

    @property
    def incomplete_required_subtasks(self) -> list[Subtask]:
        return [s for s in self.subtasks if s.required_completed and not s.completed]


# ---------------------------------------------------------------------------
# Transition types (ephemeral)
# ---------------------------------------------------------------------------

Resolution = dict[str, str]


@dataclass(frozen=True)
class ScenarioOption:
    label: str
    value: str
    description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"label": self.label, "value": self.value}
        if self.description:
            data["description"] = self.description
        return data


@dataclass(frozen=True)
class Scenario:
    """A decision point; exactly one option must be chosen."""

    key: str
    title: str
    options: tuple[ScenarioOption, ...]

    @property
    def values(self) -> list[str]:
        return [o.value for o in self.options]

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "options": [o.to_dict() for o in self.options],
        }


@dataclass(frozen=True)
class Transition:
    from_status: Status
    to_status: Status
    scenarios: tuple[Scenario, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": status_to_wire(self.from_status),
            "to": status_to_wire(self.to_status),
            "scenarios": [s.to_dict() for s in self.scenarios],
        }


def chosen_option(resolution: Resolution, scenario: Scenario, index: int) -> Optional[str]:
    """Return the value chosen for *scenario*, looked up by key then index."""
    value = resolution.get(scenario.key)
    if value is None:
        value = resolution.get(str(index))
    return value
