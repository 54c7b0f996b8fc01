"""Typed transition failures, returned as values rather than raised."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    GATE_VIOLATION = "GateViolation"  # required subtasks block done
    INVALID_TRANSITION = "InvalidTransition"  # incomplete or unusable resolution
    UNSUPPORTED = "Unsupported"  # confirmation needed but none was run


@dataclass(frozen=True)
class TransitionError:
    kind: ErrorKind
    message: str

    @property
    def error(self) -> ErrorKind:
        return self.kind

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind.value, "message": self.message}


def is_error(outcome: Any) -> bool:
    return isinstance(outcome, TransitionError)
