"""Configure logging and summarize transition outcomes for logs."""

from __future__ import annotations

import json
import sys
from typing import Any

from loguru import logger

from .errors import TransitionError
from .model import Task, status_to_wire


def configure_logging(level: str = "INFO") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
            "{message}"
        ),
    )


def summarize_outcome(outcome: Any) -> dict[str, Any]:
    """Render a compact, JSON-friendly summary of an executor outcome.

    Args:
        outcome: Updated task, copy request, transition error, or None.

    Returns:
        A dictionary suitable for logging or serialization.
    """
    if outcome is None:
        return {"outcome": None}

    if isinstance(outcome, TransitionError):
        return {"outcome": "error", "error": outcome.kind.value, "message": outcome.message}

    if isinstance(outcome, Task):
        d: dict[str, Any] = {
            "outcome": "updated",
            "task_id": outcome.id,
            "status": status_to_wire(outcome.status),
            "completed": outcome.completed,
            "log_n": len(outcome.activity_log),
        }
        if outcome.activity_log:
            last = outcome.activity_log[-1]
            d["last_action"] = last.action
            details = last.details
            d["last_details"] = (details[:240] + "…") if len(details) > 240 else details
        return d

    template = getattr(outcome, "template", None)
    original = getattr(outcome, "original", None)
    created = getattr(outcome, "created", None)
    if isinstance(template, Task) and isinstance(original, Task):
        return {
            "outcome": "copy_requested",
            "original_id": original.id,
            "status": status_to_wire(template.status),
            "title": template.title,
            "created_id": created.id if isinstance(created, Task) else None,
        }

    return {"outcome": outcome.__class__.__name__}


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
