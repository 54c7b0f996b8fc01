"""Derive the status a task's dates and completion imply right now.

The derived ("effective") status is independent of the stored ``status``
field. Divergence between the two is a signal for the view layer, never a
reason to mutate the task here.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from .model import Status, Task

_END_OF_DAY = time.max
_START_OF_DAY = time.min

# Stored statuses that express intent rather than a schedule
_NON_TEMPORAL = {Status.BACKLOG, Status.TODO, Status.IN_PROGRESS}


def _at(day: date, moment: time, now: datetime) -> datetime:
    combined = datetime.combine(day, moment)
    if combined.tzinfo is None and now.tzinfo is not None:
        combined = combined.replace(tzinfo=now.tzinfo)
    elif combined.tzinfo is not None and now.tzinfo is None:
        combined = combined.replace(tzinfo=None)
    return combined


def effective_start(task: Task, now: datetime) -> Optional[datetime]:
    """Start as a datetime; a missing time means start of day."""
    if task.start_date is None:
        return None
    return _at(task.start_date, task.start_time or _START_OF_DAY, now)


def effective_due(task: Task, now: datetime) -> Optional[datetime]:
    """Due as a datetime; a missing time means end of day."""
    if task.due_date is None:
        return None
    return _at(task.due_date, task.due_time or _END_OF_DAY, now)


def derive_status(task: Task, now: Optional[datetime] = None) -> Status:
    """Return the status *task* should hold at *now*.

    Rules, first match wins: completed -> done; due passed -> overdue; start
    in the future -> backlog; start reached -> in-progress; only a future due
    -> todo; no dates -> the stored intent (todo as baseline). ``archive`` is
    never derived.
    """
    if now is None:
        now = datetime.now()

    if task.completed:
        return Status.DONE

    due = effective_due(task, now)
    if due is not None and due < now:
        return Status.OVERDUE

    start = effective_start(task, now)
    if start is not None:
        if start > now:
            return Status.BACKLOG
        return Status.IN_PROGRESS

    if due is not None:
        return Status.TODO

    if task.status in _NON_TEMPORAL:
        return task.status
    return Status.TODO


def suggest_status(task: Task, now: Optional[datetime] = None) -> Optional[Status]:
    """Status to offer as a "suggested status" badge, or None to keep the stored one.

    Unlike :func:`derive_status` this looks at the stored status too: a done
    or overdue task whose due date moved back into the future is offered
    todo/in-progress again, done tasks are otherwise left alone, a future
    start suggests todo, and an undated todo/in-progress task is pushed
    back to backlog. Archived tasks never get a suggestion.
    """
    if now is None:
        now = datetime.now()
    status = task.status
    if status == Status.ARCHIVE:
        return None

    start = effective_start(task, now)
    due = effective_due(task, now)

    if due is not None and due > now and status in (Status.DONE, Status.OVERDUE):
        if start is not None and start <= now:
            return Status.IN_PROGRESS
        return Status.TODO

    if status == Status.DONE:
        return None

    if due is not None and due < now and status != Status.OVERDUE:
        return Status.OVERDUE

    if start is not None:
        if start <= now and status in (Status.TODO, Status.BACKLOG):
            return Status.IN_PROGRESS
        if start > now and status in (Status.BACKLOG, Status.IN_PROGRESS):
            return Status.TODO

    if status == Status.BACKLOG and (start is not None or due is not None):
        return Status.TODO

    if start is None and due is None and status in (Status.TODO, Status.IN_PROGRESS):
        return Status.BACKLOG

    return None
