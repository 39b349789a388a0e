"""Normalization of tasks loaded from storage.

Older records may predate the status ledger or the burn-down field. They are
brought up to the current shape here, in one pure function applied on load,
instead of being patched ad hoc wherever they are read.
"""

from datetime import datetime
from typing import Optional

from tasktracker.models.task import StatusEvent, Task
from tasktracker.models.constants import NOTE_LEGACY_INITIAL_STATUS


def normalize_task(task: Task, now: Optional[datetime] = None) -> Task:
    """Return a copy of ``task`` with legacy gaps filled.

    - Missing ``status_history``: a single entry with the current status,
      stamped at ``created_at`` (or ``now`` when that is missing too).
    - Missing ``remaining_hours``: the estimate, or 0.

    Tasks already in the current shape are returned unchanged (as a copy).

    Args:
        task: Task as read from storage
        now: Clock override for deterministic tests

    Returns:
        Normalized task; the input is never mutated
    """
    updates = {}

    if not task.status_history:
        timestamp = task.created_at or now or datetime.utcnow()
        updates["status_history"] = [
            StatusEvent(status=task.status, timestamp=timestamp, note=NOTE_LEGACY_INITIAL_STATUS)
        ]

    if task.remaining_hours is None:
        updates["remaining_hours"] = task.estimate or 0

    return task.model_copy(update=updates)
