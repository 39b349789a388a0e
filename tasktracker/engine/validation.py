"""Validation rules for time logs."""

from typing import List, Optional

from tasktracker.models.task import Task
from tasktracker.models.time_log import TimeLog
from tasktracker.models.constants import LOGGABLE_STATUSES


def can_log_time_for_task(task: Optional[Task]) -> bool:
    """Time may only be logged while a task is Estimated or InProgress."""
    if task is None:
        return False
    status = task.status.value if hasattr(task.status, "value") else task.status
    return status in LOGGABLE_STATUSES


def validate_time_log(log: TimeLog) -> List[str]:
    """Return human-readable problems with a time log (empty when valid)."""
    errors = []
    if not log.task_id:
        errors.append("Task ID is required")
    if log.hours is None or log.hours <= 0:
        errors.append("Hours must be greater than 0")
    if not log.date_logged:
        errors.append("Date logged is required")
    return errors
