"""Progress calculations over a task and its time logs.

Pure functions: callers fetch the logs, these only derive numbers from them.
"""

import math
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from tasktracker.models.task import Task
from tasktracker.models.time_log import TimeLog


class TaskProgress(BaseModel):
    """Derived progress metrics for one task."""
    logged: float = 0.0
    estimate: float = 0.0
    remaining: float = 0.0
    progress: int = 0
    is_over_budget: bool = False


def total_hours(logs: Iterable[TimeLog]) -> float:
    """Sum of hours across time logs."""
    return sum((log.hours or 0) for log in logs)


def progress_percentage(estimate: Optional[float], logged: float) -> int:
    """Logged hours as a percentage of the estimate, clamped to 0..100.

    A missing or zero estimate yields 0.
    """
    if not estimate or estimate <= 0:
        return 0
    percentage = math.floor(logged / estimate * 100 + 0.5)
    return max(0, min(100, percentage))


def is_over_budget(estimate: Optional[float], logged: float) -> bool:
    """True when more hours were logged than estimated (only with a positive estimate)."""
    if not estimate or estimate <= 0:
        return False
    return logged > estimate


def calculate_task_progress(task: Optional[Task], logs: Iterable[TimeLog]) -> TaskProgress:
    """Calculate progress metrics for a task.

    Args:
        task: Task to measure (a task without an id has no logs)
        logs: The task's time logs

    Returns:
        TaskProgress with logged/estimate/remaining/progress/is_over_budget
    """
    if task is None or not task.id:
        return TaskProgress()

    logged = total_hours(logs)
    estimate = task.estimate or 0
    return TaskProgress(
        logged=logged,
        estimate=estimate,
        remaining=task.remaining_hours or 0,
        progress=progress_percentage(estimate, logged),
        is_over_budget=is_over_budget(estimate, logged),
    )


def group_time_logs_by_date(logs: Iterable[TimeLog]) -> Dict[str, List[TimeLog]]:
    """Group logs by ISO date ('unknown' when missing)."""
    grouped: Dict[str, List[TimeLog]] = defaultdict(list)
    for log in logs:
        key = log.date_logged.isoformat() if log.date_logged else "unknown"
        grouped[key].append(log)
    return dict(grouped)


def group_time_logs_by_task(logs: Iterable[TimeLog]) -> Dict[str, List[TimeLog]]:
    """Group logs by task id ('unknown' when missing)."""
    grouped: Dict[str, List[TimeLog]] = defaultdict(list)
    for log in logs:
        grouped[log.task_id or "unknown"].append(log)
    return dict(grouped)
