"""Task creation factory for the task time tracker.

This module centralizes task creation logic to eliminate duplication
and ensure consistent default values across the application.
"""

import uuid
from datetime import date
from typing import Optional, Dict, Any, List

from tasktracker.models.task import Task, EstimationData
from tasktracker.models.constants import (
    DEFAULT_STATUS,
    DEFAULT_URGENCY,
    DEFAULT_IMPORTANCE,
)


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "status": DEFAULT_STATUS,
        "urgency": DEFAULT_URGENCY,
        "importance": DEFAULT_IMPORTANCE,
        "estimate": None,
        "due_on": None,
        "project_id": None,
        "phase_key": None,
        "category_lists": [],
        "estimation_data": None,
    }


def create_task_base(
    title: str,
    description: Optional[str] = None,
    status: Optional[str] = None,
    urgency: Optional[str] = None,
    importance: Optional[str] = None,
    estimate: Optional[float] = None,
    remaining_hours: Optional[float] = None,
    due_on: Optional[date] = None,
    project_id: Optional[str] = None,
    phase_key: Optional[str] = None,
    category_lists: Optional[List[str]] = None,
    estimation_data: Optional[EstimationData] = None,
) -> Task:
    """Build an unsaved task with defaults, allowing overrides.

    Ledger fields (status history, timestamps) are left empty; they are
    filled in by ``TaskRepository.create``.

    Args:
        title: Task title (required)
        description: Task description
        status: Initial status (defaults to Ready)
        urgency: Urgency level (defaults to Med)
        importance: Importance level (defaults to Med)
        estimate: Estimated hours
        remaining_hours: Remaining hours (defaults to the estimate on create)
        due_on: Due date
        project_id: Project reference
        phase_key: Phase key
        category_lists: Category list slugs
        estimation_data: Scale estimate for velocity calibration

    Returns:
        Task object with defaults applied
    """
    defaults = create_task_defaults()
    return Task(
        id=str(uuid.uuid4()),
        title=title,
        description=description,
        status=status if status is not None else defaults["status"],
        urgency=urgency if urgency is not None else defaults["urgency"],
        importance=importance if importance is not None else defaults["importance"],
        estimate=estimate if estimate is not None else defaults["estimate"],
        remaining_hours=remaining_hours,
        due_on=due_on if due_on is not None else defaults["due_on"],
        project_id=project_id if project_id is not None else defaults["project_id"],
        phase_key=phase_key if phase_key is not None else defaults["phase_key"],
        category_lists=category_lists if category_lists is not None else defaults["category_lists"],
        estimation_data=estimation_data if estimation_data is not None else defaults["estimation_data"],
    )
