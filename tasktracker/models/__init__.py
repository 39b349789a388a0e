"""Data models for the task time tracker."""

from tasktracker.models.task import (
    Task,
    TaskStatus,
    TaskFilters,
    Level,
    StatusEvent,
    EstimationData,
    ScaleEstimate,
)
from tasktracker.models.time_log import TimeLog
from tasktracker.models.remaining_hours import RemainingHoursEntry
from tasktracker.models.category import CategoryList, CategoryItem

__all__ = [
    "Task",
    "TaskStatus",
    "TaskFilters",
    "Level",
    "StatusEvent",
    "EstimationData",
    "ScaleEstimate",
    "TimeLog",
    "RemainingHoursEntry",
    "CategoryList",
    "CategoryItem",
]
