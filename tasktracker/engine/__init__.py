"""Task lifecycle and time-ledger engine."""

from tasktracker.engine.transitions import (
    STATE_TRANSITIONS,
    allowed_transitions,
    is_valid_transition,
    append_status_event,
)
from tasktracker.engine.normalize import normalize_task
from tasktracker.engine.hours import round_to_quarter, decremented_remaining, restored_remaining
from tasktracker.engine.progress import TaskProgress, total_hours, calculate_task_progress
from tasktracker.engine.categories import (
    CategoryAnalysis,
    CategoryDirectory,
    CategoryDisplayInfo,
    parse_category_key,
    analyze_categories_in_time_logs,
)

__all__ = [
    "STATE_TRANSITIONS",
    "allowed_transitions",
    "is_valid_transition",
    "append_status_event",
    "normalize_task",
    "round_to_quarter",
    "decremented_remaining",
    "restored_remaining",
    "TaskProgress",
    "total_hours",
    "calculate_task_progress",
    "CategoryAnalysis",
    "CategoryDirectory",
    "CategoryDisplayInfo",
    "parse_category_key",
    "analyze_categories_in_time_logs",
]
