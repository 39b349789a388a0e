"""Constants for the task time tracker.

This module centralizes status groupings, ledger notes and numeric policy
values used throughout the application.
"""

from tasktracker.models.task import TaskStatus, Level


# Status values against which time may be logged
LOGGABLE_STATUSES = frozenset({TaskStatus.ESTIMATED.value, TaskStatus.IN_PROGRESS.value})

# Hidden from default task listings
TERMINAL_STATUSES = frozenset({
    TaskStatus.COMPLETED.value,
    TaskStatus.ABANDONED.value,
    TaskStatus.ARCHIVED.value,
})

# Task defaults
DEFAULT_STATUS = TaskStatus.READY
DEFAULT_URGENCY = Level.MED
DEFAULT_IMPORTANCE = Level.MED

# Ledger notes
NOTE_TASK_CREATED = "Task created"
NOTE_LEGACY_INITIAL_STATUS = "Legacy task - initial status"
NOTE_INITIAL_ESTIMATE = "Initial estimate"

# Remaining hours are kept in quarter-hour steps by callers
HOURS_ROUNDING_STEP = 0.25

# Key used for logs without a category in simple summaries
UNCATEGORIZED_KEY = "uncategorized"
