"""Error taxonomy for the task time tracker.

Repositories raise these; the service layer turns them into failed
``OperationResult`` values so callers never see an uncaught failure.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure category."""
    INVALID_TRANSITION = "invalid_transition"
    INVALID_TASK_STATE = "invalid_task_state"
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    STORE_FAILURE = "store_failure"


class TrackerError(Exception):
    """Base class for all tracker errors."""

    kind: ErrorKind = ErrorKind.STORE_FAILURE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransitionError(TrackerError):
    """Requested status change is not in the transition table."""

    kind = ErrorKind.INVALID_TRANSITION

    def __init__(self, from_status: str, to_status: str):
        super().__init__(f"Invalid status transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class InvalidTaskStateError(TrackerError):
    """Time can only be logged while the task is Estimated or InProgress."""

    kind = ErrorKind.INVALID_TASK_STATE


class FieldValidationError(TrackerError):
    """A required field is missing or out of range."""

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class NotFoundError(TrackerError):
    """Referenced task or time log does not exist."""

    kind = ErrorKind.NOT_FOUND


class StoreFailureError(TrackerError):
    """Underlying persistence operation failed."""

    kind = ErrorKind.STORE_FAILURE
