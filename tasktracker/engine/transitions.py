"""Task status state machine.

The transition table is fixed configuration data: a read-only mapping from
each status to the statuses it may move to next. Nothing mutates it at runtime.
"""

from datetime import datetime
from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Optional

from tasktracker.models.task import StatusEvent, TaskStatus


def _status_value(status) -> Optional[str]:
    if status is None:
        return None
    if hasattr(status, "value"):
        return status.value
    return str(status)


STATE_TRANSITIONS: Mapping[str, FrozenSet[str]] = MappingProxyType({
    TaskStatus.READY.value: frozenset({
        TaskStatus.ESTIMATED.value,
        TaskStatus.IN_PROGRESS.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.ESTIMATED.value: frozenset({
        TaskStatus.IN_PROGRESS.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.IN_PROGRESS.value: frozenset({
        TaskStatus.BLOCKED.value,
        TaskStatus.BACKBURNER.value,
        TaskStatus.ON_HOLD.value,
        TaskStatus.COMPLETED.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.BLOCKED.value: frozenset({
        TaskStatus.IN_PROGRESS.value,
        TaskStatus.BACKBURNER.value,
        TaskStatus.ON_HOLD.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.BACKBURNER.value: frozenset({
        TaskStatus.IN_PROGRESS.value,
        TaskStatus.BLOCKED.value,
        TaskStatus.ON_HOLD.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.ON_HOLD.value: frozenset({
        TaskStatus.IN_PROGRESS.value,
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.COMPLETED.value: frozenset({
        TaskStatus.ABANDONED.value,
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.ABANDONED.value: frozenset({
        TaskStatus.ARCHIVED.value,
    }),
    TaskStatus.ARCHIVED.value: frozenset(),
})


def allowed_transitions(status) -> FrozenSet[str]:
    """Return the statuses reachable in one step from ``status``.

    Unknown statuses have no outgoing transitions.
    """
    return STATE_TRANSITIONS.get(_status_value(status), frozenset())


def is_valid_transition(from_status, to_status) -> bool:
    """Check whether a task may move from ``from_status`` to ``to_status``.

    Staying in the same status is always valid (a plain edit). Missing
    statuses are never valid.

    Args:
        from_status: Current status (enum or string value)
        to_status: Requested status (enum or string value)

    Returns:
        True if the transition is allowed
    """
    from_value = _status_value(from_status)
    to_value = _status_value(to_status)
    if not from_value or not to_value:
        return False
    if from_value == to_value:
        return True
    return to_value in allowed_transitions(from_value)


def transition_note(from_status, to_status) -> str:
    """Ledger note recorded for a status change."""
    return f"{_status_value(from_status)} => {_status_value(to_status)}"


def append_status_event(
    history: List[StatusEvent],
    status,
    note: str,
    now: Optional[datetime] = None,
) -> List[StatusEvent]:
    """Return a new history with one event appended.

    The input list is not modified. The new timestamp never precedes the last
    recorded one, so the ledger stays chronologically ordered even when a
    legacy entry carries a later clock reading.
    """
    timestamp = now or datetime.utcnow()
    if history and history[-1].timestamp > timestamp:
        timestamp = history[-1].timestamp
    event = StatusEvent(status=_status_value(status), timestamp=timestamp, note=note)
    return [*history, event]
