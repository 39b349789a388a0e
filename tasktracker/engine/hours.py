"""Remaining-hours policy helpers for callers of the burn-down ledger.

The ledger records whatever value it is given. Clamping at zero and rounding
to the quarter hour happen here, before ``update_remaining_hours`` is called.
"""

import math

from tasktracker.models.constants import HOURS_ROUNDING_STEP


def round_to_quarter(value: float) -> float:
    """Round to the nearest quarter hour (halves round up).

    Examples: 1.37 -> 1.25, 1.88 -> 2.0, 1.12 -> 1.0
    """
    steps = 1 / HOURS_ROUNDING_STEP
    return math.floor(value * steps + 0.5) / steps


def decremented_remaining(current: float, hours_logged: float) -> float:
    """Remaining hours after logging ``hours_logged``, never below zero."""
    return round_to_quarter(max(0.0, (current or 0) - hours_logged))


def restored_remaining(current: float, hours_removed: float) -> float:
    """Remaining hours after giving back the hours of a deleted log."""
    return round_to_quarter((current or 0) + hours_removed)
