"""Personal velocity calibration.

Velocity = total actual hours / total expected scale points, measured over
completed tasks that carry a scale estimate and have logged time. It turns a
1-10 scale estimate for a new task into an hours prediction.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from tasktracker.models.task import EstimationData, Task, TaskStatus
from tasktracker.models.time_log import TimeLog
from tasktracker.engine.progress import total_hours

MIN_SCALE = 1
MAX_SCALE = 10


class VelocityData(BaseModel):
    """Calibrated hours-per-scale-point."""
    velocity: float
    sample_size: int
    total_hours: float
    total_points: float


class HoursPrediction(BaseModel):
    """Predicted hours range for a scale estimate."""
    can_predict: bool
    message: str = ""
    low: Optional[float] = None
    expected: Optional[float] = None
    high: Optional[float] = None
    velocity: Optional[float] = None
    sample_size: int = 0
    confidence: Optional[int] = None


def calculate_personal_velocity(
    tasks: Iterable[Task],
    logs_by_task: Dict[str, List[TimeLog]],
) -> Optional[VelocityData]:
    """Calculate velocity from completed, scale-estimated tasks.

    Returns None when no completed task has both a positive expected scale
    and logged hours.
    """
    total_points = 0.0
    actual_hours = 0.0
    sample_size = 0

    for task in tasks:
        if task.status != TaskStatus.COMPLETED.value:
            continue
        scale = task.estimation_data.scale if task.estimation_data else None
        if scale is None or scale.expected <= 0:
            continue
        hours = total_hours(logs_by_task.get(task.id, []))
        if hours > 0:
            total_points += scale.expected
            actual_hours += hours
            sample_size += 1

    if total_points == 0 or sample_size == 0:
        return None

    return VelocityData(
        velocity=actual_hours / total_points,
        sample_size=sample_size,
        total_hours=actual_hours,
        total_points=total_points,
    )


def predict_task_hours(
    estimation_data: Optional[EstimationData],
    velocity_data: Optional[VelocityData],
) -> HoursPrediction:
    """Predict low/expected/high hours for a scale estimate."""
    if estimation_data is None or estimation_data.scale is None:
        return HoursPrediction(can_predict=False, message="No estimation data provided")
    if velocity_data is None:
        return HoursPrediction(
            can_predict=False,
            message="Complete more tasks with estimation data to enable predictions",
        )

    scale = estimation_data.scale
    velocity = velocity_data.velocity
    return HoursPrediction(
        can_predict=True,
        low=scale.low * velocity,
        expected=scale.expected * velocity,
        high=scale.high * velocity,
        velocity=velocity,
        sample_size=velocity_data.sample_size,
        confidence=estimation_data.confidence,
    )


def validate_scale_estimates(low: int, expected: int, high: int) -> Tuple[bool, str]:
    """Check that low <= expected <= high and all lie within 1..10."""
    if low > expected:
        return False, "Low estimate cannot be greater than Expected"
    if expected > high:
        return False, "Expected estimate cannot be greater than High"
    for value in (low, expected, high):
        if value < MIN_SCALE or value > MAX_SCALE:
            return False, f"All estimates must be between {MIN_SCALE} and {MAX_SCALE}"
    return True, "Valid scale estimates"
