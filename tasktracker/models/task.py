"""Task data model for the task time tracker."""

from datetime import date, datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Task lifecycle status enumeration."""
    READY = "Ready"
    ESTIMATED = "Estimated"
    IN_PROGRESS = "InProgress"
    BLOCKED = "Blocked"
    BACKBURNER = "Backburner"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"
    ARCHIVED = "Archived"


class Level(str, Enum):
    """Urgency / importance level (presentational only)."""
    LOW = "Low"
    MED = "Med"
    HIGH = "High"


class StatusEvent(BaseModel):
    """One entry of a task's status history. Never mutated after append."""

    status: TaskStatus = Field(..., description="Status the task moved into")
    timestamp: datetime = Field(..., description="When the status was entered")
    note: str = Field("", description="Free-form note, e.g. 'Ready => Estimated'")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        frozen = True


class ScaleEstimate(BaseModel):
    """Relative size estimate on a 1-10 scale."""

    low: int = Field(3, ge=1, le=10)
    expected: int = Field(5, ge=1, le=10)
    high: int = Field(7, ge=1, le=10)


class EstimationData(BaseModel):
    """Scale estimate plus the user's confidence in it."""

    scale: Optional[ScaleEstimate] = None
    confidence: int = Field(100, ge=0, le=100)


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    title: str = Field(..., min_length=1, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: TaskStatus = Field(TaskStatus.READY, description="Lifecycle status")
    urgency: Level = Field(Level.MED, description="Urgency (not gated by the state machine)")
    importance: Level = Field(Level.MED, description="Importance (not gated by the state machine)")
    estimate: Optional[float] = Field(None, ge=0, description="Estimated hours")
    remaining_hours: Optional[float] = Field(None, ge=0, description="Remaining hours (burn-down)")
    status_history: List[StatusEvent] = Field(default_factory=list, description="Append-only status ledger")
    due_on: Optional[date] = Field(None, description="Due date (date-only)")
    project_id: Optional[str] = Field(None, description="Project reference")
    phase_key: Optional[str] = Field(None, description="Phase key ('listSlug.itemSlug')")
    category_lists: List[str] = Field(default_factory=list, description="Category list slugs used by this task")
    estimation_data: Optional[EstimationData] = Field(None, description="Scale estimate used for velocity")
    created_at: Optional[datetime] = Field(None, description="Task creation timestamp (immutable once set)")
    updated_at: Optional[datetime] = Field(None, description="Task last update timestamp")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TaskFilters(BaseModel):
    """Optional equality filters for task listings."""

    status: Optional[TaskStatus] = None
    urgency: Optional[Level] = None
    project_id: Optional[str] = None
    due_on: Optional[date] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
