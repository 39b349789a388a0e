"""RemainingHoursEntry data model (burn-down ledger)."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class RemainingHoursEntry(BaseModel):
    """A single change to a task's remaining-hours estimate."""

    id: Optional[str] = Field(None, description="Unique entry identifier")
    task_id: str = Field(..., description="Task whose remaining hours changed")
    remaining_hours: float = Field(..., description="New remaining hours")
    previous_remaining_hours: Optional[float] = Field(
        None, description="Value before the change (null for the initial estimate)"
    )
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="When the change was recorded")
    note: str = Field("", description="Reason for the change")

    class Config:
        """Pydantic configuration."""
        frozen = True
