"""TimeLog data model for the task time tracker."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class TimeLog(BaseModel):
    """Hours logged against a task on a given day."""

    id: Optional[str] = Field(None, description="Unique time log identifier (assigned on save)")
    task_id: Optional[str] = Field(None, description="Task this entry is logged against")
    hours: float = Field(..., description="Hours worked (must be > 0 to be saved)")
    date_logged: Optional[date] = Field(None, description="Day the work happened (defaults to today on save)")
    category_key: Optional[str] = Field(None, description="Category key ('listSlug.itemSlug')")
    notes: Optional[str] = Field(None, description="Free-form notes")
