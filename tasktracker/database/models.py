"""SQLAlchemy database models for the task time tracker."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Float, Date, DateTime, JSON, ForeignKey

from typing import Union, TypeVar, Type
from tasktracker.database.database import Base
from tasktracker.models.task import TaskStatus, Level

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value)
    except (ValueError, AttributeError):
        return default


def _history_to_json(history) -> list:
    return [
        {
            "status": enum_to_value(event.status),
            "timestamp": event.timestamp.isoformat(),
            "note": event.note,
        }
        for event in history
    ]


def _history_from_json(raw, default_timestamp=None) -> list:
    from tasktracker.models.task import StatusEvent

    events = []
    for item in raw or []:
        timestamp = item.get("timestamp")
        if not timestamp:
            # Hand-edited or legacy rows may lack a timestamp
            timestamp = default_timestamp or datetime.utcnow()
        elif isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        events.append(
            StatusEvent(
                status=value_to_enum(item.get("status"), TaskStatus, TaskStatus.READY),
                timestamp=timestamp,
                note=item.get("note") or "",
            )
        )
    return events


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, nullable=False, default=TaskStatus.READY.value, index=True)
    urgency = Column(String, nullable=False, default=Level.MED.value, index=True)
    importance = Column(String, nullable=False, default=Level.MED.value)

    # Hours
    estimate = Column(Float, nullable=True)
    remaining_hours = Column(Float, nullable=True)

    # Status ledger (small and bounded, so embedded as a JSON array)
    status_history = Column(JSON, nullable=True)

    # Taxonomy references
    due_on = Column(Date, nullable=True, index=True)
    project_id = Column(String, nullable=True, index=True)
    phase_key = Column(String, nullable=True)
    category_lists = Column(JSON, nullable=False, default=list)
    estimation_data = Column(JSON, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=True, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model (without normalization)."""
        from tasktracker.models.task import Task

        return Task(
            id=self.id,
            title=self.title,
            description=self.description,
            status=value_to_enum(self.status, TaskStatus, TaskStatus.READY),
            urgency=value_to_enum(self.urgency, Level, Level.MED),
            importance=value_to_enum(self.importance, Level, Level.MED),
            estimate=self.estimate,
            remaining_hours=self.remaining_hours,
            status_history=_history_from_json(self.status_history, self.created_at),
            due_on=self.due_on,
            project_id=self.project_id,
            phase_key=self.phase_key,
            category_lists=self.category_lists or [],
            estimation_data=self.estimation_data,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_pydantic(self, task) -> None:
        """Copy every persisted field from a Pydantic task onto this row."""
        self.title = task.title
        self.description = task.description
        self.status = enum_to_value(task.status)
        self.urgency = enum_to_value(task.urgency)
        self.importance = enum_to_value(task.importance)
        self.estimate = task.estimate
        self.remaining_hours = task.remaining_hours
        self.status_history = _history_to_json(task.status_history)
        self.due_on = task.due_on
        self.project_id = task.project_id
        self.phase_key = task.phase_key
        self.category_lists = list(task.category_lists)
        self.estimation_data = task.estimation_data.model_dump() if task.estimation_data else None
        self.created_at = task.created_at
        self.updated_at = task.updated_at

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        row = cls(id=task.id)
        row.apply_pydantic(task)
        return row


class TimeLogDB(Base):
    """Database model for TimeLog."""

    __tablename__ = "time_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    hours = Column(Float, nullable=False)
    date_logged = Column(Date, nullable=False, index=True)
    category_key = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from tasktracker.models.time_log import TimeLog
        return TimeLog(
            id=self.id,
            task_id=self.task_id,
            hours=self.hours,
            date_logged=self.date_logged,
            category_key=self.category_key,
            notes=self.notes,
        )

    @classmethod
    def from_pydantic(cls, log):
        """Create database model from Pydantic model."""
        return cls(
            id=log.id or str(uuid.uuid4()),
            task_id=log.task_id,
            hours=log.hours,
            date_logged=log.date_logged,
            category_key=log.category_key,
            notes=log.notes,
        )


class RemainingHoursEntryDB(Base):
    """Database model for a burn-down ledger entry.

    Stored apart from the task row so reading a task never loads its history.
    """

    __tablename__ = "remaining_hours_history"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    remaining_hours = Column(Float, nullable=False)
    previous_remaining_hours = Column(Float, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    note = Column(String, nullable=False, default="")

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from tasktracker.models.remaining_hours import RemainingHoursEntry
        return RemainingHoursEntry(
            id=self.id,
            task_id=self.task_id,
            remaining_hours=self.remaining_hours,
            previous_remaining_hours=self.previous_remaining_hours,
            timestamp=self.timestamp,
            note=self.note or "",
        )

    @classmethod
    def from_pydantic(cls, entry):
        """Create database model from Pydantic model."""
        return cls(
            id=entry.id or str(uuid.uuid4()),
            task_id=entry.task_id,
            remaining_hours=entry.remaining_hours,
            previous_remaining_hours=entry.previous_remaining_hours,
            timestamp=entry.timestamp,
            note=entry.note,
        )


class CategoryListDB(Base):
    """Database model for a category list (taxonomy used by time logs)."""

    __tablename__ = "category_lists"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, nullable=False, index=True)
    slug = Column(String, nullable=False, unique=True, index=True)

    # Categories (stored as JSON array of {title, slug})
    categories = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from tasktracker.models.category import CategoryList
        return CategoryList(
            id=self.id,
            title=self.title,
            slug=self.slug,
            categories=self.categories or [],
        )

    @classmethod
    def from_pydantic(cls, category_list):
        """Create database model from Pydantic model."""
        return cls(
            id=category_list.id or str(uuid.uuid4()),
            title=category_list.title,
            slug=category_list.slug,
            categories=[item.model_dump() for item in category_list.categories],
        )
