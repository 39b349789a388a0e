"""Repository layer for task operations.

The task repository owns the status state machine. Every write that spans
the task row and a ledger (status history, burn-down entries, time logs on
delete) goes through one session commit, so a failure leaves nothing behind.
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.models.task import Task, TaskFilters
from tasktracker.models.constants import (
    DEFAULT_STATUS,
    NOTE_INITIAL_ESTIMATE,
    NOTE_TASK_CREATED,
    TERMINAL_STATUSES,
)
from tasktracker.database.models import TaskDB, enum_to_value
from tasktracker.database.remaining_hours_repository import RemainingHoursRepository
from tasktracker.database.time_log_repository import TimeLogRepository
from tasktracker.engine.normalize import normalize_task
from tasktracker.engine.transitions import append_status_event, is_valid_transition, transition_note
from tasktracker.errors import InvalidTransitionError, NotFoundError, StoreFailureError

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db
        self.remaining_hours = RemainingHoursRepository(db)
        self.time_logs = TimeLogRepository(db)

    def _load_for_write(self, task_id: str) -> Optional[TaskDB]:
        # Fresh read of the row (locked where the backend supports it) so the
        # transition is checked against the status being overwritten.
        return (
            self.db.query(TaskDB)
            .filter(TaskDB.id == task_id)
            .populate_existing()
            .with_for_update()
            .first()
        )

    def create(self, task: Task) -> Task:
        """Create a new task with its initial status and burn-down entries.

        - status defaults to Ready
        - status history starts with one 'Task created' event
        - remaining hours default to the estimate (or 0); a positive value is
          recorded as the 'Initial estimate' ledger entry
        """
        now = datetime.utcnow()
        status = enum_to_value(task.status) if task.status else DEFAULT_STATUS.value
        remaining_hours = task.remaining_hours
        if remaining_hours is None:
            remaining_hours = task.estimate or 0

        new_task = task.model_copy(update={
            "status": status,
            "status_history": append_status_event([], status, NOTE_TASK_CREATED, now=now),
            "remaining_hours": remaining_hours,
            "created_at": now,
            "updated_at": now,
        })

        try:
            task_db = TaskDB.from_pydantic(new_task)
            self.db.add(task_db)
            # The ledger row references the task, so the task must be inserted first
            self.db.flush()
            if remaining_hours > 0:
                self.remaining_hours.record(
                    new_task.id, remaining_hours, None, NOTE_INITIAL_ESTIMATE, timestamp=now
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to create task {task.id}") from e
        self.db.refresh(task_db)
        logger.debug(f"Created task {new_task.id}: {new_task.title[:50]} ({status}, {remaining_hours}h)")
        return task_db.to_pydantic()

    def update(self, task: Task, is_edit: bool = True) -> Task:
        """Save a task, validating any status change.

        When ``is_edit`` is False this is a create. Otherwise:
        - the persisted task is re-read and normalized (legacy records get a
          one-entry history)
        - an unchanged status keeps the history verbatim
        - a changed status must be a legal transition; the new event is
          appended with note '{old} => {new}'
        - a changed remaining-hours value appends a burn-down entry
        - created_at is never overwritten

        Raises:
            NotFoundError: The task does not exist
            InvalidTransitionError: The status change is not allowed (nothing is written)
            StoreFailureError: The write failed (nothing is written)
        """
        if not is_edit:
            return self.create(task)

        try:
            task_db = self._load_for_write(task.id)
            if not task_db:
                self.db.rollback()
                raise NotFoundError(f"Task {task.id} not found")

            now = datetime.utcnow()
            current = normalize_task(task_db.to_pydantic(), now=now)
            new_status = enum_to_value(task.status) if task.status else current.status

            if new_status == current.status:
                history = current.status_history
            elif not is_valid_transition(current.status, new_status):
                self.db.rollback()
                logger.warning(f"Invalid status transition from {current.status} to {new_status} for task {task.id}")
                raise InvalidTransitionError(current.status, new_status)
            else:
                history = append_status_event(
                    current.status_history, new_status, transition_note(current.status, new_status), now=now
                )

            remaining_hours = task.remaining_hours
            if remaining_hours is None:
                remaining_hours = current.remaining_hours

            updated = task.model_copy(update={
                "status": new_status,
                "status_history": history,
                "remaining_hours": remaining_hours,
                "created_at": current.created_at or now,
                "updated_at": now,
            })

            task_db.apply_pydantic(updated)
            previous_remaining = current.remaining_hours or 0
            if remaining_hours != previous_remaining:
                self.remaining_hours.record(
                    task.id,
                    remaining_hours,
                    previous_remaining,
                    f"Updated remaining hours from {previous_remaining}h to {remaining_hours}h",
                    timestamp=now,
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to update task {task.id}") from e
        self.db.refresh(task_db)
        logger.debug(f"Updated task {task.id}: {updated.title[:50]} ({new_status})")
        return task_db.to_pydantic()

    def delete(self, task_id: str) -> bool:
        """Delete a task together with all its time logs and burn-down entries."""
        try:
            task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
            if not task_db:
                return False
            logs_deleted = self.time_logs.delete_for_task(task_id)
            entries_deleted = self.remaining_hours.delete_for_task(task_id)
            self.db.delete(task_db)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to delete task {task_id}") from e
        logger.debug(f"Deleted task {task_id} with {logs_deleted} time logs and {entries_deleted} ledger entries")
        return True

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID (normalized)."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return normalize_task(task_db.to_pydantic()) if task_db else None

    def get_all(self, filters: Optional[TaskFilters] = None, include_all: bool = False) -> List[Task]:
        """Get tasks matching the filters, newest first.

        Completed, Abandoned and Archived tasks are left out unless
        ``include_all`` is set.
        """
        filters = filters or TaskFilters()
        q = self.db.query(TaskDB)
        if filters.status:
            q = q.filter(TaskDB.status == enum_to_value(filters.status))
        if filters.urgency:
            q = q.filter(TaskDB.urgency == enum_to_value(filters.urgency))
        if filters.project_id:
            q = q.filter(TaskDB.project_id == filters.project_id)
        if filters.due_on:
            q = q.filter(TaskDB.due_on == filters.due_on)
        if not include_all:
            q = q.filter(TaskDB.status.notin_(sorted(TERMINAL_STATUSES)))
        tasks_db = q.order_by(desc(TaskDB.created_at)).all()
        return [normalize_task(task_db.to_pydantic()) for task_db in tasks_db]

    def get_due_on(self, due_on: date) -> List[Task]:
        """Get open tasks due on a specific date."""
        return self.get_all(TaskFilters(due_on=due_on))

    def get_by_status(self, status) -> List[Task]:
        """Get tasks in a status (terminal statuses included)."""
        return self.get_all(TaskFilters(status=status), include_all=True)

    def get_by_project(self, project_id: str) -> List[Task]:
        """Get open tasks for a project."""
        return self.get_all(TaskFilters(project_id=project_id))

    def get_overdue(self, today: Optional[date] = None) -> List[Task]:
        """Get open tasks whose due date is before today."""
        today = today or date.today()
        return [task for task in self.get_all() if task.due_on and task.due_on < today]
