"""Repository for TimeLog database operations."""

import logging
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.models.time_log import TimeLog
from tasktracker.database.models import TaskDB, TimeLogDB
from tasktracker.database.remaining_hours_repository import RemainingHoursRepository
from tasktracker.engine.hours import decremented_remaining, restored_remaining
from tasktracker.engine.progress import total_hours
from tasktracker.engine.validation import can_log_time_for_task, validate_time_log
from tasktracker.errors import (
    InvalidTaskStateError,
    NotFoundError,
    StoreFailureError,
    FieldValidationError,
)

logger = logging.getLogger(__name__)


class TimeLogRepository:
    """Repository for TimeLog database operations.

    Writes are gated on the owning task's status. Deleting a log never
    touches the task's remaining hours; giving those hours back is up to
    the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def create(self, log: TimeLog, decrement_remaining: bool = False) -> TimeLog:
        """Save a time log against a loggable task.

        With ``decrement_remaining`` the task's remaining hours are burned
        down by the logged hours (clamped at zero, rounded to the quarter
        hour) in the same transaction, so either both writes land or neither.

        Raises:
            FieldValidationError: Missing task id or hours <= 0
            NotFoundError: The task does not exist
            InvalidTaskStateError: The task is not Estimated or InProgress
            StoreFailureError: The write failed
        """
        if log.date_logged is None:
            log = log.model_copy(update={"date_logged": date.today()})

        errors = validate_time_log(log)
        if errors:
            logger.warning(f"Rejected time log for task {log.task_id}: {'; '.join(errors)}")
            raise FieldValidationError(errors)

        try:
            task_db = (
                self.db.query(TaskDB)
                .filter(TaskDB.id == log.task_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if not task_db:
                self.db.rollback()
                raise NotFoundError(f"Task {log.task_id} not found")
            if not can_log_time_for_task(task_db.to_pydantic()):
                self.db.rollback()
                logger.warning(f"Invalid task status for time log: task {log.task_id} is {task_db.status}")
                raise InvalidTaskStateError(
                    "Time can only be logged for tasks in Estimated or InProgress status."
                )

            log_db = TimeLogDB.from_pydantic(log)
            self.db.add(log_db)
            if decrement_remaining:
                self._set_remaining(
                    task_db,
                    decremented_remaining(task_db.remaining_hours or 0, log.hours),
                    f"Auto-decremented by {log.hours}h time log",
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create time log for task {log.task_id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to save time log for task {log.task_id}") from e
        self.db.refresh(log_db)
        logger.debug(f"Created time log {log_db.id}: {log.hours}h on task {log.task_id}")
        return log_db.to_pydantic()

    def get(self, log_id: str) -> Optional[TimeLog]:
        """Get time log by ID."""
        log_db = self.db.query(TimeLogDB).filter(TimeLogDB.id == log_id).first()
        return log_db.to_pydantic() if log_db else None

    def delete(self, log_id: str, restore_remaining: bool = False) -> bool:
        """Delete a time log by ID regardless of the task's status.

        Remaining hours are only given back when ``restore_remaining`` is set,
        and then in the same transaction as the delete.
        """
        try:
            log_db = self.db.query(TimeLogDB).filter(TimeLogDB.id == log_id).first()
            if not log_db:
                return False
            log = log_db.to_pydantic()
            if restore_remaining:
                task_db = (
                    self.db.query(TaskDB)
                    .filter(TaskDB.id == log.task_id)
                    .populate_existing()
                    .with_for_update()
                    .first()
                )
                if task_db:
                    self._set_remaining(
                        task_db,
                        restored_remaining(task_db.remaining_hours or 0, log.hours),
                        f"Restored {log.hours}h from deleted time log",
                    )
            self.db.delete(log_db)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete time log {log_id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to delete time log {log_id}") from e
        logger.debug(f"Deleted time log {log_id}")
        return True

    def _set_remaining(self, task_db: TaskDB, new_remaining_hours: float, note: str) -> None:
        # Stages the change and its ledger entry; the caller commits.
        old_remaining_hours = task_db.remaining_hours or 0
        if old_remaining_hours == new_remaining_hours:
            return
        now = datetime.utcnow()
        task_db.remaining_hours = new_remaining_hours
        task_db.updated_at = now
        RemainingHoursRepository(self.db).record(
            task_db.id, new_remaining_hours, old_remaining_hours, note, timestamp=now
        )

    def delete_for_task(self, task_id: str) -> int:
        """Stage deletion of every log for a task (caller commits)."""
        return (
            self.db.query(TimeLogDB)
            .filter(TimeLogDB.task_id == task_id)
            .delete(synchronize_session=False)
        )

    def query(
        self,
        task_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[TimeLog]:
        """Get time logs, optionally for one task and an inclusive date range.

        The date range applies only when BOTH bounds are given. Passing just
        one bound returns the unfiltered set.
        """
        q = self.db.query(TimeLogDB)
        if task_id:
            q = q.filter(TimeLogDB.task_id == task_id)
        if start_date and end_date:
            q = q.filter(TimeLogDB.date_logged >= start_date, TimeLogDB.date_logged <= end_date)
        logs_db = q.order_by(TimeLogDB.date_logged, TimeLogDB.created_at).all()
        return [log_db.to_pydantic() for log_db in logs_db]

    def total_hours_for_task(
        self,
        task_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> float:
        """Total hours logged for a task (same date-range rule as ``query``)."""
        return total_hours(self.query(task_id, start_date, end_date))
