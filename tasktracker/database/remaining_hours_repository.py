"""Repository for the remaining-hours (burn-down) ledger."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.models.remaining_hours import RemainingHoursEntry
from tasktracker.database.models import TaskDB, RemainingHoursEntryDB
from tasktracker.errors import FieldValidationError, NotFoundError, StoreFailureError

logger = logging.getLogger(__name__)


class RemainingHoursRepository:
    """Append-only ledger of changes to a task's remaining hours.

    ``record`` and ``delete_for_task`` only stage rows on the session so that
    other repositories can include them in their own transaction.
    ``update_remaining_hours`` is a complete operation and commits.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        task_id: str,
        remaining_hours: float,
        previous_remaining_hours: Optional[float],
        note: str,
        timestamp: Optional[datetime] = None,
    ) -> RemainingHoursEntryDB:
        """Stage a new ledger entry (caller commits)."""
        entry = RemainingHoursEntry(
            task_id=task_id,
            remaining_hours=remaining_hours,
            previous_remaining_hours=previous_remaining_hours,
            timestamp=timestamp or datetime.utcnow(),
            note=note,
        )
        entry_db = RemainingHoursEntryDB.from_pydantic(entry)
        self.db.add(entry_db)
        return entry_db

    def delete_for_task(self, task_id: str) -> int:
        """Stage deletion of every entry for a task (caller commits)."""
        return (
            self.db.query(RemainingHoursEntryDB)
            .filter(RemainingHoursEntryDB.task_id == task_id)
            .delete(synchronize_session=False)
        )

    def update_remaining_hours(self, task_id: str, new_remaining_hours: float, note: str = "") -> bool:
        """Set a task's remaining hours and append a ledger entry.

        The value is stored as given; clamping and quarter-hour rounding are
        the caller's job.

        Returns:
            True if the value changed, False if it already had that value

        Raises:
            FieldValidationError: If the value is missing or negative
            NotFoundError: If the task does not exist
            StoreFailureError: If the write fails (nothing is persisted)
        """
        if new_remaining_hours is None or new_remaining_hours < 0:
            logger.warning(f"Rejected remaining hours {new_remaining_hours} for task {task_id}")
            raise FieldValidationError(["Remaining hours must be 0 or greater"])

        try:
            task_db = (
                self.db.query(TaskDB)
                .filter(TaskDB.id == task_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if not task_db:
                self.db.rollback()
                raise NotFoundError(f"Task {task_id} not found")

            old_remaining_hours = task_db.remaining_hours or 0
            if old_remaining_hours == new_remaining_hours:
                self.db.rollback()
                logger.debug(f"Remaining hours for task {task_id} unchanged at {new_remaining_hours}h")
                return False

            now = datetime.utcnow()
            task_db.remaining_hours = new_remaining_hours
            task_db.updated_at = now
            self.record(
                task_id,
                new_remaining_hours,
                old_remaining_hours,
                note or f"Updated remaining hours from {old_remaining_hours}h to {new_remaining_hours}h",
                timestamp=now,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update remaining hours for task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreFailureError(f"Failed to update remaining hours for task {task_id}") from e
        logger.debug(f"Remaining hours for task {task_id}: {old_remaining_hours}h -> {new_remaining_hours}h")
        return True

    def get_history(self, task_id: str) -> List[RemainingHoursEntry]:
        """Get a task's ledger entries, oldest first."""
        entries_db = (
            self.db.query(RemainingHoursEntryDB)
            .filter(RemainingHoursEntryDB.task_id == task_id)
            .order_by(RemainingHoursEntryDB.timestamp)
            .all()
        )
        return [entry_db.to_pydantic() for entry_db in entries_db]
