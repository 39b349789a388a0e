"""Operations exposed to the presentation layer.

Every method returns an ``OperationResult`` instead of raising, so a caller
can show feedback without handling tracker exceptions itself.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel
from sqlalchemy.orm import Session

from tasktracker.models.task import Task, TaskFilters, TaskStatus
from tasktracker.models.time_log import TimeLog
from tasktracker.database.repository import TaskRepository
from tasktracker.database.category_list_repository import (
    CategoryListRepository,
    DatabaseCategoryDirectory,
)
from tasktracker.engine.categories import CategoryDirectory, analyze_categories_in_time_logs
from tasktracker.engine.progress import calculate_task_progress, group_time_logs_by_task
from tasktracker.engine.velocity import calculate_personal_velocity, predict_task_hours
from tasktracker.errors import ErrorKind, NotFoundError, TrackerError

logger = logging.getLogger(__name__)


class OperationResult(BaseModel):
    """Outcome of a tracker operation."""
    success: bool
    error: Optional[ErrorKind] = None
    message: str = ""
    data: Any = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "OperationResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failed(cls, error: TrackerError) -> "OperationResult":
        return cls(success=False, error=error.kind, message=error.message)


class TrackerService:
    """Facade over the repositories and the pure engine functions."""

    def __init__(self, db: Session, directory: Optional[CategoryDirectory] = None):
        self.db = db
        self.tasks = TaskRepository(db)
        self.time_logs = self.tasks.time_logs
        self.remaining_hours = self.tasks.remaining_hours
        self.category_lists = CategoryListRepository(db)
        self.directory = directory or DatabaseCategoryDirectory(self.category_lists)

    def _run(self, operation: str, fn, *args, **kwargs) -> OperationResult:
        try:
            return OperationResult.ok(fn(*args, **kwargs))
        except TrackerError as e:
            logger.info(f"{operation} failed ({e.kind.value}): {e.message}")
            return OperationResult.failed(e)

    # Tasks

    def create_task(self, task: Task) -> OperationResult:
        return self._run("create_task", self.tasks.create, task)

    def update_task(self, task: Task, is_edit: bool = True) -> OperationResult:
        return self._run("update_task", self.tasks.update, task, is_edit)

    def delete_task(self, task_id: str) -> OperationResult:
        def _delete():
            if not self.tasks.delete(task_id):
                raise NotFoundError(f"Task {task_id} not found")
            return task_id

        return self._run("delete_task", _delete)

    def get_task(self, task_id: str) -> OperationResult:
        def _get():
            task = self.tasks.get(task_id)
            if task is None:
                raise NotFoundError(f"Task {task_id} not found")
            return task

        return self._run("get_task", _get)

    def get_tasks(self, filters: Optional[TaskFilters] = None, include_all: bool = False) -> OperationResult:
        return self._run("get_tasks", self.tasks.get_all, filters, include_all)

    def transition_task(self, task_id: str, new_status: TaskStatus) -> OperationResult:
        """Move a task to a new status, leaving its other fields as stored."""
        def _transition():
            task = self.tasks.get(task_id)
            if task is None:
                raise NotFoundError(f"Task {task_id} not found")
            return self.tasks.update(task.model_copy(update={"status": new_status}))

        return self._run("transition_task", _transition)

    # Time logs

    def save_time_log(self, log: TimeLog) -> OperationResult:
        return self._run("save_time_log", self.time_logs.create, log)

    def delete_time_log(self, log_id: str) -> OperationResult:
        """Delete a time log. The task's remaining hours are left alone."""
        def _delete():
            if not self.time_logs.delete(log_id):
                raise NotFoundError(f"Time log {log_id} not found")
            return log_id

        return self._run("delete_time_log", _delete)

    def get_time_logs(
        self,
        task_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> OperationResult:
        return self._run("get_time_logs", self.time_logs.query, task_id, start_date, end_date)

    def log_time(self, log: TimeLog) -> OperationResult:
        """Save a time log and burn the task's remaining hours down by it.

        The new remaining value is clamped at zero and rounded to the nearest
        quarter hour. Both writes share one transaction: a failed save leaves
        remaining hours untouched, and a failed ledger write drops the log.
        """
        return self._run("log_time", self.time_logs.create, log, decrement_remaining=True)

    def remove_time_log_and_restore(self, log_id: str) -> OperationResult:
        """Delete a time log and add its hours back to the task's remaining hours."""
        def _remove():
            if not self.time_logs.delete(log_id, restore_remaining=True):
                raise NotFoundError(f"Time log {log_id} not found")
            return log_id

        return self._run("remove_time_log_and_restore", _remove)

    # Remaining hours

    def update_remaining_hours(self, task_id: str, remaining_hours: float, note: str = "") -> OperationResult:
        def _update():
            changed = self.remaining_hours.update_remaining_hours(task_id, remaining_hours, note)
            return {"task_id": task_id, "remaining_hours": remaining_hours, "changed": changed}

        return self._run("update_remaining_hours", _update)

    def get_remaining_hours_history(self, task_id: str) -> OperationResult:
        return self._run("get_remaining_hours_history", self.remaining_hours.get_history, task_id)

    # Progress and categories

    def calculate_task_progress(self, task: Optional[Task]) -> OperationResult:
        def _progress():
            if task is None or not task.id:
                return calculate_task_progress(None, [])
            return calculate_task_progress(task, self.time_logs.query(task.id))

        return self._run("calculate_task_progress", _progress)

    def get_tasks_with_progress(
        self, filters: Optional[TaskFilters] = None, include_all: bool = False
    ) -> OperationResult:
        """Tasks paired with their progress, in listing order."""
        def _with_progress() -> List[Dict[str, Any]]:
            tasks = self.tasks.get_all(filters, include_all)
            logs_by_task = group_time_logs_by_task(self.time_logs.query())
            return [
                {"task": task, "progress": calculate_task_progress(task, logs_by_task.get(task.id, []))}
                for task in tasks
            ]

        return self._run("get_tasks_with_progress", _with_progress)

    def analyze_categories_in_time_logs(self, logs: List[TimeLog]) -> OperationResult:
        return self._run("analyze_categories_in_time_logs", analyze_categories_in_time_logs, logs, self.directory)

    # Velocity

    def predict_hours(self, task: Task) -> OperationResult:
        """Predict hours for a task's scale estimate from completed work."""
        def _predict():
            completed = self.tasks.get_by_status(TaskStatus.COMPLETED)
            logs_by_task = group_time_logs_by_task(self.time_logs.query())
            velocity = calculate_personal_velocity(completed, logs_by_task)
            return predict_task_hours(task.estimation_data, velocity)

        return self._run("predict_hours", _predict)
