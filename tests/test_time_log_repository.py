"""Tests for TimeLogRepository: status gating, validation and date filtering."""

import pytest
from datetime import date

from tasktracker.errors import FieldValidationError, InvalidTaskStateError, NotFoundError
from tasktracker.engine.validation import can_log_time_for_task, validate_time_log
from tasktracker.models.task import Task, TaskStatus
from tasktracker.models.time_log import TimeLog


class TestTimeLogGating:
    """Time may only be logged against Estimated or InProgress tasks."""

    def test_ready_task_then_estimated(self, task_repository, time_log_repository, sample_task, make_log):
        """Ready rejects the log, Estimated accepts it."""
        created = task_repository.create(sample_task)

        with pytest.raises(InvalidTaskStateError):
            time_log_repository.create(make_log(created.id, hours=2))
        assert time_log_repository.query(created.id) == []

        task_repository.update(created.model_copy(update={"status": TaskStatus.ESTIMATED}))
        saved = time_log_repository.create(make_log(created.id, hours=2))

        assert saved.id is not None
        assert saved.hours == 2
        assert len(time_log_repository.query(created.id)) == 1

    @pytest.mark.parametrize("status", [
        TaskStatus.READY,
        TaskStatus.BLOCKED,
        TaskStatus.BACKBURNER,
        TaskStatus.ON_HOLD,
        TaskStatus.COMPLETED,
        TaskStatus.ABANDONED,
        TaskStatus.ARCHIVED,
    ])
    def test_non_loggable_statuses(self, task_repository, time_log_repository, sample_task_base, make_log, status):
        created = task_repository.create(Task(**{**sample_task_base, "status": status}))

        with pytest.raises(InvalidTaskStateError):
            time_log_repository.create(make_log(created.id))
        assert time_log_repository.query(created.id) == []

    def test_in_progress_is_loggable(self, task_repository, time_log_repository, sample_task_base, make_log):
        created = task_repository.create(Task(**{**sample_task_base, "status": TaskStatus.IN_PROGRESS}))

        assert time_log_repository.create(make_log(created.id, hours=0.5)).hours == 0.5

    def test_missing_task(self, time_log_repository, make_log):
        with pytest.raises(NotFoundError):
            time_log_repository.create(make_log("nonexistent-id"))

    def test_can_log_time_for_task(self, sample_task_base):
        assert can_log_time_for_task(Task(**{**sample_task_base, "status": TaskStatus.ESTIMATED})) is True
        assert can_log_time_for_task(Task(**{**sample_task_base, "status": TaskStatus.BLOCKED})) is False
        assert can_log_time_for_task(None) is False


class TestTimeLogValidation:
    """Test required fields."""

    @pytest.mark.parametrize("hours", [0, -1.5])
    def test_hours_must_be_positive(self, estimated_task, time_log_repository, make_log, hours):
        with pytest.raises(FieldValidationError) as exc_info:
            time_log_repository.create(make_log(estimated_task.id, hours=hours))

        assert exc_info.value.errors == ["Hours must be greater than 0"]
        assert time_log_repository.query(estimated_task.id) == []

    def test_task_id_required(self, time_log_repository):
        with pytest.raises(FieldValidationError) as exc_info:
            time_log_repository.create(TimeLog(hours=1, date_logged=date(2026, 3, 10)))

        assert "Task ID is required" in exc_info.value.errors

    def test_date_defaults_to_today(self, estimated_task, time_log_repository):
        saved = time_log_repository.create(TimeLog(task_id=estimated_task.id, hours=1))

        assert saved.date_logged == date.today()

    def test_validate_time_log_collects_every_problem(self):
        errors = validate_time_log(TimeLog(hours=0))

        assert errors == ["Task ID is required", "Hours must be greater than 0", "Date logged is required"]


class TestTimeLogDelete:
    """Deleting a log is unconditional and never touches remaining hours."""

    def test_delete_leaves_remaining_hours(self, task_repository, estimated_task, time_log_repository, make_log):
        saved = time_log_repository.create(make_log(estimated_task.id, hours=3))

        assert time_log_repository.delete(saved.id) is True

        assert time_log_repository.get(saved.id) is None
        assert task_repository.get(estimated_task.id).remaining_hours == 10

    def test_delete_after_task_left_loggable_status(self, task_repository, estimated_task, time_log_repository,
                                                    make_log):
        saved = time_log_repository.create(make_log(estimated_task.id))
        task_repository.update(estimated_task.model_copy(update={"status": TaskStatus.ABANDONED}))

        assert time_log_repository.delete(saved.id) is True

    def test_delete_missing_log(self, time_log_repository):
        assert time_log_repository.delete("nonexistent-id") is False


class TestTimeLogRemainingHours:
    """Burn-down changes written in the same transaction as the log."""

    def test_create_with_decrement(self, task_repository, estimated_task, time_log_repository, make_log):
        time_log_repository.create(make_log(estimated_task.id, hours=2.6), decrement_remaining=True)

        assert task_repository.get(estimated_task.id).remaining_hours == 7.5
        history = task_repository.remaining_hours.get_history(estimated_task.id)
        assert history[-1].previous_remaining_hours == 10
        assert history[-1].note == "Auto-decremented by 2.6h time log"

    def test_rejected_log_does_not_decrement(self, task_repository, sample_task, time_log_repository, make_log):
        created = task_repository.create(sample_task.model_copy(update={"estimate": 4}))

        with pytest.raises(InvalidTaskStateError):
            time_log_repository.create(make_log(created.id), decrement_remaining=True)

        assert task_repository.get(created.id).remaining_hours == 4

    def test_delete_with_restore(self, task_repository, estimated_task, time_log_repository, make_log):
        saved = time_log_repository.create(make_log(estimated_task.id, hours=3), decrement_remaining=True)

        assert time_log_repository.delete(saved.id, restore_remaining=True) is True

        assert task_repository.get(estimated_task.id).remaining_hours == 10
        notes = [entry.note for entry in task_repository.remaining_hours.get_history(estimated_task.id)]
        assert notes[-1] == "Restored 3.0h from deleted time log"


class TestTimeLogQuery:
    """Test time log queries and the both-bounds date filter."""

    @pytest.fixture
    def logged_task(self, estimated_task, time_log_repository, make_log):
        for day in (1, 5, 9):
            time_log_repository.create(make_log(estimated_task.id, hours=day / 2, date_logged=date(2026, 3, day)))
        return estimated_task

    def test_both_bounds_filter_inclusively(self, logged_task, time_log_repository):
        logs = time_log_repository.query(logged_task.id, date(2026, 3, 5), date(2026, 3, 9))

        assert [log.date_logged for log in logs] == [date(2026, 3, 5), date(2026, 3, 9)]

    @pytest.mark.parametrize("start_date,end_date", [
        (date(2026, 3, 5), None),
        (None, date(2026, 3, 5)),
    ])
    def test_single_bound_returns_unfiltered(self, logged_task, time_log_repository, start_date, end_date):
        logs = time_log_repository.query(logged_task.id, start_date, end_date)

        assert len(logs) == 3

    def test_results_ordered_by_date(self, logged_task, time_log_repository):
        logs = time_log_repository.query(logged_task.id)

        assert [log.date_logged.day for log in logs] == [1, 5, 9]

    def test_query_across_tasks(self, task_repository, logged_task, time_log_repository, sample_task_base, make_log):
        other = task_repository.create(Task(**{**sample_task_base, "id": "other", "status": TaskStatus.IN_PROGRESS}))
        time_log_repository.create(make_log(other.id))

        assert len(time_log_repository.query()) == 4
        assert len(time_log_repository.query(other.id)) == 1

    def test_total_hours_for_task(self, logged_task, time_log_repository):
        assert time_log_repository.total_hours_for_task(logged_task.id) == 7.5
        assert time_log_repository.total_hours_for_task(logged_task.id, date(2026, 3, 1), date(2026, 3, 5)) == 3.0
