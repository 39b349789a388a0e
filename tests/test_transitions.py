"""Tests for the status state machine and the status history append rule."""

import pytest
from datetime import datetime, timedelta

from tasktracker.engine.transitions import (
    STATE_TRANSITIONS,
    allowed_transitions,
    append_status_event,
    is_valid_transition,
    transition_note,
)
from tasktracker.models.task import StatusEvent, TaskStatus


class TestTransitionTable:
    """Test the transition table itself."""

    def test_every_status_has_an_entry(self):
        assert set(STATE_TRANSITIONS) == {status.value for status in TaskStatus}

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            STATE_TRANSITIONS["Ready"] = frozenset()

    def test_archived_is_absorbing(self):
        assert allowed_transitions(TaskStatus.ARCHIVED) == frozenset()

    def test_terminal_statuses_lead_only_to_archive(self):
        assert allowed_transitions(TaskStatus.COMPLETED) == frozenset({"Abandoned", "Archived"})
        assert allowed_transitions(TaskStatus.ABANDONED) == frozenset({"Archived"})

    def test_unknown_status_has_no_transitions(self):
        assert allowed_transitions("Someday") == frozenset()


class TestIsValidTransition:
    """Test is_valid_transition."""

    @pytest.mark.parametrize("from_status,to_status", [
        (TaskStatus.READY, TaskStatus.ESTIMATED),
        (TaskStatus.READY, TaskStatus.IN_PROGRESS),
        (TaskStatus.ESTIMATED, TaskStatus.IN_PROGRESS),
        (TaskStatus.ESTIMATED, TaskStatus.ARCHIVED),
        (TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED),
        (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
        (TaskStatus.BLOCKED, TaskStatus.IN_PROGRESS),
        (TaskStatus.BACKBURNER, TaskStatus.ON_HOLD),
        (TaskStatus.ON_HOLD, TaskStatus.IN_PROGRESS),
        (TaskStatus.COMPLETED, TaskStatus.ARCHIVED),
    ])
    def test_allowed(self, from_status, to_status):
        assert is_valid_transition(from_status, to_status) is True

    @pytest.mark.parametrize("from_status,to_status", [
        (TaskStatus.READY, TaskStatus.COMPLETED),
        (TaskStatus.READY, TaskStatus.BLOCKED),
        (TaskStatus.ESTIMATED, TaskStatus.READY),
        (TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS),
        (TaskStatus.ARCHIVED, TaskStatus.IN_PROGRESS),
        (TaskStatus.ABANDONED, TaskStatus.READY),
        (TaskStatus.ON_HOLD, TaskStatus.BLOCKED),
    ])
    def test_rejected(self, from_status, to_status):
        assert is_valid_transition(from_status, to_status) is False

    def test_same_status_is_always_valid(self):
        for status in TaskStatus:
            assert is_valid_transition(status, status) is True

    def test_accepts_plain_strings(self):
        assert is_valid_transition("Ready", "Estimated") is True
        assert is_valid_transition("Ready", "Completed") is False

    @pytest.mark.parametrize("from_status,to_status", [
        (None, "Ready"),
        ("Ready", None),
        ("", "Ready"),
        ("Ready", ""),
    ])
    def test_missing_input_is_invalid(self, from_status, to_status):
        assert is_valid_transition(from_status, to_status) is False


class TestAppendStatusEvent:
    """Test the history append rule."""

    def test_transition_note_format(self):
        assert transition_note(TaskStatus.READY, TaskStatus.ESTIMATED) == "Ready => Estimated"

    def test_append_returns_new_list(self):
        now = datetime(2026, 3, 1, 9, 0)
        history = [StatusEvent(status=TaskStatus.READY, timestamp=now, note="Task created")]

        updated = append_status_event(history, TaskStatus.ESTIMATED, "Ready => Estimated", now=now + timedelta(hours=1))

        assert len(history) == 1
        assert len(updated) == 2
        assert updated[0] == history[0]
        assert updated[1].status == "Estimated"
        assert updated[1].note == "Ready => Estimated"

    def test_timestamps_never_go_backwards(self):
        later = datetime(2026, 3, 2, 12, 0)
        history = [StatusEvent(status=TaskStatus.READY, timestamp=later, note="")]

        updated = append_status_event(history, TaskStatus.ESTIMATED, "", now=later - timedelta(days=1))

        assert updated[1].timestamp == later

    def test_events_are_frozen(self):
        event = StatusEvent(status=TaskStatus.READY, timestamp=datetime(2026, 3, 1), note="")
        with pytest.raises(Exception):
            event.note = "changed"
