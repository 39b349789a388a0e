"""Pytest fixtures and configuration for task time tracker tests."""

import os

# Keep the app's module-level engine off the local database file.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import date
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from tasktracker.database.database import Base, get_db
from tasktracker.database.repository import TaskRepository
from tasktracker.database.time_log_repository import TimeLogRepository
from tasktracker.database.remaining_hours_repository import RemainingHoursRepository
from tasktracker.database.category_list_repository import CategoryListRepository
from tasktracker.models.task import Task, TaskStatus, Level
from tasktracker.models.time_log import TimeLog
from tasktracker.services.tracker import TrackerService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from tasktracker.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def time_log_repository(db_session: Session):
    """Create a TimeLogRepository instance for testing."""
    return TimeLogRepository(db_session)


@pytest.fixture
def remaining_hours_repository(db_session: Session):
    """Create a RemainingHoursRepository instance for testing."""
    return RemainingHoursRepository(db_session)


@pytest.fixture
def category_list_repository(db_session: Session):
    """Create a CategoryListRepository instance for testing."""
    return CategoryListRepository(db_session)


@pytest.fixture
def tracker_service(db_session: Session):
    """Create a TrackerService bound to the test session."""
    return TrackerService(db_session)


@pytest.fixture
def sample_task_base():
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "title": "Test Task",
        "description": "Test description",
        "status": TaskStatus.READY,
        "urgency": Level.MED,
        "importance": Level.MED,
        "estimate": None,
        "remaining_hours": None,
        "due_on": None,
        "project_id": None,
        "phase_key": None,
        "category_lists": [],
    }


@pytest.fixture
def sample_task(sample_task_base):
    """Create a sample Task object for testing."""
    return Task(**sample_task_base)


@pytest.fixture
def estimated_task(task_repository, sample_task_base):
    """A persisted task moved to Estimated with a 10h estimate."""
    created = task_repository.create(Task(**{**sample_task_base, "estimate": 10}))
    return task_repository.update(created.model_copy(update={"status": TaskStatus.ESTIMATED}))


@pytest.fixture
def make_log():
    """Factory for unsaved time logs."""
    def _make_log(task_id, hours=1.0, date_logged=None, category_key=None, notes=None):
        return TimeLog(
            task_id=task_id,
            hours=hours,
            date_logged=date_logged or date(2026, 3, 10),
            category_key=category_key,
            notes=notes,
        )
    return _make_log


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from tasktracker.api.app import app

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
