"""Pytest fixtures and configuration for timewheel tests."""

import os

# Keep the app's module-level engine off the filesystem during tests.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from timewheel.database.database import Base
from timewheel.database.day_repository import DayRepository
from timewheel.database.template_repository import TemplateRepository
from timewheel.models.task import Day, Task, TaskFormData
from timewheel.models.task_factory import sequential_id_generator


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from timewheel.database import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def day_repository(db_session: Session):
    return DayRepository(db_session)


@pytest.fixture
def template_repository(db_session: Session):
    return TemplateRepository(db_session)


@pytest.fixture
def id_generator():
    """Deterministic task ids: task-1, task-2, ..."""
    return sequential_id_generator("task")


@pytest.fixture
def make_task():
    """Factory for Task records on a fixed date."""
    def _make(title, start_time, end_time, task_id=None, date="2025-01-15", **extra):
        return Task(
            id=task_id or f"{title.lower()}-{start_time}",
            date=date,
            title=title,
            start_time=start_time,
            end_time=end_time,
            category=extra.pop("category", "custom"),
            color=extra.pop("color", "#4CAF50"),
            **extra,
        )
    return _make


@pytest.fixture
def make_form():
    def _make(title, start_time, end_time, **extra):
        return TaskFormData(title=title, start_time=start_time, end_time=end_time, **extra)
    return _make


@pytest.fixture
def work_day(make_task):
    """A day with Work 09:00-13:00."""
    return Day(
        id="2025-01-15",
        name="Wednesday",
        date="2025-01-15",
        tasks=[make_task("Work", "09:00", "13:00", task_id="work")],
    )


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from timewheel.api.app import app
    from timewheel.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
