"""Shared pytest fixtures for all tests."""
import os
import pytest

# Set test database URL before importing anything else
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")

from batchsmith.core.database import Base, SessionLocal, engine, init_db  # noqa: E402
from batchsmith.services.task_registry import TaskDefinition, TaskRegistry  # noqa: E402
from tests.factories.task_factory import InMemoryTaskExecutionStore, RecordingSleep  # noqa: E402


@pytest.fixture
def test_engine():
    """
    Provide the application engine with a fresh schema.

    Tables are created before each test and dropped after it, so every
    test starts from an empty database.
    """
    init_db(engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine."""
    return SessionLocal


@pytest.fixture
def db_session(session_factory):
    """Create a database session for a test."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def memory_store():
    """In-memory task execution store."""
    return InMemoryTaskExecutionStore()


@pytest.fixture
def recording_sleep():
    """Sleep replacement that records requested delays without waiting."""
    return RecordingSleep()


@pytest.fixture
def abc_registry():
    """Three-task catalogue A, B, C."""
    return TaskRegistry(
        [
            TaskDefinition("1", "A", "Task A"),
            TaskDefinition("2", "B", "Task B"),
            TaskDefinition("3", "C", "Task C"),
        ]
    )
