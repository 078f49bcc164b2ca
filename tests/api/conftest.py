"""Fixtures for API tests."""
from unittest.mock import Mock
import pytest
from fastapi.testclient import TestClient
from batchsmith.api.deps import get_db, get_job_lock, get_policy_source, get_redis_client
from batchsmith.main import create_app
from batchsmith.services.job_lock import JobLock
from batchsmith.services.retry_policy import RetryPolicy, StaticRetryPolicySource
from batchsmith.worker.work_registry import WorkRegistry


@pytest.fixture
def redis_mock():
    """Redis stand-in that grants every lock."""
    redis = Mock()
    redis.set.return_value = True
    redis.eval.return_value = 1
    redis.ping.return_value = True
    return redis


@pytest.fixture
def work_outcomes():
    """
    Per-task behaviour for the test work registry.

    Tests set ``work_outcomes[name]`` to an exception to make that task fail.
    """
    return {}


@pytest.fixture
def work_registry(abc_registry, work_outcomes):
    registry = WorkRegistry()

    def make_work(task_name):
        async def work(job_id):
            outcome = work_outcomes.get(task_name)
            if isinstance(outcome, BaseException):
                raise outcome
            return {"job_id": job_id, "task_name": task_name}

        return work

    for task in abc_registry:
        registry.register_work(task.name, make_work(task.name))
    return registry


def override_dependencies(app, db_session, redis_mock):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = lambda: redis_mock
    app.dependency_overrides[get_job_lock] = lambda: JobLock(redis_mock)
    app.dependency_overrides[get_policy_source] = lambda: StaticRetryPolicySource(
        RetryPolicy(delays=(0, 0), max_attempts=3)
    )


@pytest.fixture
def client(db_session, redis_mock, abc_registry, work_registry):
    """
    Create FastAPI test client over the A/B/C catalogue.

    Database, Redis, job lock and retry policy are overridden so that
    generation runs without delays or a Redis server.
    """
    app = create_app(task_registry=abc_registry, work_registry=work_registry)
    override_dependencies(app, db_session, redis_mock)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def default_client(db_session, redis_mock):
    """FastAPI test client over the default catalogue and demo generators."""
    app = create_app()
    override_dependencies(app, db_session, redis_mock)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
