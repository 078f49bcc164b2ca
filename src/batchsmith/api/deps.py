"""API dependencies for FastAPI."""
from typing import Generator, Annotated
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from redis import Redis
from batchsmith.config import get_settings
from batchsmith.core.database import SessionLocal
from batchsmith.core.redis import get_redis
from batchsmith.services.job_lock import JobLock
from batchsmith.services.orchestrator import Orchestrator
from batchsmith.services.progress import ProgressReporter
from batchsmith.services.retry_engine import RetryEngine
from batchsmith.services.retry_policy import RetryPolicySource, SettingsRetryPolicySource
from batchsmith.services.task_registry import TaskRegistry
from batchsmith.services.task_store import SqlTaskExecutionStore, TaskExecutionStore
from batchsmith.worker.work_registry import WorkRegistry


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_redis_client() -> Redis:
    """
    Dependency to get Redis client.

    Returns:
        Redis: Redis client instance
    """
    return get_redis()


def get_task_registry(request: Request) -> TaskRegistry:
    """Dependency to get the task catalogue installed on the app."""
    return request.app.state.task_registry


def get_work_registry(request: Request) -> WorkRegistry:
    """Dependency to get the work registry installed on the app."""
    return request.app.state.work_registry


def get_task_store() -> TaskExecutionStore:
    """Dependency to get the task execution store."""
    return SqlTaskExecutionStore(SessionLocal)


def get_policy_source() -> RetryPolicySource:
    """Dependency to get the retry policy source."""
    return SettingsRetryPolicySource(SessionLocal, get_settings())


def get_progress_reporter(
    store: Annotated[TaskExecutionStore, Depends(get_task_store)],
) -> ProgressReporter:
    """Dependency to get a progress reporter."""
    return ProgressReporter(store)


def get_orchestrator(
    store: Annotated[TaskExecutionStore, Depends(get_task_store)],
    policy_source: Annotated[RetryPolicySource, Depends(get_policy_source)],
    registry: Annotated[TaskRegistry, Depends(get_task_registry)],
) -> Orchestrator:
    """
    Dependency to get an orchestrator wired to the store and policy source.

    Returns:
        Orchestrator: Orchestrator instance
    """
    settings = get_settings()
    engine = RetryEngine(
        store,
        policy_source,
        strict_attempt_tracking=settings.STRICT_ATTEMPT_TRACKING,
    )
    return Orchestrator(store, engine, registry)


def get_job_lock(
    redis: Annotated[Redis, Depends(get_redis_client)],
) -> JobLock:
    """Dependency to get the orchestration job lock."""
    return JobLock(redis, ttl_seconds=get_settings().JOB_LOCK_TTL_SECONDS)
