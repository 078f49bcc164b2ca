"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from fastapi import FastAPI
from batchsmith.config import get_settings
from batchsmith.api.v1 import jobs, health, tasks, metrics
from batchsmith.core.redis import close_redis
from batchsmith.observability.metrics import init_system_info
from batchsmith.observability.middleware import MetricsMiddleware
from batchsmith.services.task_registry import TaskRegistry, default_task_registry
from batchsmith.worker.generators import build_demo_registry
from batchsmith.worker.work_registry import WorkRegistry

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Release shared clients on shutdown."""
    try:
        yield
    finally:
        close_redis()


def create_app(
    task_registry: Optional[TaskRegistry] = None,
    work_registry: Optional[WorkRegistry] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        task_registry: Task catalogue (defaults to the funnel catalogue)
        work_registry: Work registry (defaults to demo generators for the catalogue)

    Returns:
        FastAPI: Configured FastAPI application
    """
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    task_registry = task_registry or default_task_registry()
    app.state.task_registry = task_registry
    app.state.work_registry = work_registry or build_demo_registry(task_registry)

    # Add middleware
    app.add_middleware(MetricsMiddleware)

    # Initialize metrics
    init_system_info(settings.APP_VERSION)

    # Include routers
    app.include_router(jobs.router, prefix=settings.API_V1_PREFIX, tags=["jobs"])
    app.include_router(tasks.router, prefix=settings.API_V1_PREFIX, tags=["tasks"])
    app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])
    app.include_router(metrics.router, prefix=settings.API_V1_PREFIX)

    return app


# Create app instance
app = create_app()
