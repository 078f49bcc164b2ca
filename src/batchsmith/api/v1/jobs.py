"""Job generation and progress API endpoints."""
import logging
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from redis.exceptions import RedisError
from sqlalchemy.orm import Session
from batchsmith.api.deps import (
    get_db,
    get_job_lock,
    get_orchestrator,
    get_progress_reporter,
    get_work_registry,
)
from batchsmith.api.schemas.job import (
    JobProgressResponse,
    JobResultResponse,
    ProgressResponse,
    TaskExecutionResponse,
    TaskResultResponse,
)
from batchsmith.api.schemas.response import StandardResponse, ResponseCodes
from batchsmith.core.exceptions import JobLockedError
from batchsmith.repositories.task_execution_repository import TaskExecutionRepository
from batchsmith.services.job_lock import JobLock
from batchsmith.services.orchestrator import Orchestrator
from batchsmith.services.progress import ProgressReporter
from batchsmith.worker.work_registry import WorkRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/jobs/{job_id}/generate", response_model=StandardResponse[JobResultResponse])
async def generate_job(
    job_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    work_registry: WorkRegistry = Depends(get_work_registry),
    job_lock: JobLock = Depends(get_job_lock),
) -> StandardResponse[JobResultResponse]:
    """
    Run (or resume) generation for a job.

    - Skips tasks completed by earlier runs
    - Stops at the first task that fails terminally
    - Safe to call again after a failure; it resumes rather than restarts
    """
    try:
        async with job_lock.hold(job_id):
            job_result = await orchestrator.orchestrate(job_id, work_registry.bind(job_id))
    except JobLockedError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "data": None,
                "code": ResponseCodes.JOB_LOCKED,
                "httpStatus": "CONFLICT",
                "description": str(e)
            },
        )
    except RedisError as e:
        logger.error(f"Job lock unavailable for job {job_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "data": None,
                "code": ResponseCodes.LOCK_UNAVAILABLE,
                "httpStatus": "SERVICE_UNAVAILABLE",
                "description": "Job lock unavailable"
            },
        )

    response = JobResultResponse(
        job_id=job_id,
        success=job_result.success,
        progress=ProgressResponse.model_validate(job_result.progress),
        results=[TaskResultResponse.model_validate(r) for r in job_result.results],
    )
    if job_result.success:
        code, description = ResponseCodes.JOB_GENERATED, "Job content generated successfully"
    else:
        code, description = ResponseCodes.JOB_GENERATED_WITH_ERRORS, "Generation completed with errors"

    return StandardResponse(
        data=response,
        code=code,
        httpStatus="OK",
        description=description,
    )


@router.get("/jobs/{job_id}/progress", response_model=StandardResponse[JobProgressResponse])
async def get_job_progress(
    job_id: str,
    reporter: ProgressReporter = Depends(get_progress_reporter),
) -> StandardResponse[JobProgressResponse]:
    """
    Get generation progress for a job.

    Cheap to poll; an unknown job reports zero counts.
    """
    progress = await reporter.report(job_id)
    return StandardResponse(
        data=JobProgressResponse(
            job_id=job_id,
            progress=ProgressResponse.model_validate(progress),
            timestamp=datetime.now(timezone.utc),
        ),
        code=ResponseCodes.JOB_PROGRESS_RETRIEVED,
        httpStatus="OK",
        description="Job progress retrieved successfully",
    )


@router.get("/jobs/{job_id}/tasks", response_model=StandardResponse[List[TaskExecutionResponse]])
def get_job_tasks(
    job_id: str,
    db: Session = Depends(get_db),
) -> StandardResponse[List[TaskExecutionResponse]]:
    """
    Get per-task execution records for a job, ordered by task id.
    """
    records = TaskExecutionRepository(db).list_for_job(job_id)
    return StandardResponse(
        data=[TaskExecutionResponse.model_validate(record) for record in records],
        code=ResponseCodes.JOB_TASKS_RETRIEVED,
        httpStatus="OK",
        description="Job tasks retrieved successfully",
    )
