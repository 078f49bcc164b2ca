"""Pydantic schemas for job generation API."""
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel
from batchsmith.core.enums import TaskResultStatus, TaskStatus


class ProgressResponse(BaseModel):
    """Aggregate task counts for a job."""

    total: int
    completed: int
    in_progress: int
    failed: int
    pending: int
    percentage: int

    model_config = {"from_attributes": True}


class JobProgressResponse(BaseModel):
    """Progress polling response."""

    job_id: str
    progress: ProgressResponse
    timestamp: datetime


class TaskResultResponse(BaseModel):
    """Outcome of one task in an orchestration run."""

    task_id: str
    task_name: str
    status: TaskResultStatus
    result: Optional[Any] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    model_config = {"from_attributes": True}


class JobResultResponse(BaseModel):
    """Orchestration run response."""

    job_id: str
    success: bool
    progress: ProgressResponse
    results: List[TaskResultResponse]

    model_config = {"from_attributes": True}


class TaskExecutionResponse(BaseModel):
    """Persisted execution record of one task."""

    task_id: str
    task_name: str
    status: TaskStatus
    attempt_count: int
    last_attempt_at: Optional[datetime]
    completed_at: Optional[datetime]
    error_message: Optional[str]

    model_config = {
        "from_attributes": True,  # Pydantic v2: allow ORM model conversion
    }


class TaskDefinitionResponse(BaseModel):
    """Catalogue entry."""

    id: str
    name: str
    description: str

    model_config = {"from_attributes": True}
