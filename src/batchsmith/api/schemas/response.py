"""Standard API response schemas."""
from typing import Any, Optional, Generic, TypeVar
from pydantic import BaseModel, Field

T = TypeVar('T')


class StandardResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T = Field(..., description="Response data")
    code: str = Field(..., description="Response code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Response description")

    model_config = {"from_attributes": True}


class ErrorResponse(BaseModel):
    """Standard error response."""

    data: Optional[Any] = Field(None, description="Error details")
    code: str = Field(..., description="Error code")
    httpStatus: str = Field(..., description="HTTP status text")
    description: str = Field(..., description="Error description")

    model_config = {"from_attributes": True}


# Response codes
class ResponseCodes:
    """Standard response codes."""

    # Success codes (2xx)
    JOB_GENERATED = "JOB_0001"
    JOB_PROGRESS_RETRIEVED = "JOB_0002"
    JOB_TASKS_RETRIEVED = "JOB_0003"
    JOB_GENERATED_WITH_ERRORS = "JOB_0004"

    CATALOGUE_RETRIEVED = "TASK_0001"

    HEALTH_OK = "HEALTH_0001"

    # Error codes (4xx, 5xx)
    JOB_LOCKED = "JOB_4001"
    LOCK_UNAVAILABLE = "JOB_5031"

    VALIDATION_ERROR = "ERR_4001"
    INTERNAL_ERROR = "ERR_5001"
