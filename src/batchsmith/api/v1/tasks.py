"""Task catalogue API endpoint."""
from typing import List
from fastapi import APIRouter, Depends
from batchsmith.api.deps import get_task_registry
from batchsmith.api.schemas.job import TaskDefinitionResponse
from batchsmith.api.schemas.response import StandardResponse, ResponseCodes
from batchsmith.services.task_registry import TaskRegistry

router = APIRouter()


@router.get("/tasks", response_model=StandardResponse[List[TaskDefinitionResponse]])
async def list_tasks(
    registry: TaskRegistry = Depends(get_task_registry),
) -> StandardResponse[List[TaskDefinitionResponse]]:
    """List the task catalogue in execution order."""
    return StandardResponse(
        data=[TaskDefinitionResponse.model_validate(task) for task in registry],
        code=ResponseCodes.CATALOGUE_RETRIEVED,
        httpStatus="OK",
        description="Task catalogue retrieved successfully",
    )
