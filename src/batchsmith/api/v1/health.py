"""Health check API endpoint."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from pydantic import BaseModel
from batchsmith.api.deps import get_db, get_redis_client
from batchsmith.api.schemas.response import StandardResponse, ResponseCodes

router = APIRouter()


class HealthData(BaseModel):
    """Health check data model."""

    status: str
    database: str
    redis: str


@router.get("/health", response_model=StandardResponse[HealthData])
async def health_check(
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis_client),
) -> StandardResponse[HealthData]:
    """
    Health check endpoint.

    Returns:
        StandardResponse: Service health status including database and Redis
    """
    # Check database connection
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError:
        db_status = "disconnected"

    # Check Redis connection
    try:
        redis.ping()
        redis_status = "connected"
    except RedisError:
        redis_status = "disconnected"

    # Redis only guards concurrent triggers; the database is required
    overall_status = "healthy" if db_status == "connected" else "unhealthy"
    if overall_status == "healthy" and redis_status != "connected":
        overall_status = "degraded"

    return StandardResponse(
        data=HealthData(status=overall_status, database=db_status, redis=redis_status),
        code=ResponseCodes.HEALTH_OK,
        httpStatus="OK",
        description="Health check completed successfully",
    )
