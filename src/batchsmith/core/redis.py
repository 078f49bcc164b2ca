"""Redis connection management for Batchsmith."""
from typing import Optional
from redis import Redis
from batchsmith.config import get_settings

settings = get_settings()

# Synchronous Redis client (singleton)
_redis_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Get synchronous Redis client (singleton).

    Returns:
        Redis: Synchronous Redis client instance
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
        )
    return _redis_client


def close_redis() -> None:
    """
    Close synchronous Redis connection.

    Closes the connection and clears the singleton.
    Should be called on application shutdown.
    """
    global _redis_client
    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None
