"""Redis-backed single-flight lock for orchestration runs."""
import asyncio
import logging
import secrets
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator, Optional
from redis import Redis
from redis.exceptions import RedisError
from batchsmith.core.exceptions import JobLockedError

logger = logging.getLogger(__name__)

# Delete the key only if it still holds our token
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

# Reset the expiry only if the key still holds our token
EXTEND_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("pexpire", KEYS[1], ARGV[2])
else
    return 0
end
"""


class JobLock:
    """
    Prevents two orchestration runs for the same job from overlapping.

    The key expires after ``ttl_seconds`` so a crashed run cannot hold it
    forever. While ``hold`` is active a background task pushes the expiry
    forward every ``renew_interval`` seconds, so runs longer than the TTL
    keep the lock.
    """

    KEY_PREFIX = "batchsmith:lock:job:"

    def __init__(
        self,
        redis: Redis,
        ttl_seconds: float = 900,
        renew_interval: Optional[float] = None,
    ):
        """
        Initialize job lock.

        Args:
            redis: Redis client instance
            ttl_seconds: Lock expiry in seconds
            renew_interval: Seconds between expiry renewals (defaults to a third of the TTL)
        """
        self.redis = redis
        self.ttl_seconds = ttl_seconds
        self.renew_interval = renew_interval or ttl_seconds / 3

    def _key(self, job_id: str) -> str:
        return f"{self.KEY_PREFIX}{job_id}"

    @property
    def _ttl_ms(self) -> int:
        return int(self.ttl_seconds * 1000)

    def acquire(self, job_id: str) -> Optional[str]:
        """
        Try to take the lock for a job.

        Args:
            job_id: Job identifier

        Returns:
            Optional[str]: Lock token if acquired, None if already held
        """
        token = secrets.token_hex(16)
        acquired = self.redis.set(self._key(job_id), token, nx=True, px=self._ttl_ms)
        return token if acquired else None

    def extend(self, job_id: str, token: str) -> bool:
        """
        Reset the lock expiry to a full TTL if it is still held with ``token``.

        Returns:
            bool: True if the lock was extended
        """
        return bool(
            self.redis.eval(EXTEND_SCRIPT, 1, self._key(job_id), token, self._ttl_ms)
        )

    def release(self, job_id: str, token: str) -> bool:
        """
        Release the lock if it is still held with ``token``.

        Returns:
            bool: True if the lock was released
        """
        return bool(self.redis.eval(RELEASE_SCRIPT, 1, self._key(job_id), token))

    async def _keep_alive(self, job_id: str, token: str) -> None:
        while True:
            await asyncio.sleep(self.renew_interval)
            try:
                extended = self.extend(job_id, token)
            except RedisError as e:
                logger.warning(f"Could not extend lock for job {job_id}: {e}")
                continue
            if not extended:
                logger.error(f"Lock for job {job_id} was lost before the run finished")
                return

    @asynccontextmanager
    async def hold(self, job_id: str) -> AsyncIterator[str]:
        """
        Hold the lock for the duration of a block, renewing it as needed.

        Raises:
            JobLockedError: If another run holds the lock
        """
        token = self.acquire(job_id)
        if token is None:
            raise JobLockedError(f"Job {job_id} is already being orchestrated")

        renewer = asyncio.create_task(self._keep_alive(job_id, token))
        try:
            yield token
        finally:
            renewer.cancel()
            with suppress(asyncio.CancelledError):
                await renewer
            try:
                if not self.release(job_id, token):
                    logger.warning(f"Lock for job {job_id} expired before release")
            except RedisError as e:
                logger.warning(f"Could not release lock for job {job_id}: {e}")
