"""Per-job retry policy and the sources it is loaded from."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple
from sqlalchemy.orm import Session
from batchsmith.config import Settings, get_settings
from batchsmith.repositories.app_setting_repository import (
    AppSettingRepository,
    MAX_RETRY_ATTEMPTS_KEY,
    retry_delay_key,
)

logger = logging.getLogger(__name__)

DEFAULT_RETRY_DELAYS: Tuple[float, ...] = (5, 30, 120, 300, 300, 300)
DEFAULT_MAX_ATTEMPTS = 7
# Wait used for any attempt beyond the configured delays
DEFAULT_RETRY_DELAY = 300.0


@dataclass(frozen=True)
class RetryPolicy:
    """
    Inter-attempt delays (seconds) and attempt budget for one job.

    ``delays[0]`` is the wait before attempt 2; attempt 1 never waits.
    """

    delays: Tuple[float, ...] = DEFAULT_RETRY_DELAYS
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self):
        object.__setattr__(self, "delays", tuple(float(d) for d in self.delays))
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if any(delay < 0 for delay in self.delays):
            raise ValueError("Retry delays must be non-negative")

    def delay_before(self, attempt: int) -> float:
        """
        Seconds to wait before the given attempt number.

        Args:
            attempt: 1-based attempt number

        Returns:
            float: Delay in seconds (0 for the first attempt)
        """
        if attempt <= 1:
            return 0.0
        index = attempt - 2
        if index < len(self.delays):
            return self.delays[index]
        return DEFAULT_RETRY_DELAY

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryPolicy":
        """Build the fallback policy from application settings."""
        return cls(delays=tuple(settings.RETRY_DELAYS), max_attempts=settings.MAX_RETRY_ATTEMPTS)


class RetryPolicySource(Protocol):
    """Supplies the retry policy for a job."""

    async def load(self, job_id: str) -> RetryPolicy:
        ...


class StaticRetryPolicySource:
    """Returns the same policy for every job."""

    def __init__(self, policy: Optional[RetryPolicy] = None):
        self.policy = policy or RetryPolicy()

    async def load(self, job_id: str) -> RetryPolicy:
        return self.policy


class SettingsRetryPolicySource:
    """
    Loads the retry policy from the ``app_settings`` table.

    Keys: ``retry_attempt_<n>_delay`` for n = 2..max and
    ``max_retry_attempts``. Missing or malformed keys fall back to the
    configured defaults; an unreachable database falls back entirely.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: Optional[Settings] = None,
    ):
        """
        Initialize policy source.

        Args:
            session_factory: Callable returning a new SQLAlchemy session
            settings: Settings providing fallback defaults
        """
        self.session_factory = session_factory
        self.settings = settings or get_settings()

    def _read_settings(self) -> Dict[str, str]:
        session = self.session_factory()
        try:
            return AppSettingRepository(session).get_retry_settings()
        finally:
            session.close()

    async def load(self, job_id: str) -> RetryPolicy:
        """
        Load the policy for a job.

        Args:
            job_id: Job identifier

        Returns:
            RetryPolicy: Stored policy, or defaults if it cannot be read
        """
        fallback = RetryPolicy.from_settings(self.settings)
        try:
            values = await asyncio.to_thread(self._read_settings)
        except Exception as e:
            logger.error(
                f"Error loading retry settings for job {job_id}, using defaults: {e}",
                exc_info=True,
            )
            return fallback

        policy = self.build_policy(values, fallback)
        logger.info(
            f"Loaded retry settings for job {job_id}: "
            f"delays={list(policy.delays)}, max_attempts={policy.max_attempts}"
        )
        return policy

    @staticmethod
    def build_policy(values: Dict[str, str], fallback: RetryPolicy) -> RetryPolicy:
        """
        Build a policy from raw setting values.

        Args:
            values: Raw key/value pairs from app_settings
            fallback: Policy supplying values for missing keys

        Returns:
            RetryPolicy: Merged policy
        """
        max_attempts = _parse_number(values, MAX_RETRY_ATTEMPTS_KEY, int)
        if max_attempts is None or max_attempts < 1:
            max_attempts = fallback.max_attempts

        delays = []
        for attempt in range(2, max_attempts + 1):
            delay = _parse_number(values, retry_delay_key(attempt), float)
            if delay is None or delay < 0:
                delay = fallback.delay_before(attempt)
            delays.append(delay)

        return RetryPolicy(delays=tuple(delays), max_attempts=max_attempts)


def _parse_number(values: Dict[str, str], key: str, cast: Callable):
    raw = values.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring malformed retry setting {key}={raw!r}")
        return None

