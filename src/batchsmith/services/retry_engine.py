"""Retry engine driving one task through its attempt budget."""
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional
from batchsmith.core.enums import TaskStatus
from batchsmith.core.exceptions import ImmediateFailureError, RetriesExhaustedError
from batchsmith.observability.metrics import (
    attempt_tracking_errors_total,
    task_attempt_duration_seconds,
    task_attempts_total,
    tasks_completed_total,
    tasks_failed_total,
)
from batchsmith.services.error_classifier import ErrorClassifier, should_fail_immediately
from batchsmith.services.retry_policy import RetryPolicy, RetryPolicySource
from batchsmith.services.task_store import TaskExecutionStore

logger = logging.getLogger(__name__)

WorkFunction = Callable[[], Awaitable[Any]]
SleepFunction = Callable[[float], Awaitable[Any]]


class RetryEngine:
    """
    Runs a unit of work with escalating delays between attempts.

    Every status change is written to the task execution store. On return
    the task is either COMPLETED or FAILED; it is never left IN_PROGRESS
    unless the coroutine itself is cancelled.
    """

    def __init__(
        self,
        store: TaskExecutionStore,
        policy_source: RetryPolicySource,
        classifier: ErrorClassifier = should_fail_immediately,
        sleep: SleepFunction = asyncio.sleep,
        strict_attempt_tracking: bool = False,
    ):
        """
        Initialize retry engine.

        Args:
            store: Task execution store
            policy_source: Source of per-job retry policies
            classifier: Predicate returning True for errors that must not be retried
            sleep: Awaitable sleep used between attempts
            strict_attempt_tracking: If True, failing to persist an attempt
                count aborts the task instead of being logged
        """
        self.store = store
        self.policy_source = policy_source
        self.classifier = classifier
        self.sleep = sleep
        self.strict_attempt_tracking = strict_attempt_tracking

    async def load_policy(self, job_id: str) -> RetryPolicy:
        """Load the retry policy for a job."""
        return await self.policy_source.load(job_id)

    async def execute_with_retry(
        self,
        job_id: str,
        task_id: str,
        task_name: str,
        work: WorkFunction,
        policy: Optional[RetryPolicy] = None,
    ) -> Any:
        """
        Execute a task's work function with retries.

        Args:
            job_id: Job identifier
            task_id: Task identifier
            task_name: Task name, used for logs and metrics
            work: Zero-argument coroutine function performing the task
            policy: Retry policy to use; loaded from the policy source if omitted

        Returns:
            Any: Value returned by the successful attempt

        Raises:
            ImmediateFailureError: If an error is classified as non-retryable
            RetriesExhaustedError: If the last allowed attempt fails
        """
        if policy is None:
            policy = await self.load_policy(job_id)
        max_attempts = policy.max_attempts

        logger.info(f"Starting task {task_id} ({task_name}) of job {job_id}")
        await self.store.set_status(job_id, task_id, TaskStatus.IN_PROGRESS)

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = policy.delay_before(attempt)
                logger.info(f"Waiting {delay}s before attempt {attempt}/{max_attempts} of task {task_id}")
                await self.sleep(delay)

            await self._record_attempt(job_id, task_id, attempt)
            task_attempts_total.labels(task_name=task_name).inc()

            logger.info(f"Attempt {attempt}/{max_attempts} for task {task_id} ({task_name})")
            started = time.perf_counter()
            try:
                result = await work()
            except Exception as e:
                task_attempt_duration_seconds.labels(
                    task_name=task_name, outcome="error"
                ).observe(time.perf_counter() - started)
                error_message = str(e) or type(e).__name__
                logger.warning(f"Attempt {attempt} failed for task {task_id}: {error_message}")

                if self.classifier(e):
                    logger.error(f"Immediate failure for task {task_id}, not retrying: {error_message}")
                    await self.store.set_status(
                        job_id, task_id, TaskStatus.FAILED, error_message
                    )
                    tasks_failed_total.labels(task_name=task_name, reason="immediate").inc()
                    raise ImmediateFailureError(
                        task_id,
                        attempt,
                        f"Task {task_id} failed immediately: {error_message}",
                    ) from e

                if attempt == max_attempts:
                    failure = f"Failed after {max_attempts} attempts: {error_message}"
                    logger.error(f"Task {task_id}: {failure}")
                    await self.store.set_status(job_id, task_id, TaskStatus.FAILED, failure)
                    tasks_failed_total.labels(task_name=task_name, reason="exhausted").inc()
                    raise RetriesExhaustedError(task_id, attempt, failure) from e

                logger.info(
                    f"Will retry task {task_id} in {policy.delay_before(attempt + 1)}s "
                    f"(attempt {attempt + 1}/{max_attempts})"
                )
                continue

            task_attempt_duration_seconds.labels(
                task_name=task_name, outcome="success"
            ).observe(time.perf_counter() - started)
            await self.store.set_status(job_id, task_id, TaskStatus.COMPLETED)
            tasks_completed_total.labels(task_name=task_name).inc()
            logger.info(f"Task {task_id} completed on attempt {attempt}")
            return result

        # max_attempts >= 1 is enforced by RetryPolicy, so the loop always returns or raises
        raise RetriesExhaustedError(
            task_id, max_attempts, f"Task {task_id} exhausted all retry attempts"
        )

    async def _record_attempt(self, job_id: str, task_id: str, attempt: int) -> None:
        try:
            await self.store.record_attempt(job_id, task_id, attempt)
        except Exception as e:
            if self.strict_attempt_tracking:
                raise
            attempt_tracking_errors_total.inc()
            logger.error(
                f"Error recording attempt {attempt} for task {task_id}: {e}",
                exc_info=True,
            )
