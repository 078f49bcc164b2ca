"""Orchestrator running a whole job through the task catalogue."""
import logging
from typing import List, Mapping, Optional
from batchsmith.core.enums import TaskResultStatus, TaskStatus
from batchsmith.core.exceptions import MissingWorkFunctionError, TaskFailedError
from batchsmith.observability.metrics import orchestrations_total, tasks_skipped_total
from batchsmith.services.progress import ProgressReporter
from batchsmith.services.retry_engine import RetryEngine, WorkFunction
from batchsmith.services.task_registry import TaskRegistry
from batchsmith.services.task_store import TaskExecutionStore
from batchsmith.worker.models import JobResult, TaskResult

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Executes every catalogue task of a job, in order, one at a time.

    Completed tasks are skipped, so re-invoking a job resumes from its
    first unfinished task. The first terminal task failure stops the run
    and leaves later tasks pending.
    """

    def __init__(
        self,
        store: TaskExecutionStore,
        retry_engine: RetryEngine,
        registry: TaskRegistry,
        reporter: Optional[ProgressReporter] = None,
        fail_fast_on_missing: bool = False,
    ):
        """
        Initialize orchestrator.

        Args:
            store: Task execution store
            retry_engine: Retry engine running each task
            registry: Task catalogue, in execution order
            reporter: Progress reporter (defaults to one over ``store``)
            fail_fast_on_missing: If True, refuse to start a job whose work
                function map does not cover the whole catalogue
        """
        self.store = store
        self.retry_engine = retry_engine
        self.registry = registry
        self.reporter = reporter or ProgressReporter(store)
        self.fail_fast_on_missing = fail_fast_on_missing

    def find_missing(self, work_functions: Mapping[str, WorkFunction]) -> List[str]:
        """
        List catalogue task names with no work function.

        Args:
            work_functions: task name → work function

        Returns:
            List[str]: Missing names in catalogue order
        """
        return [task.name for task in self.registry if task.name not in work_functions]

    async def orchestrate(
        self, job_id: str, work_functions: Mapping[str, WorkFunction]
    ) -> JobResult:
        """
        Run a job end to end.

        Args:
            job_id: Job identifier
            work_functions: task name → zero-argument coroutine function

        Returns:
            JobResult: Per-task results, final progress and overall success

        Raises:
            MissingWorkFunctionError: If fail_fast_on_missing is set and the
                map does not cover the catalogue
        """
        missing = self.find_missing(work_functions)
        if missing:
            logger.warning(f"Job {job_id}: no work function registered for {', '.join(missing)}")
            if self.fail_fast_on_missing:
                raise MissingWorkFunctionError(missing)

        logger.info(f"Starting orchestration for job {job_id} ({len(self.registry)} tasks)")

        # Policy is fixed for the whole run even if the backing settings change
        policy = await self.retry_engine.load_policy(job_id)

        await self.store.initialize(job_id, self.registry.definitions)
        statuses = await self.store.get_statuses(job_id)

        results: List[TaskResult] = []
        total = len(self.registry)

        for index, task in enumerate(self.registry, start=1):
            entry = statuses.get(task.id)
            current_status = entry.status if entry else TaskStatus.PENDING

            if current_status == TaskStatus.COMPLETED:
                logger.info(f"Task {task.id} ({task.name}) already completed, skipping")
                tasks_skipped_total.labels(task_name=task.name).inc()
                results.append(
                    TaskResult(
                        task_id=task.id,
                        task_name=task.name,
                        status=TaskResultStatus.SKIPPED,
                        reason="already_completed",
                    )
                )
                continue

            work = work_functions.get(task.name)
            if work is None:
                logger.error(f"No work function found for task {task.name}")
                results.append(
                    TaskResult(
                        task_id=task.id,
                        task_name=task.name,
                        status=TaskResultStatus.ERROR,
                        error="No work function registered",
                    )
                )
                continue

            logger.info(f"Executing task {index}/{total}: {task.description}")
            try:
                result = await self.retry_engine.execute_with_retry(
                    job_id, task.id, task.name, work, policy=policy
                )
            except TaskFailedError as e:
                logger.error(f"Task {task.id} failed, stopping orchestration: {e.message}")
                results.append(
                    TaskResult(
                        task_id=task.id,
                        task_name=task.name,
                        status=TaskResultStatus.FAILED,
                        error=e.message,
                    )
                )
                break

            results.append(
                TaskResult(
                    task_id=task.id,
                    task_name=task.name,
                    status=TaskResultStatus.COMPLETED,
                    result=result,
                )
            )
            progress = await self.reporter.report(job_id)
            logger.info(
                f"Job {job_id} progress: {progress.completed}/{progress.total} ({progress.percentage}%)"
            )

        final_progress = await self.reporter.report(job_id)
        success = final_progress.failed == 0
        orchestrations_total.labels(outcome="success" if success else "failed").inc()
        logger.info(
            f"Orchestration complete for job {job_id}: "
            f"{final_progress.completed}/{final_progress.total} completed, "
            f"{final_progress.failed} failed"
        )

        return JobResult(success=success, progress=final_progress, results=results)
