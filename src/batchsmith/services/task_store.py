"""Task execution store: async access to per-(job, task) records."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Protocol, TypeVar
from sqlalchemy.orm import Session
from batchsmith.core.enums import TaskStatus
from batchsmith.repositories.task_execution_repository import TaskExecutionRepository
from batchsmith.services.task_registry import TaskDefinition

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TaskStatusEntry:
    """Point-in-time status of one task."""

    status: TaskStatus
    attempt_count: int


class TaskExecutionStore(Protocol):
    """Narrow CRUD interface the retry engine and orchestrator depend on."""

    async def initialize(self, job_id: str, catalogue: Iterable[TaskDefinition]) -> None:
        ...

    async def get_statuses(self, job_id: str) -> Dict[str, TaskStatusEntry]:
        ...

    async def set_status(
        self,
        job_id: str,
        task_id: str,
        status: TaskStatus,
        error_message: Optional[str] = None,
    ) -> None:
        ...

    async def record_attempt(self, job_id: str, task_id: str, attempt_count: int) -> None:
        ...


class SqlTaskExecutionStore:
    """
    TaskExecutionStore backed by SQLAlchemy.

    Each operation opens a fresh session and runs the sync repository call
    in a worker thread via asyncio.to_thread(), so the event loop is never
    blocked on database I/O.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        """
        Initialize store.

        Args:
            session_factory: Callable returning a new SQLAlchemy session
        """
        self.session_factory = session_factory

    async def _run(self, operation: Callable[[TaskExecutionRepository], T]) -> T:
        def run_sync() -> T:
            session = self.session_factory()
            try:
                return operation(TaskExecutionRepository(session))
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

        return await asyncio.to_thread(run_sync)

    async def initialize(self, job_id: str, catalogue: Iterable[TaskDefinition]) -> None:
        """
        Seed pending records for every catalogue entry not yet recorded.

        Safe to call repeatedly.
        """
        definitions = list(catalogue)
        created = await self._run(lambda repo: repo.initialize(job_id, definitions))
        logger.info(
            f"Initialized task records for job {job_id}: "
            f"{created} created, {len(definitions) - created} already present"
        )

    async def get_statuses(self, job_id: str) -> Dict[str, TaskStatusEntry]:
        """
        Read status and attempt count of every record for a job.

        Returns:
            Dict[str, TaskStatusEntry]: task_id → entry, ordered by task id;
            empty if the job has no records
        """

        def read(repo: TaskExecutionRepository) -> Dict[str, TaskStatusEntry]:
            return {
                record.task_id: TaskStatusEntry(
                    status=TaskStatus(record.status),
                    attempt_count=record.attempt_count,
                )
                for record in repo.list_for_job(job_id)
            }

        return await self._run(read)

    async def set_status(
        self,
        job_id: str,
        task_id: str,
        status: TaskStatus,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Transition a record's status. Write failures propagate.

        Raises:
            TaskRecordNotFoundError: If record not found
            InvalidStateTransitionError: If transition is invalid
        """
        await self._run(
            lambda repo: repo.update_status(job_id, task_id, status, error_message)
        )
        logger.debug(f"Task {task_id} of job {job_id} moved to {status}")

    async def record_attempt(self, job_id: str, task_id: str, attempt_count: int) -> None:
        """Stamp attempt count and last attempt time on a record."""
        await self._run(lambda repo: repo.record_attempt(job_id, task_id, attempt_count))
