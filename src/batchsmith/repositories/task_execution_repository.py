"""Task execution repository for database operations."""
from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from batchsmith.models.base import utcnow
from batchsmith.models.task_execution import TaskExecution
from batchsmith.core.enums import TaskStatus
from batchsmith.core.exceptions import TaskRecordNotFoundError
from batchsmith.services.state_machine import TaskStateMachine
from batchsmith.services.task_registry import TaskDefinition

_INSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def task_sort_key(task_id: str) -> Tuple[int, int, str]:
    """Sort numeric task ids numerically ("2" before "10"), others lexically."""
    if task_id.isdigit():
        return (0, int(task_id), "")
    return (1, 0, task_id)


class TaskExecutionRepository:
    """Repository for TaskExecution database operations."""

    def __init__(self, db: Session):
        """
        Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def initialize(self, job_id: str, definitions: Iterable[TaskDefinition]) -> int:
        """
        Create a pending record per definition, leaving existing records untouched.

        Args:
            job_id: Job identifier
            definitions: Catalogue entries to seed

        Returns:
            int: Number of records created by this call
        """
        rows = [
            {
                "job_id": job_id,
                "task_id": definition.id,
                "task_name": definition.name,
                "status": TaskStatus.PENDING,
                "attempt_count": 0,
            }
            for definition in definitions
        ]
        if not rows:
            return 0

        before = self.count_for_job(job_id)

        insert = _INSERT_BY_DIALECT.get(self.db.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(TaskExecution).on_conflict_do_nothing(
                index_elements=["job_id", "task_id"]
            )
            self.db.execute(stmt, rows)
        else:
            existing = {record.task_id for record in self.list_for_job(job_id)}
            for row in rows:
                if row["task_id"] not in existing:
                    self.db.add(TaskExecution(**row))

        self.db.commit()
        return self.count_for_job(job_id) - before

    def count_for_job(self, job_id: str) -> int:
        """Count execution records for a job."""
        return self.db.scalar(
            select(func.count()).select_from(TaskExecution).where(TaskExecution.job_id == job_id)
        ) or 0

    def list_for_job(self, job_id: str) -> List[TaskExecution]:
        """
        List all execution records for a job, ordered by task id.

        Args:
            job_id: Job identifier

        Returns:
            List[TaskExecution]: Records (empty if the job is unknown)
        """
        records = self.db.scalars(
            select(TaskExecution).where(TaskExecution.job_id == job_id)
        ).all()
        return sorted(records, key=lambda record: task_sort_key(record.task_id))

    def get(self, job_id: str, task_id: str) -> Optional[TaskExecution]:
        """
        Retrieve one execution record.

        Returns:
            Optional[TaskExecution]: Record or None if not found
        """
        return self.db.scalars(
            select(TaskExecution).where(
                TaskExecution.job_id == job_id,
                TaskExecution.task_id == task_id,
            )
        ).first()

    def _get_or_raise(self, job_id: str, task_id: str) -> TaskExecution:
        record = self.get(job_id, task_id)
        if record is None:
            raise TaskRecordNotFoundError(f"Task {task_id} of job {job_id} not found")
        return record

    def update_status(
        self,
        job_id: str,
        task_id: str,
        status: TaskStatus,
        error_message: Optional[str] = None,
    ) -> TaskExecution:
        """
        Transition a record's status with validation.

        Args:
            job_id: Job identifier
            task_id: Task identifier
            status: Target status
            error_message: Optional error message to store; moving to
                IN_PROGRESS or COMPLETED without one clears the previous message

        Returns:
            TaskExecution: Updated record

        Raises:
            TaskRecordNotFoundError: If record not found
            InvalidStateTransitionError: If transition is invalid
        """
        record = self._get_or_raise(job_id, task_id)
        TaskStateMachine.validate_transition(record.status, status)

        record.status = status
        if status == TaskStatus.COMPLETED:
            record.completed_at = utcnow()
        if error_message is not None:
            record.error_message = error_message
        elif status in (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED):
            # A restarted or finished task no longer carries an earlier failure
            record.error_message = None

        self.db.commit()
        self.db.refresh(record)
        return record

    def record_attempt(self, job_id: str, task_id: str, attempt_count: int) -> TaskExecution:
        """
        Stamp an attempt on a record.

        The stored attempt count never decreases; a lower count only
        refreshes ``last_attempt_at``.

        Raises:
            TaskRecordNotFoundError: If record not found
        """
        record = self._get_or_raise(job_id, task_id)

        record.attempt_count = max(record.attempt_count, attempt_count)
        record.last_attempt_at = utcnow()

        self.db.commit()
        self.db.refresh(record)
        return record
