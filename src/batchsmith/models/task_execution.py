"""Task execution model tracking one catalogue task within one job."""
from datetime import datetime
from uuid import uuid4
from typing import Optional
from sqlalchemy import (
    String,
    Integer,
    CheckConstraint,
    Index,
    Text,
    DateTime,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column
from batchsmith.core.database import Base
from batchsmith.core.enums import TaskStatus
from batchsmith.models.base import TimestampMixin


class TaskExecution(Base, TimestampMixin):
    """
    Durable execution record for a (job, task) pair.

    Created once per catalogue entry when a job starts, mutated by the
    retry engine, and never deleted by the orchestrator.
    """

    __tablename__ = "generation_tasks"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )

    job_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    task_id: Mapped[str] = mapped_column(String(64), nullable=False)
    task_name: Mapped[str] = mapped_column(String(100), nullable=False)

    status: Mapped[TaskStatus] = mapped_column(
        SQLEnum(
            TaskStatus,
            name="task_status",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=TaskStatus.PENDING,
        index=True,
    )
    attempt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_attempt_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("job_id", "task_id", name="unique_job_task"),
        CheckConstraint("attempt_count >= 0", name="check_attempt_count_non_negative"),
        Index("idx_generation_tasks_job_status", "job_id", "status"),
    )

    def __repr__(self) -> str:
        """Return string representation of TaskExecution."""
        return (
            f"<TaskExecution(job_id={self.job_id}, task_id={self.task_id}, "
            f"status={self.status}, attempt_count={self.attempt_count})>"
        )
