"""Core enumerations for the Batchsmith generation orchestrator."""
from enum import Enum


class TaskStatus(str, Enum):
    """
    Persisted status of one task within a job.

    State flow:
        PENDING → IN_PROGRESS → COMPLETED/FAILED
                      ↑                  │
                      └──────────────────┘  (job re-invoked)
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value


class TaskResultStatus(str, Enum):
    """
    Outcome of one task within a single orchestration run.

    - COMPLETED: Work ran and succeeded during this run
    - SKIPPED: Task was already completed by an earlier run
    - FAILED: Work failed terminally, the run stopped here
    - ERROR: No work function was supplied for the task
    """

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    ERROR = "error"

    def __str__(self) -> str:
        """Return string representation of the enum value."""
        return self.value
