"""Orchestration result classes."""
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
from batchsmith.core.enums import TaskResultStatus


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    Aggregate task counts for one job.

    Always derived from the current execution records, never stored.
    """

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    failed: int = 0
    pending: int = 0
    percentage: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class TaskResult:
    """Outcome of one task during a single orchestration run."""

    task_id: str
    task_name: str
    status: TaskResultStatus
    result: Optional[Any] = None
    error: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class JobResult:
    """
    Result of one orchestration run.

    ``results`` holds one entry per task that was visited, in catalogue
    order. Tasks after a terminal failure are not visited.
    """

    success: bool
    progress: ProgressSnapshot
    results: List[TaskResult] = field(default_factory=list)

    def result_for(self, task_id: str) -> Optional[TaskResult]:
        """Return the result entry for a task id, if it was visited."""
        for task_result in self.results:
            if task_result.task_id == task_id:
                return task_result
        return None
