"""Progress reporting over task execution records."""
import math
from typing import Mapping
from batchsmith.core.enums import TaskStatus
from batchsmith.services.task_store import TaskExecutionStore, TaskStatusEntry
from batchsmith.worker.models import ProgressSnapshot


def compute_progress(statuses: Mapping[str, TaskStatusEntry]) -> ProgressSnapshot:
    """
    Count records per status and compute the completion percentage.

    Args:
        statuses: task_id → status entry for one job

    Returns:
        ProgressSnapshot: Aggregate counts; all zeros for an empty job
    """
    total = len(statuses)
    counts = {status: 0 for status in TaskStatus}
    for entry in statuses.values():
        counts[TaskStatus(entry.status)] += 1

    completed = counts[TaskStatus.COMPLETED]
    # Half-up rounding, so 2.5% reports as 3
    percentage = int(math.floor(100 * completed / total + 0.5)) if total else 0

    return ProgressSnapshot(
        total=total,
        completed=completed,
        in_progress=counts[TaskStatus.IN_PROGRESS],
        failed=counts[TaskStatus.FAILED],
        pending=counts[TaskStatus.PENDING],
        percentage=percentage,
    )


class ProgressReporter:
    """
    Read-only projection of a job's task records.

    No caching and no side effects; safe to poll while an orchestration
    run for the same job is in flight.
    """

    def __init__(self, store: TaskExecutionStore):
        self.store = store

    async def report(self, job_id: str) -> ProgressSnapshot:
        """
        Report progress for a job.

        Args:
            job_id: Job identifier

        Returns:
            ProgressSnapshot: Point-in-time counts
        """
        return compute_progress(await self.store.get_statuses(job_id))
