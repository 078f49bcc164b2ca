"""Prometheus metrics for Batchsmith."""
from prometheus_client import Counter, Histogram, Info


# Task metrics
task_attempts_total = Counter(
    'batchsmith_task_attempts_total',
    'Total number of task attempts started',
    ['task_name']
)

tasks_completed_total = Counter(
    'batchsmith_tasks_completed_total',
    'Total number of tasks completed',
    ['task_name']
)

tasks_failed_total = Counter(
    'batchsmith_tasks_failed_total',
    'Total number of tasks failed terminally',
    ['task_name', 'reason']
)

tasks_skipped_total = Counter(
    'batchsmith_tasks_skipped_total',
    'Total number of tasks skipped because they were already completed',
    ['task_name']
)

task_attempt_duration_seconds = Histogram(
    'batchsmith_task_attempt_duration_seconds',
    'Duration of a single task attempt in seconds',
    ['task_name', 'outcome'],
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 900.0]
)

attempt_tracking_errors_total = Counter(
    'batchsmith_attempt_tracking_errors_total',
    'Total number of attempt counts that could not be persisted'
)

# Orchestration metrics
orchestrations_total = Counter(
    'batchsmith_orchestrations_total',
    'Total number of orchestration runs',
    ['outcome']
)

# System info
system_info = Info(
    'batchsmith_system',
    'Batchsmith system information'
)


def init_system_info(version: str) -> None:
    """
    Initialize system info metric.

    Args:
        version: Application version
    """
    system_info.info({
        'version': version,
        'service': 'batchsmith',
    })
