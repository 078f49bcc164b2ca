"""Custom exceptions for Batchsmith."""
from typing import Iterable, Optional


class BatchsmithException(Exception):
    """Base exception for all Batchsmith-specific exceptions."""

    pass


class InvalidStateTransitionError(BatchsmithException):
    """Raised when attempting an invalid task state transition."""

    pass


class TaskRecordNotFoundError(BatchsmithException):
    """Raised when a task execution record is not found in the database."""

    pass


class TaskFailedError(BatchsmithException):
    """Raised when a task reaches a terminal failure inside the retry engine."""

    def __init__(self, task_id: str, attempts: int, message: str):
        super().__init__(message)
        self.task_id = task_id
        self.attempts = attempts
        self.message = message


class ImmediateFailureError(TaskFailedError):
    """Raised when a task error is classified as non-retryable."""

    pass


class RetriesExhaustedError(TaskFailedError):
    """Raised when a task fails on its last allowed attempt."""

    pass


class MissingWorkFunctionError(BatchsmithException):
    """Raised when catalogue tasks have no registered work function."""

    def __init__(self, task_names: Iterable[str]):
        self.task_names = list(task_names)
        super().__init__(
            f"No work function registered for tasks: {', '.join(self.task_names)}"
        )


class JobLockedError(BatchsmithException):
    """Raised when another orchestration run already holds the job lock."""

    pass


class NonRetryableError(BatchsmithException):
    """Raised by work functions to fail a task without further attempts."""

    pass


class ProviderError(BatchsmithException):
    """Raised when the external generation provider rejects or fails a call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
