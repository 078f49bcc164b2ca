"""Task state machine logic for managing valid task state transitions."""
from typing import Set, Dict
from batchsmith.core.enums import TaskStatus
from batchsmith.core.exceptions import InvalidStateTransitionError


class TaskStateMachine:
    """
    Defines valid state transitions for task execution records.

    State Diagram:
        PENDING → IN_PROGRESS → COMPLETED
                   ↑   ↺   ↓
                   └── FAILED

    IN_PROGRESS may restart itself: a crash mid-attempt leaves the record
    IN_PROGRESS and the next run starts it again from attempt 1. FAILED
    re-enters IN_PROGRESS when the job is re-invoked. COMPLETED is final.
    """

    TRANSITIONS: Dict[TaskStatus, Set[TaskStatus]] = {
        TaskStatus.PENDING: {TaskStatus.IN_PROGRESS},
        TaskStatus.IN_PROGRESS: {
            TaskStatus.IN_PROGRESS,
            TaskStatus.COMPLETED,
            TaskStatus.FAILED,
        },
        TaskStatus.FAILED: {TaskStatus.IN_PROGRESS},
        TaskStatus.COMPLETED: set(),  # Terminal state
    }

    TERMINAL_STATES = {TaskStatus.COMPLETED}

    @classmethod
    def can_transition(cls, from_state: TaskStatus, to_state: TaskStatus) -> bool:
        """
        Check if transition from from_state to to_state is valid.

        Args:
            from_state: Current task status
            to_state: Desired task status

        Returns:
            bool: True if transition is valid, False otherwise
        """
        return to_state in cls.TRANSITIONS.get(from_state, set())

    @classmethod
    def validate_transition(cls, from_state: TaskStatus, to_state: TaskStatus) -> None:
        """
        Validate state transition and raise exception if invalid.

        Raises:
            InvalidStateTransitionError: If transition is not valid
        """
        if not cls.can_transition(from_state, to_state):
            raise InvalidStateTransitionError(
                f"Invalid state transition: {from_state} -> {to_state}"
            )

    @classmethod
    def is_terminal(cls, state: TaskStatus) -> bool:
        """Check if state is terminal (no further transitions possible)."""
        return state in cls.TERMINAL_STATES
