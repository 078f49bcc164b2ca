"""Unit tests for the task state machine."""
import pytest
from batchsmith.core.enums import TaskStatus
from batchsmith.core.exceptions import InvalidStateTransitionError
from batchsmith.services.state_machine import TaskStateMachine


class TestTaskStateMachine:
    """Test task state transitions."""

    def test_pending_to_in_progress_valid(self):
        """Test PENDING → IN_PROGRESS is valid."""
        assert TaskStateMachine.can_transition(TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

    def test_pending_cannot_skip_to_completed(self):
        """Test PENDING → COMPLETED is invalid."""
        assert not TaskStateMachine.can_transition(TaskStatus.PENDING, TaskStatus.COMPLETED)

    def test_in_progress_outcomes_valid(self):
        """Test IN_PROGRESS can move to COMPLETED or FAILED."""
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED)
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.FAILED)

    def test_in_progress_can_restart(self):
        """Test a task left IN_PROGRESS by a crashed run can be restarted."""
        assert TaskStateMachine.can_transition(TaskStatus.IN_PROGRESS, TaskStatus.IN_PROGRESS)

    def test_failed_can_be_retried(self):
        """Test FAILED → IN_PROGRESS is valid when a job is re-invoked."""
        assert TaskStateMachine.can_transition(TaskStatus.FAILED, TaskStatus.IN_PROGRESS)

    @pytest.mark.parametrize("target", list(TaskStatus))
    def test_completed_is_final(self, target):
        """Test no transition leaves COMPLETED."""
        assert not TaskStateMachine.can_transition(TaskStatus.COMPLETED, target)

    def test_validate_transition_raises(self):
        """Test validate_transition raises with both states in the message."""
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            TaskStateMachine.validate_transition(TaskStatus.COMPLETED, TaskStatus.IN_PROGRESS)

        assert "completed -> in_progress" in str(exc_info.value)

    def test_validate_transition_accepts_valid(self):
        """Test validate_transition is silent for valid transitions."""
        TaskStateMachine.validate_transition(TaskStatus.PENDING, TaskStatus.IN_PROGRESS)

    def test_is_terminal(self):
        """Test only COMPLETED is terminal."""
        assert TaskStateMachine.is_terminal(TaskStatus.COMPLETED)
        assert not TaskStateMachine.is_terminal(TaskStatus.FAILED)
        assert not TaskStateMachine.is_terminal(TaskStatus.PENDING)
