"""
Unit tests for ProcessLifecycleState.

Tests phase ordering, the initialized latch and failure recording.
"""

import pytest

from veilleur.domain.exceptions import InvalidPhaseTransitionError
from veilleur.domain.lifecycle import (
    InitializationFailure,
    LifecyclePhase,
    ProcessLifecycleState,
)


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestProcessLifecycleState:
    """Unit tests for ProcessLifecycleState."""

    # ================================================================
    # Initialization tests
    # ================================================================

    def test_starts_listening(self):
        """Test a new state starts in LISTENING, not initialized."""
        state = ProcessLifecycleState()

        assert state.phase is LifecyclePhase.LISTENING
        assert state.initialized is False
        assert state.initialization_error is None
        assert state.fallback_active is False

    def test_uptime_uses_clock(self):
        """Test uptime is measured from construction."""
        clock = FakeClock(100.0)
        state = ProcessLifecycleState(clock=clock)

        clock.now = 112.5

        assert state.uptime_seconds() == 12.5

    # ================================================================
    # Transition tests
    # ================================================================

    def test_happy_path_to_terminated(self):
        """Test the full forward path is accepted."""
        state = ProcessLifecycleState()

        for phase in (
            LifecyclePhase.INITIALIZING,
            LifecyclePhase.READY,
            LifecyclePhase.SHUTTING_DOWN,
            LifecyclePhase.TERMINATED,
        ):
            state.advance_to(phase)

        assert state.phase is LifecyclePhase.TERMINATED
        assert state.is_terminal is True
        assert state.is_serving is False

    def test_ready_latches_initialized(self):
        """Test initialized stays true after leaving READY."""
        state = ProcessLifecycleState()
        state.advance_to(LifecyclePhase.INITIALIZING)
        state.advance_to(LifecyclePhase.READY)

        assert state.initialized is True

        state.advance_to(LifecyclePhase.SHUTTING_DOWN)
        state.advance_to(LifecyclePhase.TERMINATED)

        assert state.initialized is True

    def test_degraded_never_initialized(self):
        """Test DEGRADED does not set initialized."""
        state = ProcessLifecycleState()
        state.advance_to(LifecyclePhase.INITIALIZING)
        state.advance_to(LifecyclePhase.DEGRADED)

        assert state.initialized is False
        assert state.is_serving is True

    @pytest.mark.parametrize(
        "phase",
        [
            LifecyclePhase.LISTENING,
            LifecyclePhase.INITIALIZING,
            LifecyclePhase.READY,
            LifecyclePhase.DEGRADED,
        ],
    )
    def test_shutdown_reachable_from_serving_phases(self, phase):
        """Test SHUTTING_DOWN can be entered from every serving phase."""
        state = ProcessLifecycleState()
        path = {
            LifecyclePhase.LISTENING: [],
            LifecyclePhase.INITIALIZING: [LifecyclePhase.INITIALIZING],
            LifecyclePhase.READY: [LifecyclePhase.INITIALIZING, LifecyclePhase.READY],
            LifecyclePhase.DEGRADED: [
                LifecyclePhase.INITIALIZING,
                LifecyclePhase.DEGRADED,
            ],
        }[phase]
        for step in path:
            state.advance_to(step)

        assert state.can_advance_to(LifecyclePhase.SHUTTING_DOWN) is True

    def test_backward_transition_rejected(self):
        """Test phases never move backward."""
        state = ProcessLifecycleState()
        state.advance_to(LifecyclePhase.INITIALIZING)
        state.advance_to(LifecyclePhase.READY)

        with pytest.raises(InvalidPhaseTransitionError) as exc_info:
            state.advance_to(LifecyclePhase.INITIALIZING)

        assert exc_info.value.current is LifecyclePhase.READY
        assert exc_info.value.code == "INVALID_PHASE_TRANSITION"
        assert state.phase is LifecyclePhase.READY

    def test_ready_after_shutdown_rejected(self):
        """Test heavy init cannot mark READY once shutdown began."""
        state = ProcessLifecycleState()
        state.advance_to(LifecyclePhase.INITIALIZING)
        state.advance_to(LifecyclePhase.SHUTTING_DOWN)

        assert state.try_advance_to(LifecyclePhase.READY) is False
        assert state.phase is LifecyclePhase.SHUTTING_DOWN
        assert state.initialized is False

    def test_try_advance_reports_change(self):
        """Test try_advance_to returns True only when the phase moved."""
        state = ProcessLifecycleState()

        assert state.try_advance_to(LifecyclePhase.INITIALIZING) is True
        assert state.try_advance_to(LifecyclePhase.INITIALIZING) is False

    # ================================================================
    # Failure recording tests
    # ================================================================

    def test_first_failure_kept(self):
        """Test only the first initialization failure is stored."""
        state = ProcessLifecycleState()
        first = InitializationFailure.from_exception("database", RuntimeError("db down"))
        second = InitializationFailure.from_exception("routes", ValueError("bad"))

        state.record_initialization_failure(first)
        state.record_initialization_failure(second)

        assert state.initialization_error is first

    def test_failure_to_dict(self):
        """Test failure serializes type, step and message."""
        failure = InitializationFailure.from_exception("database", RuntimeError("db down"))

        data = failure.to_dict()

        assert data["step"] == "database"
        assert data["error_type"] == "RuntimeError"
        assert data["message"] == "db down"
        assert "occurred_at" in data

    def test_failure_without_message_uses_type(self):
        """Test an exception without message falls back to its class name."""
        failure = InitializationFailure.from_exception("routes", KeyError())

        assert failure.message == "KeyError"
