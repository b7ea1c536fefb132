"""Tests for per-session state."""

from __future__ import annotations

from helpers import FakeClock
from hudbot.core.session import DISCONNECT_THRESHOLD, AvoidanceState, SessionState
from hudbot.models.geometry import Bounds
from hudbot.models.targets import Target, TargetType


def _mob() -> Target:
    return Target(TargetType.MOB_PASSIVE, Bounds(100, 200, 40, 4))


class TestReset:
    """Tests for session reset."""

    def test_fresh_session(self) -> None:
        """A new session starts normal, buff clock at start time."""
        clock = FakeClock()
        session = SessionState(clock)

        assert session.last_buff_ms == clock()
        assert session.avoidance_state == AvoidanceState.NORMAL
        assert session.obstacle_direction == "d"
        assert session.disconnect_count == 0
        assert session.pending_target is None

    def test_reset_clears_avoid_list(self) -> None:
        """reset() forgets avoided regions."""
        session = SessionState(FakeClock())
        session.avoid_list.add(Bounds(0, 0, 10, 10), 5000)
        session.reset()
        assert len(session.avoid_list) == 0


class TestAvoidance:
    """Tests for the obstacle avoidance state machine."""

    def test_enter_starts_timer_once(self) -> None:
        """Re-entering avoidance keeps the first start time."""
        clock = FakeClock()
        session = SessionState(clock)

        session.enter_avoidance()
        clock.advance(300)
        session.enter_avoidance()
        clock.advance(200)

        assert session.avoidance_state == AvoidanceState.AVOIDING
        assert session.far_from_target_elapsed_ms() == 500

    def test_leave_resets(self) -> None:
        """Leaving avoidance clears the timer."""
        session = SessionState(FakeClock())
        session.enter_avoidance()
        session.leave_avoidance()

        assert session.avoidance_state == AvoidanceState.NORMAL
        assert session.far_from_target_elapsed_ms() is None

    def test_direction_alternates(self) -> None:
        """Each maneuver strafes the other way."""
        session = SessionState(FakeClock())
        assert session.toggle_obstacle_direction() == "a"
        assert session.toggle_obstacle_direction() == "d"


class TestEngagement:
    """Tests for pending mob engagement."""

    def test_engage_keeps_first_click_time(self) -> None:
        """Clicking again does not restart the engagement timer."""
        clock = FakeClock()
        session = SessionState(clock)

        session.engage(_mob())
        clock.advance(1000)
        session.engage(_mob())
        clock.advance(500)

        assert session.pending_elapsed_ms() == 1500

    def test_clear_engagement(self) -> None:
        """Clearing drops the target and leaves avoidance."""
        session = SessionState(FakeClock())
        session.engage(_mob())
        session.enter_avoidance()

        session.clear_engagement()

        assert session.pending_target is None
        assert session.pending_elapsed_ms() is None
        assert session.avoidance_state == AvoidanceState.NORMAL


class TestDisconnectCounter:
    """Tests for the saturating disconnect counter."""

    def test_disconnected_after_threshold(self) -> None:
        """More than the threshold of zero readings means disconnected."""
        session = SessionState(FakeClock())
        for _ in range(DISCONNECT_THRESHOLD):
            session.record_latency(0)
        assert not session.is_disconnected

        session.record_latency(0)
        assert session.is_disconnected

    def test_good_reading_decrements(self) -> None:
        """A real latency counts the counter down."""
        session = SessionState(FakeClock())
        for _ in range(3):
            session.record_latency(0)
        session.record_latency(42)
        assert session.disconnect_count == 2

    def test_counter_never_negative(self) -> None:
        """Good readings on a clean session keep the counter at 0."""
        session = SessionState(FakeClock())
        session.record_latency(42)
        session.record_latency(17)
        assert session.disconnect_count == 0

    def test_counter_saturates_while_disconnected(self) -> None:
        """A long outage is undone by a single good reading."""
        session = SessionState(FakeClock())
        for _ in range(1000):
            session.record_latency(0)
        assert session.disconnect_count == DISCONNECT_THRESHOLD + 1

        session.record_latency(42)

        assert not session.is_disconnected
