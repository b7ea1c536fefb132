"""Per-session mutable state owned by a behavior.

Everything that survives between ticks lives here rather than in module
globals: buff and avoidance timers, the obstacle avoidance state machine,
the disconnect counter, the avoidance list and the pending engagement.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from hudbot.models.targets import Target
from hudbot.vision.selection import AvoidanceList, monotonic_ms

logger = logging.getLogger(__name__)

# Consecutive zero-latency readings before the client counts as disconnected
DISCONNECT_THRESHOLD = 10


class AvoidanceState(StrEnum):
    """Obstacle avoidance state while following a target."""

    NORMAL = "normal"
    AVOIDING = "avoiding"


class SessionState:
    """Mutable state for one bot session.

    Attributes:
        last_buff_ms: When buffs were last cast (or a heal postponed them).
        far_from_target_since_ms: When the followed target was first lost
            or found out of range, None while close.
        avoidance_state: Obstacle avoidance state.
        obstacle_direction: Strafe key for the next circle maneuver.
        disconnect_count: Saturating counter of zero-latency readings.
        avoid_list: Regions of mobs that could not be engaged.
        pending_target: Mob clicked but not yet confirmed as engaged.
        pending_since_ms: When pending_target was clicked.
    """

    def __init__(self, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self.avoid_list = AvoidanceList(clock)
        self.reset()

    def reset(self) -> None:
        """Start a fresh session at the current time."""
        self.last_buff_ms: float = self._clock()
        self.far_from_target_since_ms: float | None = None
        self.avoidance_state = AvoidanceState.NORMAL
        self.obstacle_direction = "d"
        self.disconnect_count = 0
        self.pending_target: Target | None = None
        self.pending_since_ms: float | None = None
        self.avoid_list.clear()

    def now(self) -> float:
        return self._clock()

    def postpone_buffs(self) -> None:
        self.last_buff_ms = self._clock()

    def enter_avoidance(self) -> None:
        """Mark the target as lost or out of range, starting the timer once."""
        if self.far_from_target_since_ms is None:
            self.far_from_target_since_ms = self._clock()
        if self.avoidance_state != AvoidanceState.AVOIDING:
            logger.debug("Obstacle avoidance: normal -> avoiding")
        self.avoidance_state = AvoidanceState.AVOIDING

    def leave_avoidance(self) -> None:
        if self.avoidance_state != AvoidanceState.NORMAL:
            logger.debug("Obstacle avoidance: avoiding -> normal")
        self.far_from_target_since_ms = None
        self.avoidance_state = AvoidanceState.NORMAL

    def far_from_target_elapsed_ms(self) -> float | None:
        if self.far_from_target_since_ms is None:
            return None
        return self._clock() - self.far_from_target_since_ms

    def toggle_obstacle_direction(self) -> str:
        """Switch between strafing right and left, returning the new key."""
        self.obstacle_direction = "a" if self.obstacle_direction == "d" else "d"
        return self.obstacle_direction

    def engage(self, target: Target) -> None:
        """Remember a clicked mob. The timer runs from the first click."""
        if self.pending_target is None:
            self.pending_since_ms = self._clock()
        self.pending_target = target

    def pending_elapsed_ms(self) -> float | None:
        if self.pending_since_ms is None:
            return None
        return self._clock() - self.pending_since_ms

    def clear_engagement(self) -> None:
        self.pending_target = None
        self.pending_since_ms = None
        self.leave_avoidance()

    def record_latency(self, latency_ms: int) -> None:
        """Feed one ping reading into the disconnect counter."""
        if latency_ms == 0:
            # Saturates one past the threshold
            if not self.is_disconnected:
                self.disconnect_count += 1
                if self.is_disconnected:
                    logger.warning("Client appears to be disconnected")
        else:
            self.disconnect_count = max(0, self.disconnect_count - 1)

    @property
    def is_disconnected(self) -> bool:
        return self.disconnect_count > DISCONNECT_THRESHOLD
