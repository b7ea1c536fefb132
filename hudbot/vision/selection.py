"""Target ranking and selection with temporal avoidance."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from hudbot.models.geometry import Bounds, Point
from hudbot.models.targets import Target, TargetType

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class AvoidanceEntry:
    """A region excluded from selection for a while."""

    bounds: Bounds
    recorded_at_ms: float
    duration_ms: float

    def is_expired(self, now_ms: float) -> bool:
        return now_ms - self.recorded_at_ms >= self.duration_ms


class AvoidanceList:
    """Time-bounded exclusion regions, typically mobs that failed to engage."""

    def __init__(self, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self._entries: list[AvoidanceEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[AvoidanceEntry]:
        return list(self._entries)

    def add(self, bounds: Bounds, duration_ms: float) -> AvoidanceEntry:
        entry = AvoidanceEntry(bounds, self._clock(), duration_ms)
        self._entries.append(entry)
        logger.debug(f"Avoiding {bounds!r} for {duration_ms:.0f}ms")
        return entry

    def prune(self) -> int:
        """Drop expired entries, returning how many were removed."""
        now = self._clock()
        before = len(self._entries)
        self._entries = [e for e in self._entries if not e.is_expired(now)]
        return before - len(self._entries)

    def active(self, now_ms: float | None = None) -> list[AvoidanceEntry]:
        now = self._clock() if now_ms is None else now_ms
        return [e for e in self._entries if not e.is_expired(now)]

    def is_avoided(self, point: Point, now_ms: float | None = None) -> bool:
        return any(e.bounds.contains_point(point) for e in self.active(now_ms))

    def clear(self) -> None:
        self._entries.clear()


def category_ceiling(target_type: TargetType, max_distance: int) -> int:
    """Max distance at which a category remains eligible."""
    if target_type == TargetType.MOB_AGGRESSIVE:
        return max_distance // 2
    return max_distance


def rank_targets(targets: Sequence[Target], reference: Point) -> list[tuple[Target, int]]:
    """Targets paired with their distance to ``reference``, closest first.

    The sort is stable, so equal distances keep their input order.
    """
    ranked = [(target, target.attack_point.distance_to(reference)) for target in targets]
    ranked.sort(key=lambda pair: pair[1])
    return ranked


def find_closest_target(
    targets: Sequence[Target],
    reference: Point,
    max_distance: int,
    avoid_list: AvoidanceList | None = None,
    now_ms: float | None = None,
) -> Target | None:
    """Select the best target to engage.

    Args:
        targets: Candidates detected this frame.
        reference: Point to measure from, normally the frame center.
        max_distance: Distance ceiling. Aggressive mobs use half of it.
        avoid_list: Optional regions to exclude. When given and every
            candidate is avoided, nothing is selected.
        now_ms: Clock reading for avoidance expiry. Defaults to the list's clock.

    Returns:
        The selected target, or None.
    """
    ranked = rank_targets(targets, reference)

    if len(ranked) > 1:
        in_range = [
            (target, distance)
            for target, distance in ranked
            if distance <= category_ceiling(target.target_type, max_distance)
        ]
        # Over-filtering must not starve selection
        if len(in_range) > 1:
            ranked = in_range

    if avoid_list is not None:
        active = avoid_list.active(now_ms)
        for target, _distance in ranked:
            point = target.attack_point
            if not any(entry.bounds.contains_point(point) for entry in active):
                return target
        if ranked:
            logger.debug(f"All {len(ranked)} candidates are in avoided regions")
        return None

    return ranked[0][0] if ranked else None
