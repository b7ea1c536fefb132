"""On-screen target models."""

from __future__ import annotations

from enum import StrEnum

from hudbot.models.geometry import Bounds, Point

# Mobs are clicked below their name tag, on the body
MOB_ATTACK_OFFSET_Y = 20


class TargetType(StrEnum):
    """Categories of detectable on-screen entities."""

    MOB_PASSIVE = "mob_passive"
    MOB_AGGRESSIVE = "mob_aggressive"
    TARGET_MARKER = "target_marker"

    @property
    def is_mob(self) -> bool:
        return self in (TargetType.MOB_PASSIVE, TargetType.MOB_AGGRESSIVE)


class Target:
    """A detected entity: its category and bounding rectangle."""

    __slots__ = ("target_type", "bounds")

    def __init__(self, target_type: TargetType, bounds: Bounds) -> None:
        self.target_type = target_type
        self.bounds = bounds

    def __repr__(self) -> str:
        return f"Target({self.target_type.value}, {self.bounds!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Target):
            return NotImplemented
        return self.target_type == other.target_type and self.bounds == other.bounds

    def __hash__(self) -> int:
        return hash((self.target_type, self.bounds))

    @property
    def attack_point(self) -> Point:
        """Category-specific anchor used for ranking and clicking."""
        point = self.bounds.lowest_center_point
        if self.target_type.is_mob:
            return Point(point.x, point.y + MOB_ATTACK_OFFSET_Y)
        return point

    @property
    def avoid_region(self) -> Bounds:
        """The bounds stretched down to include the attack point."""
        point = self.attack_point
        return Bounds(self.bounds.x, self.bounds.y, self.bounds.w, point.y - self.bounds.y + 1)
