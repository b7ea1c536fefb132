"""Shared data models for hudbot.

Geometry and targets are lightweight slotted classes used in hot paths;
slot configuration uses Pydantic for validation.
"""

from hudbot.models.geometry import Bounds, Point, PointCloud
from hudbot.models.slots import (
    SLOT_BAR_COUNT,
    SLOTS_PER_BAR,
    ActionSlot,
    SlotRef,
    SlotType,
)
from hudbot.models.targets import Target, TargetType

__all__ = [
    "SLOT_BAR_COUNT",
    "SLOTS_PER_BAR",
    "ActionSlot",
    "Bounds",
    "Point",
    "PointCloud",
    "SlotRef",
    "SlotType",
    "Target",
    "TargetType",
]
