"""Action slot models for the fixed 9x10 slot grid."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, NamedTuple

from pydantic import Field

from hudbot.models.base import LenientModel

SLOT_BAR_COUNT = 9
SLOTS_PER_BAR = 10

DEFAULT_SLOT_COOLDOWN_MS = 100
DEFAULT_SLOT_THRESHOLD = 100


class SlotType(StrEnum):
    """What an action slot holds."""

    UNUSED = "unused"
    FOOD = "food"
    PILL = "pill"
    HEAL_SKILL = "heal_skill"
    MP_RESTORER = "mp_restorer"
    FP_RESTORER = "fp_restorer"
    PICKUP_PET = "pickup_pet"
    PICKUP_MOTION = "pickup_motion"
    ATTACK_SKILL = "attack_skill"
    BUFF_SKILL = "buff_skill"
    REZ_SKILL = "rez_skill"
    FLYING = "flying"


class SlotRef(NamedTuple):
    """Address of a slot in the grid."""

    bar: int
    slot: int


class ActionSlot(LenientModel):
    """One configured cell of the slot grid."""

    slot_type: SlotType = Field(default=SlotType.UNUSED)
    cooldown_ms: int | None = Field(default=None, ge=0, description="Reuse delay, 100 ms if unset")
    threshold: int | None = Field(
        default=None, ge=0, le=100, description="Highest stat percent this slot fires at"
    )
    enabled: bool = Field(default=True)

    model_config = {"frozen": True}

    @property
    def effective_cooldown_ms(self) -> int:
        return self.cooldown_ms if self.cooldown_ms is not None else DEFAULT_SLOT_COOLDOWN_MS

    @property
    def effective_threshold(self) -> int:
        return self.threshold if self.threshold is not None else DEFAULT_SLOT_THRESHOLD


def default_slot_bars() -> list[list[ActionSlot]]:
    """A 9x10 grid of unused slots."""
    return [[ActionSlot() for _ in range(SLOTS_PER_BAR)] for _ in range(SLOT_BAR_COUNT)]


def check_grid_shape(grid: list[list[Any]], what: str = "slot grid") -> list[list[Any]]:
    """Ensure a grid is exactly 9 bars of 10 slots.

    Raises:
        ValueError: If the shape differs.
    """
    if len(grid) != SLOT_BAR_COUNT:
        raise ValueError(f"{what} must have {SLOT_BAR_COUNT} bars, got {len(grid)}")
    for index, bar in enumerate(grid):
        if len(bar) != SLOTS_PER_BAR:
            raise ValueError(
                f"{what} bar {index} must have {SLOTS_PER_BAR} slots, got {len(bar)}"
            )
    return grid
