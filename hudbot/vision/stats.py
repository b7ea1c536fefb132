"""HUD status bar reading.

Each bar is located by its fill colors inside a fixed region of the HUD.
The stat value is the filled width as a percentage of the bar width.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from hudbot.interfaces.vision import Frame
from hudbot.models.geometry import Bounds
from hudbot.vision.color import ColorReference
from hudbot.vision.pixels import DEFAULT_QUEUE_SIZE, PixelClassifier, Roi

logger = logging.getLogger(__name__)

STATUS_BAR_TOLERANCE = 5


class StatusBarKind(StrEnum):
    """HUD bars read every tick."""

    HP = "hp"
    MP = "mp"
    FP = "fp"
    TARGET_HP = "target_hp"


_HP_COLORS = [(174, 18, 55), (188, 24, 62), (204, 30, 70), (220, 36, 78)]

# Regions are tuned for the fixed 800x600 client layout
STATUS_BARS: dict[StatusBarKind, tuple[Bounds, list[tuple[int, int, int]]]] = {
    StatusBarKind.HP: (Bounds(105, 30, 116, 13), _HP_COLORS),
    StatusBarKind.MP: (
        Bounds(105, 46, 116, 13),
        [(20, 84, 196), (36, 132, 220), (44, 164, 228), (56, 188, 232)],
    ),
    StatusBarKind.FP: (
        Bounds(105, 62, 116, 13),
        [(45, 230, 29), (28, 172, 28), (44, 124, 52), (20, 146, 20)],
    ),
    StatusBarKind.TARGET_HP: (Bounds(300, 30, 200, 12), _HP_COLORS),
}


@dataclass
class ClientStats:
    """Stat percentages read from the HUD, each in [0, 100]."""

    hp: int = 0
    mp: int = 0
    fp: int = 0
    target_hp: int = 0

    def __str__(self) -> str:
        return f"HP={self.hp}% MP={self.mp}% FP={self.fp}% target={self.target_hp}%"


def bar_percentage(width: int, bar_width: int) -> int:
    """Filled width as a percentage, capped at 100."""
    if bar_width <= 0:
        return 0
    return min(100, width * 100 // bar_width)


class StatsReader:
    """Reads the player and target stat bars from a frame."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE, max_workers: int | None = None) -> None:
        # HUD bars sit inside the ignore bands used for entities
        self._classifier = PixelClassifier(
            ignore_area_top=0,
            ignore_area_bottom=0,
            queue_size=queue_size,
            max_workers=max_workers,
        )

    def read_bar(self, frame: Frame, kind: StatusBarKind) -> int:
        """Measure one bar, returning its fill percentage (0 if not found)."""
        region, colors = STATUS_BARS[kind]
        references = [ColorReference(color, STATUS_BAR_TOLERANCE, kind) for color in colors]
        roi = Roi(region.x, region.y, region.right, region.bottom)

        xs = [point.x for point, _ in self._classifier.classify(frame, references, roi)]
        if not xs:
            return 0
        return bar_percentage(max(xs) - min(xs) + 1, region.w)

    def read(self, frame: Frame) -> ClientStats:
        stats = ClientStats(
            hp=self.read_bar(frame, StatusBarKind.HP),
            mp=self.read_bar(frame, StatusBarKind.MP),
            fp=self.read_bar(frame, StatusBarKind.FP),
            target_hp=self.read_bar(frame, StatusBarKind.TARGET_HP),
        )
        logger.debug(f"Stats: {stats}")
        return stats
