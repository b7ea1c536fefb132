"""Activation of action slots through the client's hotkeys.

Bars are selected with F1-F9 and slots are triggered with the digit keys
0-9, so slot (2, 5) is sent as F3 followed by 5.
"""

from __future__ import annotations

import logging

from hudbot.actions.keyboard import KeyboardController
from hudbot.models.slots import SLOT_BAR_COUNT, SLOTS_PER_BAR, SlotRef

logger = logging.getLogger(__name__)


def slot_keys(ref: SlotRef) -> tuple[str, str]:
    """Hotkeys for a slot: (bar key, slot key)."""
    if not (0 <= ref.bar < SLOT_BAR_COUNT and 0 <= ref.slot < SLOTS_PER_BAR):
        raise ValueError(f"Slot {ref} is outside the {SLOT_BAR_COUNT}x{SLOTS_PER_BAR} grid")
    return (f"f{ref.bar + 1}", str(ref.slot))


class SlotActivator:
    """Sends slot activations to the client."""

    def __init__(self, keyboard: KeyboardController) -> None:
        self._keyboard = keyboard

    def send(self, ref: SlotRef) -> None:
        bar_key, slot_key = slot_keys(ref)
        self._keyboard.press_key(bar_key)
        self._keyboard.press_key(slot_key)
        logger.debug(f"Sent slot bar={ref.bar} slot={ref.slot}")
