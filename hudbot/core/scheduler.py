"""Cooldown and threshold scheduling over the 9x10 action slot grid.

A slot is eligible when it is enabled, of the requested type, not cooling
down, and its threshold is at least the requested value. Thresholds are
percentages: a Pill slot with threshold 60 fires while HP <= 60.

Example:
    >>> scheduler = SlotScheduler(config.support.slot_bars, activator=activator)
    >>> scheduler.refresh()
    >>> scheduler.trigger_all(SlotType.PILL, stats.hp)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from hudbot.models.slots import (
    SLOT_BAR_COUNT,
    SLOTS_PER_BAR,
    ActionSlot,
    SlotRef,
    SlotType,
    check_grid_shape,
)
from hudbot.vision.selection import monotonic_ms

if TYPE_CHECKING:
    from hudbot.actions.slots import SlotActivator
    from hudbot.core.session import SessionState

logger = logging.getLogger(__name__)


def _empty_usage() -> list[list[float | None]]:
    return [[None] * SLOTS_PER_BAR for _ in range(SLOT_BAR_COUNT)]


class SlotScheduler:
    """Tracks slot usage and picks slots to trigger.

    The usage grid holds the last time each slot was used, in
    milliseconds from the injected clock. Only the orchestrating thread
    touches it.
    """

    def __init__(
        self,
        slot_bars: Sequence[Sequence[ActionSlot]],
        clock: Callable[[], float] = monotonic_ms,
        activator: SlotActivator | None = None,
        session: SessionState | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            slot_bars: 9x10 grid of slot definitions.
            clock: Millisecond clock.
            activator: Sends slot hotkeys. Required for trigger_* methods.
            session: Session whose buff timer heals postpone.

        Raises:
            ValueError: If the grid is not 9x10.
        """
        self._slot_bars = check_grid_shape([list(bar) for bar in slot_bars])
        self._clock = clock
        self._activator = activator
        self._session = session
        self._usage = _empty_usage()

    @property
    def slot_bars(self) -> list[list[ActionSlot]]:
        return self._slot_bars

    def set_slot_bars(self, slot_bars: Sequence[Sequence[ActionSlot]]) -> None:
        """Swap in a new slot layout. Usage timestamps are kept."""
        self._slot_bars = check_grid_shape([list(bar) for bar in slot_bars])

    def last_used(self, ref: SlotRef) -> float | None:
        return self._usage[ref.bar][ref.slot]

    def is_cooling_down(self, ref: SlotRef) -> bool:
        return self._usage[ref.bar][ref.slot] is not None

    def refresh(self) -> None:
        """Clear usage entries whose cooldown has elapsed."""
        now = self._clock()
        for bar_index, bar in enumerate(self._usage):
            for slot_index, used_at in enumerate(bar):
                if used_at is None:
                    continue
                cooldown = self._slot_bars[bar_index][slot_index].effective_cooldown_ms
                if now - used_at > cooldown:
                    bar[slot_index] = None

    def reset(self) -> None:
        """Forget all slot usage."""
        self._usage = _empty_usage()
        logger.debug("Slot usage reset")

    def _eligible(self, slot_type: SlotType, threshold: int | None) -> list[tuple[SlotRef, ActionSlot]]:
        requested = threshold or 0
        eligible = []
        for bar_index, bar in enumerate(self._slot_bars):
            for slot_index, slot in enumerate(bar):
                if not slot.enabled or slot.slot_type != slot_type:
                    continue
                if self._usage[bar_index][slot_index] is not None:
                    continue
                if slot.effective_threshold >= requested:
                    eligible.append((SlotRef(bar_index, slot_index), slot))
        return eligible

    def select_one(self, slot_type: SlotType, threshold: int | None = None) -> SlotRef | None:
        """Pick the eligible slot with the lowest threshold.

        Equal thresholds resolve to the first slot in bar-then-slot order.
        """
        best: tuple[SlotRef, ActionSlot] | None = None
        for ref, slot in self._eligible(slot_type, threshold):
            if best is None or slot.effective_threshold < best[1].effective_threshold:
                best = (ref, slot)
        return best[0] if best is not None else None

    def select_all(self, slot_type: SlotType, threshold: int | None = None) -> list[SlotRef]:
        """All eligible slots in bar-then-slot order."""
        return [ref for ref, _slot in self._eligible(slot_type, threshold)]

    def mark_used(self, ref: SlotRef) -> None:
        self._usage[ref.bar][ref.slot] = self._clock()
        slot = self._slot_bars[ref.bar][ref.slot]
        if self._session is not None and slot.slot_type == SlotType.HEAL_SKILL:
            # Heals postpone the next buff
            self._session.postpone_buffs()

    def _trigger(self, ref: SlotRef) -> None:
        if self._activator is None:
            raise RuntimeError("SlotScheduler has no activator")
        self._activator.send(ref)
        self.mark_used(ref)

    def trigger_one(self, slot_type: SlotType, threshold: int | None = None) -> SlotRef | None:
        """Select, send and mark one slot."""
        ref = self.select_one(slot_type, threshold)
        if ref is not None:
            self._trigger(ref)
            logger.debug(f"Triggered {slot_type.value} slot {ref.bar}/{ref.slot}")
        return ref

    def trigger_all(self, slot_type: SlotType, threshold: int | None = None) -> list[SlotRef]:
        """Select, send and mark every eligible slot."""
        refs = self.select_all(slot_type, threshold)
        for ref in refs:
            self._trigger(ref)
        if refs:
            logger.debug(f"Triggered {len(refs)} {slot_type.value} slot(s) at value {threshold}")
        return refs
