"""Per-tick bot behaviors.

This module provides:
- Behavior: Base class with slot restorations and obstacle avoidance
- SupportBehavior: Follows a party member, keeps them alive and buffed
- FarmingBehavior: Finds, engages and kills mobs

Behaviors are driven by BotLoop, one run_iteration() per tick. Fixed waits
between sub-steps go through an injected sleep function so tests run
without real delays.

Example:
    >>> behavior = SupportBehavior(config.support, scheduler, movement, session)
    >>> behavior.start()
    >>> if analyzer.capture():
    ...     behavior.run_iteration(analyzer)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from hudbot.actions.mouse import MouseController
from hudbot.actions.movement import (
    HoldKeyFor,
    HoldKeys,
    MovementPlayer,
    PressKey,
    ReleaseKey,
    ReleaseKeys,
    Rotate,
    RotationDirection,
    Wait,
)
from hudbot.config.loader import FarmingConfig, SupportConfig
from hudbot.core.scheduler import SlotScheduler
from hudbot.core.session import AvoidanceState, SessionState
from hudbot.models.slots import SlotType
from hudbot.vision.analyzer import ImageAnalyzer
from hudbot.vision.stats import ClientStats

logger = logging.getLogger(__name__)

# Settle delays after sending input, in milliseconds
RESTORATION_SETTLE_MS = 100
BUFF_SETTLE_MS = 100

# Key the client binds to "follow / interact with target"
RECOVERY_KEY = "z"


class Behavior(ABC):
    """Shared machinery for tick behaviors.

    Attributes:
        session: Mutable state carried between ticks.
        scheduler: Slot cooldown scheduler.
    """

    def __init__(
        self,
        scheduler: SlotScheduler,
        movement: MovementPlayer,
        session: SessionState,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.scheduler = scheduler
        self.session = session
        self._movement = movement
        self._sleep = sleep

    @property
    def name(self) -> str:
        return type(self).__name__

    def start(self) -> None:
        """Begin a fresh session."""
        self.session.reset()
        self.scheduler.reset()
        logger.info(f"{self.name} started")

    def stop(self) -> None:
        """End the session: forget slot usage and release held keys."""
        self.scheduler.reset()
        self._movement.keyboard.release_all()
        logger.info(f"{self.name} stopped")

    @abstractmethod
    def run_iteration(self, analyzer: ImageAnalyzer) -> None:
        """Run one tick against the analyzer's current frame."""
        ...

    def _wait(self, duration_ms: float) -> None:
        self._sleep(duration_ms / 1000.0)

    def _check_restorations(self, stats: ClientStats, heal_target: bool) -> int:
        """Trigger every restoration slot whose threshold covers its stat.

        Returns:
            Number of slots triggered.
        """
        checks: list[tuple[int, SlotType]] = [
            (stats.hp, SlotType.PILL),
            (stats.hp, SlotType.FOOD),
        ]
        if heal_target:
            checks.append((stats.target_hp, SlotType.HEAL_SKILL))
        checks += [
            (stats.mp, SlotType.MP_RESTORER),
            (stats.fp, SlotType.FP_RESTORER),
        ]

        triggered = 0
        for value, slot_type in checks:
            # Zero means the bar was not found
            if value > 0:
                triggered += len(self.scheduler.trigger_all(slot_type, value))
        return triggered

    def _move_circle_pattern(self) -> None:
        """Jump forward while strafing, then back off and re-follow."""
        direction = self.session.obstacle_direction
        self._movement.play([
            HoldKeys(["w", "space", direction]),
            Wait(200),
            ReleaseKey(direction),
            Wait(500),
            ReleaseKeys(["space", "w"]),
            HoldKeyFor("s", 50),
            PressKey(RECOVERY_KEY),
            Wait(300),
        ])
        self.session.toggle_obstacle_direction()

    def _avoid_obstacle(self, cooldown_ms: int) -> None:
        elapsed = self.session.far_from_target_elapsed_ms()
        if (
            self.session.avoidance_state == AvoidanceState.AVOIDING
            and elapsed is not None
            and elapsed > cooldown_ms
        ):
            logger.debug(f"Obstacle avoidance maneuver after {elapsed:.0f}ms")
            self._move_circle_pattern()
        else:
            self._movement.play([PressKey(RECOVERY_KEY)])


class SupportBehavior(Behavior):
    """Follows the selected party member.

    Each tick: revive a dead target, restore HP/MP/FP and the target's HP,
    then either buff the target when close or work around obstacles when
    it is lost or too far away.
    """

    def __init__(
        self,
        config: SupportConfig,
        scheduler: SlotScheduler,
        movement: MovementPlayer,
        session: SessionState,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(scheduler, movement, session, sleep)
        self._config = config

    def update_config(self, config: SupportConfig) -> None:
        self._config = config
        self.scheduler.set_slot_bars(config.slot_bars)

    def run_iteration(self, analyzer: ImageAnalyzer) -> None:
        stats = analyzer.read_stats()
        if stats is None:
            return

        marker = analyzer.identify_target_marker()
        self.scheduler.refresh()

        if stats.target_hp == 0 and marker is not None:
            ref = self.scheduler.trigger_one(SlotType.REZ_SKILL)
            logger.info(f"Target is down, rez slot: {ref}")
            self.scheduler.reset()
            return

        self._check_restorations(stats, heal_target=True)
        self._wait(RESTORATION_SETTLE_MS)

        if stats.target_hp <= 0:
            return

        if marker is None:
            logger.debug("Target marker not found")
            self.session.enter_avoidance()
            self._avoid_obstacle(self._config.obstacle_avoidance_cooldown_ms)
            return

        distance = analyzer.marker_distance(marker)
        if distance > self._config.marker_distance_threshold:
            logger.debug(f"Target is {distance}px away")
            self.session.enter_avoidance()
            self._avoid_obstacle(self._config.obstacle_avoidance_cooldown_ms)
        else:
            self.session.leave_avoidance()
            self._check_buffs()

    def _check_buffs(self) -> None:
        elapsed = self.session.now() - self.session.last_buff_ms
        if elapsed > self._config.interval_between_buffs_ms:
            self.session.postpone_buffs()
            self.scheduler.trigger_one(SlotType.BUFF_SKILL)
            self._wait(BUFF_SETTLE_MS)


class FarmingBehavior(Behavior):
    """Finds and kills mobs.

    Mobs that do not engage within mobs_timeout_ms after being clicked
    are avoided for avoid_duration_ms, so an unreachable mob does not
    stall the bot.
    """

    def __init__(
        self,
        config: FarmingConfig,
        scheduler: SlotScheduler,
        movement: MovementPlayer,
        session: SessionState,
        mouse: MouseController,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(scheduler, movement, session, sleep)
        self._config = config
        self._mouse = mouse

    def update_config(self, config: FarmingConfig) -> None:
        self._config = config
        self.scheduler.set_slot_bars(config.slot_bars)

    def run_iteration(self, analyzer: ImageAnalyzer) -> None:
        stats = analyzer.read_stats()
        if stats is None:
            return

        self.scheduler.refresh()
        if self._check_restorations(stats, heal_target=False):
            self._wait(RESTORATION_SETTLE_MS)

        marker = analyzer.identify_target_marker()
        if marker is not None:
            if stats.target_hp > 0:
                self.session.clear_engagement()
                self.scheduler.trigger_one(SlotType.ATTACK_SKILL)
            else:
                logger.info("Target killed")
                self.session.clear_engagement()
                self.scheduler.reset()
            return

        self._search(analyzer)

    def _expire_pending(self) -> None:
        """Give up on a clicked mob that never engaged."""
        session = self.session
        if session.pending_target is None:
            return

        elapsed = session.pending_elapsed_ms() or 0.0
        timeout = self._config.mobs_timeout_ms
        if timeout > 0 and elapsed > timeout:
            logger.info(f"Mob did not engage within {timeout}ms, avoiding it")
            session.avoid_list.add(
                session.pending_target.avoid_region, self._config.avoid_duration_ms
            )
            session.clear_engagement()
        elif elapsed > self._config.obstacle_avoidance_cooldown_ms:
            # Still walking towards the mob, something may be in the way
            since = session.far_from_target_elapsed_ms()
            if since is None or since > self._config.obstacle_avoidance_cooldown_ms:
                self._move_circle_pattern()
                session.far_from_target_since_ms = session.now()
                session.avoidance_state = AvoidanceState.AVOIDING

    def _search(self, analyzer: ImageAnalyzer) -> None:
        session = self.session
        session.avoid_list.prune()
        mobs = analyzer.identify_mobs(self._config)
        self._expire_pending()

        avoid_list = session.avoid_list if self._config.prevent_already_attacked else None
        target = analyzer.find_closest_mob(mobs, avoid_list, self._config.max_target_distance)
        if target is None:
            logger.debug(f"No mob to engage among {len(mobs)}, rotating")
            self._movement.play([
                Rotate(RotationDirection.RIGHT, self._config.circle_pattern_rotation_duration_ms),
            ])
            return

        self._mouse.click(target.attack_point)
        session.engage(target)
        logger.debug(f"Clicked {target.target_type.value} at {target.attack_point}")
