"""Scripted character movement.

A movement is a list of steps played in order by a MovementPlayer:

    >>> player = MovementPlayer(keyboard)
    >>> player.play([
    ...     HoldKeys(["w", "space", "d"]),
    ...     Wait(200),
    ...     ReleaseKey("d"),
    ... ])
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from hudbot.actions.keyboard import KeyboardController

logger = logging.getLogger(__name__)


class RotationDirection(StrEnum):
    """Camera rotation direction."""

    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class PressKey:
    key: str


@dataclass(frozen=True)
class HoldKeys:
    keys: Sequence[str]


@dataclass(frozen=True)
class ReleaseKey:
    key: str


@dataclass(frozen=True)
class ReleaseKeys:
    keys: Sequence[str]


@dataclass(frozen=True)
class HoldKeyFor:
    key: str
    duration_ms: float


@dataclass(frozen=True)
class Rotate:
    """Rotate the camera by holding an arrow key."""

    direction: RotationDirection
    duration_ms: float


@dataclass(frozen=True)
class Wait:
    duration_ms: float


MovementStep = PressKey | HoldKeys | ReleaseKey | ReleaseKeys | HoldKeyFor | Rotate | Wait


class MovementPlayer:
    """Plays movement steps through a keyboard controller.

    Input injection is fire-and-forget; the player never waits for the
    client to react beyond the explicit Wait steps.
    """

    def __init__(
        self,
        keyboard: KeyboardController,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._keyboard = keyboard
        self._sleep = sleep

    @property
    def keyboard(self) -> KeyboardController:
        return self._keyboard

    def play(self, steps: Sequence[MovementStep]) -> None:
        for step in steps:
            self._play_step(step)

    def _play_step(self, step: MovementStep) -> None:
        match step:
            case PressKey(key=key):
                self._keyboard.press_key(key)
            case HoldKeys(keys=keys):
                self._keyboard.hold_keys(keys)
            case ReleaseKey(key=key):
                self._keyboard.key_up(key)
            case ReleaseKeys(keys=keys):
                self._keyboard.release_keys(keys)
            case HoldKeyFor(key=key, duration_ms=duration_ms):
                self._keyboard.hold_key_for(key, duration_ms)
            case Rotate(direction=direction, duration_ms=duration_ms):
                self._keyboard.hold_key_for(direction.value, duration_ms)
            case Wait(duration_ms=duration_ms):
                self._sleep(duration_ms / 1000.0)
            case _:
                raise ValueError(f"Unknown movement step: {step!r}")
