"""Actions package for sending input to the game client.

This package provides:
- InputBackend: Interface for actual input mechanisms
- PlaywrightInputBackend: Backend using Playwright's page.keyboard/mouse
- NullInputBackend: No-op backend for testing
- KeyboardController: Key presses, holds and releases
- MouseController: Clicks inside the game viewport
- MovementPlayer: Plays scripted movement steps
- SlotActivator: Triggers action slots through hotkeys
"""

from hudbot.actions.backend import InputBackend, NullInputBackend, PlaywrightInputBackend
from hudbot.actions.keyboard import KeyboardController
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
from hudbot.actions.slots import SlotActivator

__all__ = [
    "HoldKeyFor",
    "HoldKeys",
    "InputBackend",
    "KeyboardController",
    "MouseController",
    "MovementPlayer",
    "NullInputBackend",
    "PlaywrightInputBackend",
    "PressKey",
    "ReleaseKey",
    "ReleaseKeys",
    "Rotate",
    "RotationDirection",
    "SlotActivator",
    "Wait",
]
