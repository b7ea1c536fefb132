"""Keyboard control for game input.

Presses are held for a short, slightly varied duration so the client
registers them like a human keystroke.

Example:
    >>> controller = KeyboardController()  # NullInputBackend
    >>> controller.press_key("z")
    >>> controller.hold_keys(["w", "space"])
    >>> controller.release_keys(["space", "w"])
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable

from hudbot.actions.backend import InputBackend, NullInputBackend

logger = logging.getLogger(__name__)

# Key aliases for common alternative names
KEY_ALIASES: dict[str, str] = {
    "return": "enter",
    "esc": "escape",
    "control": "ctrl",
    "spacebar": "space",
    " ": "space",
}


def calculate_key_press_duration(
    base_ms: float = 50.0,
    variance_ms: float = 20.0,
) -> float:
    """Calculate how long a key is held down.

    Returns:
        Duration in seconds, clamped to 20-150 ms.
    """
    duration_ms = base_ms + random.gauss(0, variance_ms)
    duration_ms = max(20, min(150, duration_ms))
    return duration_ms / 1000.0


def normalize_key(key: str) -> str:
    """Normalize a key name: lowercase and resolve aliases."""
    key_lower = key.lower()
    return KEY_ALIASES.get(key_lower, key_lower)


class KeyboardController:
    """Controller for keyboard input.

    Uses an InputBackend for actual input operations. If no backend
    is provided, uses NullInputBackend.
    """

    def __init__(
        self,
        backend: InputBackend | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the keyboard controller.

        Args:
            backend: Input backend for actual operations.
            sleep: Sleep function, replaceable in tests.
        """
        self._backend = backend if backend is not None else NullInputBackend()
        self._sleep = sleep
        self._held: list[str] = []

        logger.debug(f"KeyboardController initialized with backend={type(self._backend).__name__}")

    @property
    def held_keys(self) -> list[str]:
        """Keys currently held down, in press order."""
        return list(self._held)

    def key_down(self, key: str) -> None:
        normalized = normalize_key(key)
        self._backend.key_down(normalized)
        if normalized not in self._held:
            self._held.append(normalized)
        logger.debug(f"Key down: {normalized}")

    def key_up(self, key: str) -> None:
        normalized = normalize_key(key)
        self._backend.key_up(normalized)
        if normalized in self._held:
            self._held.remove(normalized)
        logger.debug(f"Key up: {normalized}")

    def press_key(self, key: str) -> None:
        """Press and release a single key."""
        self.key_down(key)
        self._sleep(calculate_key_press_duration())
        self.key_up(key)

    def hold_keys(self, keys: Iterable[str]) -> None:
        """Press several keys down, in order, without releasing them."""
        for key in keys:
            self.key_down(key)

    def release_keys(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.key_up(key)

    def hold_key_for(self, key: str, duration_ms: float) -> None:
        """Hold a key for a fixed duration."""
        self.key_down(key)
        self._sleep(duration_ms / 1000.0)
        self.key_up(key)

    def release_all(self) -> None:
        """Release every key still held, newest first."""
        for key in reversed(self._held):
            self._backend.key_up(key)
        self._held.clear()
