"""Raw input sinks.

Controllers (KeyboardController, MouseController, MovementPlayer) decide
what to press and for how long; a backend only delivers the key and mouse
events to the game client.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)


class InputBackend(ABC):
    """Where key and mouse events end up.

    Key names are lower-case names such as ``"w"``, ``"space"`` or ``"f1"``.
    """

    @abstractmethod
    def key_down(self, key: str) -> None: ...

    @abstractmethod
    def key_up(self, key: str) -> None: ...

    @abstractmethod
    def mouse_move(self, x: int, y: int) -> None: ...

    @abstractmethod
    def mouse_click(self, x: int, y: int, button: str = "left") -> None: ...


class NullInputBackend(InputBackend):
    """Drops every event. Used for dry runs and as the controllers' default."""

    def key_down(self, key: str) -> None:
        logger.debug(f"[dry-run] down {key}")

    def key_up(self, key: str) -> None:
        logger.debug(f"[dry-run] up {key}")

    def mouse_move(self, x: int, y: int) -> None:
        logger.debug(f"[dry-run] move ({x}, {y})")

    def mouse_click(self, x: int, y: int, button: str = "left") -> None:
        logger.debug(f"[dry-run] {button} click ({x}, {y})")


# Names that differ from what Playwright's keyboard API expects
DOM_KEY_NAMES: dict[str, str] = {
    "space": " ",
    "enter": "Enter",
    "escape": "Escape",
    "tab": "Tab",
    "shift": "Shift",
    "ctrl": "Control",
    "alt": "Alt",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
}
DOM_KEY_NAMES.update({f"f{n}": f"F{n}" for n in range(1, 13)})


def dom_key(key: str) -> str:
    return DOM_KEY_NAMES.get(key.lower(), key)


class PlaywrightInputBackend(InputBackend):
    """Sends events to the game page through ``page.keyboard`` and ``page.mouse``."""

    def __init__(self, page: Page) -> None:
        self._keyboard = page.keyboard
        self._mouse = page.mouse

    def key_down(self, key: str) -> None:
        self._keyboard.down(dom_key(key))

    def key_up(self, key: str) -> None:
        self._keyboard.up(dom_key(key))

    def mouse_move(self, x: int, y: int) -> None:
        self._mouse.move(x, y)

    def mouse_click(self, x: int, y: int, button: str = "left") -> None:
        logger.debug(f"{button} click at ({x}, {y})")
        self._mouse.click(x, y, button=button)  # type: ignore[arg-type]
