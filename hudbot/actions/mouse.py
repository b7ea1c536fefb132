"""Mouse control for clicking targets in the game view.

Example:
    >>> from hudbot.actions.mouse import MouseController
    >>> from hudbot.models.geometry import Point
    >>>
    >>> controller = MouseController(screen_width=800, screen_height=600)
    >>> controller.click(Point(400, 320))
"""

from __future__ import annotations

import logging

from hudbot.actions.backend import InputBackend, NullInputBackend
from hudbot.models.geometry import Point

logger = logging.getLogger(__name__)


class MouseController:
    """Controller for mouse clicks inside the game viewport.

    Attributes:
        _screen_width: Viewport width in pixels.
        _screen_height: Viewport height in pixels.
        _current_position: Last position the pointer was moved to.
    """

    def __init__(
        self,
        backend: InputBackend | None = None,
        screen_width: int = 800,
        screen_height: int = 600,
    ) -> None:
        self._backend = backend if backend is not None else NullInputBackend()
        self._screen_width = screen_width
        self._screen_height = screen_height
        self._current_position = Point(0, 0)

        logger.debug(f"MouseController initialized for {screen_width}x{screen_height}")

    def _clamp_to_screen(self, x: int, y: int) -> Point:
        """Clamp coordinates to the viewport."""
        return Point(
            max(0, min(self._screen_width - 1, x)),
            max(0, min(self._screen_height - 1, y)),
        )

    @property
    def position(self) -> Point:
        return self._current_position

    def move(self, target: Point) -> Point:
        point = self._clamp_to_screen(target.x, target.y)
        self._backend.mouse_move(point.x, point.y)
        self._current_position = point
        return point

    def click(self, target: Point, button: str = "left") -> Point:
        """Move to a point and click it.

        Returns:
            The point actually clicked after clamping.
        """
        point = self.move(target)
        self._backend.mouse_click(point.x, point.y, button)
        logger.debug(f"Clicked {button} at ({point.x}, {point.y})")
        return point
