"""Tests for mouse control."""

from __future__ import annotations

from unittest.mock import MagicMock, call

from hudbot.actions.mouse import MouseController
from hudbot.models.geometry import Point


class TestMouseController:
    """Tests for MouseController."""

    def test_click_moves_then_clicks(self) -> None:
        """A click moves the pointer first."""
        backend = MagicMock()
        mouse = MouseController(backend)

        clicked = mouse.click(Point(400, 320))

        assert clicked == Point(400, 320)
        assert backend.mock_calls == [
            call.mouse_move(400, 320),
            call.mouse_click(400, 320, "left"),
        ]
        assert mouse.position == Point(400, 320)

    def test_clamps_to_viewport(self) -> None:
        """Points off the viewport are clamped to its edge."""
        backend = MagicMock()
        mouse = MouseController(backend, screen_width=800, screen_height=600)

        assert mouse.click(Point(900, 650)) == Point(799, 599)
        assert mouse.move(Point(-5, -1)) == Point(0, 0)

    def test_right_click(self) -> None:
        """The button is forwarded to the backend."""
        backend = MagicMock()
        MouseController(backend).click(Point(10, 10), button="right")
        backend.mouse_click.assert_called_once_with(10, 10, "right")
