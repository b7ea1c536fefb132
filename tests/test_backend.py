"""Tests for input backends."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from hudbot.actions.backend import NullInputBackend, PlaywrightInputBackend


@pytest.fixture
def page() -> MagicMock:
    return MagicMock()


class TestPlaywrightInputBackend:
    """Tests for PlaywrightInputBackend."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [("f3", "F3"), ("space", " "), ("right", "ArrowRight"), ("w", "w"), ("5", "5")],
    )
    def test_key_names_translated(self, page: MagicMock, key: str, expected: str) -> None:
        """Key names are mapped to Playwright's names."""
        backend = PlaywrightInputBackend(page)

        backend.key_down(key)
        backend.key_up(key)

        page.keyboard.down.assert_called_once_with(expected)
        page.keyboard.up.assert_called_once_with(expected)

    def test_mouse(self, page: MagicMock) -> None:
        """Mouse events go to page.mouse."""
        backend = PlaywrightInputBackend(page)

        backend.mouse_move(10, 20)
        backend.mouse_click(30, 40)

        page.mouse.move.assert_called_once_with(10, 20)
        page.mouse.click.assert_called_once_with(30, 40, button="left")


class TestNullInputBackend:
    """Tests for NullInputBackend."""

    def test_all_operations_are_noops(self) -> None:
        """Every operation succeeds without side effects."""
        backend = NullInputBackend()
        backend.key_down("w")
        backend.key_up("w")
        backend.mouse_move(1, 2)
        backend.mouse_click(1, 2, "right")
