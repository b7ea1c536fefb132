"""Test helpers: synthetic frames and a controllable clock."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: float = 10_000.0) -> None:
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


def blank_pixels(width: int = 800, height: int = 600) -> np.ndarray:
    """Opaque black RGBA pixels."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


def paint(
    pixels: np.ndarray,
    points: Iterable[tuple[int, int]],
    color: tuple[int, int, int],
    alpha: int = 255,
) -> None:
    for x, y in points:
        pixels[y, x] = (*color, alpha)


def paint_rect(
    pixels: np.ndarray,
    x: int,
    y: int,
    w: int,
    h: int,
    color: tuple[int, int, int],
) -> None:
    pixels[y : y + h, x : x + w] = (*color, 255)
