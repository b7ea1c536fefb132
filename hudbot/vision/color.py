"""Color signature matching.

A pixel matches a reference color when every RGB channel is within the
tolerance of the reference. The scalar path uses Python ints and the
vectorized path widens to int16, so neither can wrap around.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

import numpy as np

CategoryT = TypeVar("CategoryT")

OPAQUE_ALPHA = 255


def pixel_matches(
    observed: Sequence[int],
    reference: Sequence[int],
    tolerance: int,
) -> bool:
    """Check if an observed pixel matches a reference color.

    Args:
        observed: (R, G, B) or (R, G, B, A). Alpha is ignored here; callers
            skip non-opaque pixels before matching.
        reference: (R, G, B) reference color.
        tolerance: Allowed per-channel absolute difference, 0-255.

    Returns:
        True if all three channels are within tolerance.
    """
    return all(abs(int(a) - int(b)) <= tolerance for a, b in zip(observed[:3], reference[:3]))


def match_mask(pixels: np.ndarray, reference: Sequence[int], tolerance: int) -> np.ndarray:
    """Vectorized pixel_matches over an (..., 3+) uint8 array.

    Returns:
        Boolean array with the leading shape of ``pixels``.
    """
    diff = np.abs(pixels[..., :3].astype(np.int16) - np.asarray(reference[:3], dtype=np.int16))
    return np.all(diff <= tolerance, axis=-1)


class ColorReference(Generic[CategoryT]):
    """A reference color, its tolerance and the category a match produces."""

    __slots__ = ("color", "tolerance", "category")

    def __init__(self, color: Sequence[int], tolerance: int, category: CategoryT) -> None:
        if len(color) != 3:
            raise ValueError(f"Reference color must be (R, G, B), got {tuple(color)}")
        self.color = tuple(int(c) for c in color)
        self.tolerance = max(0, min(255, int(tolerance)))
        self.category = category

    def __repr__(self) -> str:
        return f"ColorReference({self.color}, tol={self.tolerance}, {self.category!r})"

    def matches(self, observed: Sequence[int]) -> bool:
        return pixel_matches(observed, self.color, self.tolerance)
