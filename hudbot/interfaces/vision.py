"""Vision interfaces: captured frames and the frame source they come from."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

import numpy as np
from PIL import Image


class Frame:
    """A captured RGBA frame with metadata."""

    __slots__ = ("pixels", "timestamp", "width", "height")

    def __init__(self, pixels: np.ndarray, timestamp: datetime | None = None) -> None:
        """Initialize a frame.

        Args:
            pixels: Array of shape (height, width, 4), dtype uint8, RGBA order.
            timestamp: When the frame was captured. Defaults to now.
        """
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an RGBA array, got shape {pixels.shape}")
        self.pixels = pixels
        self.timestamp = timestamp or datetime.now()
        self.height, self.width = pixels.shape[:2]

    @classmethod
    def from_image(cls, image: Image.Image, timestamp: datetime | None = None) -> Frame:
        """Build a frame from a PIL image of any mode."""
        rgba = image.convert("RGBA")
        return cls(np.asarray(rgba, dtype=np.uint8), timestamp)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def center(self) -> tuple[int, int]:
        return (self.width // 2, self.height // 2)


class FrameSource(ABC):
    """Something that can produce encoded screenshots of the game client."""

    @abstractmethod
    def is_running(self) -> bool:
        """Whether the client is available for capture."""
        ...

    @abstractmethod
    def screenshot(self) -> bytes:
        """Capture the client as encoded image bytes (PNG).

        Raises:
            VisionError: If the capture fails.
        """
        ...


class VisionError(Exception):
    """Error raised when vision operations fail."""

    pass
