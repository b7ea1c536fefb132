"""Frame capture from the game client.

Example:
    >>> source = PlaywrightFrameSource(page)
    >>> capture = FrameCapture(source)
    >>> frame = capture.capture()
    >>> print(f"Captured {frame.width}x{frame.height}")
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from PIL import Image

from hudbot.interfaces.vision import Frame, FrameSource, VisionError

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)


class PlaywrightFrameSource(FrameSource):
    """Frame source backed by a Playwright page running the game client."""

    def __init__(self, page: Page) -> None:
        self._page = page

    def is_running(self) -> bool:
        return not self._page.is_closed()

    def screenshot(self) -> bytes:
        try:
            result: bytes = self._page.screenshot()
            return result
        except Exception as e:
            raise VisionError(f"Screenshot failed: {e}") from e


class FrameCapture:
    """Turns encoded screenshots from a FrameSource into RGBA frames.

    Only the latest frame is kept.
    """

    def __init__(self, source: FrameSource) -> None:
        self._source = source
        self._last_frame: Frame | None = None

    @property
    def last_frame(self) -> Frame | None:
        return self._last_frame

    def capture(self) -> Frame:
        """Capture a frame from the client.

        Returns:
            The captured frame.

        Raises:
            VisionError: If capture fails or the client is not running.
        """
        if not self._source.is_running():
            raise VisionError("Game client not running. Cannot capture frame.")

        try:
            timestamp = datetime.now()
            raw_bytes = self._source.screenshot()
            frame = Frame.from_image(Image.open(io.BytesIO(raw_bytes)), timestamp)
        except VisionError:
            raise
        except Exception as e:
            raise VisionError(f"Unexpected error during capture: {e}") from e

        self._last_frame = frame
        logger.debug(f"Captured frame: {frame.width}x{frame.height} at {timestamp}")
        return frame
