"""Text recognition for HUD status regions.

Example:
    >>> recognizer = TextRecognizer()
    >>> text = recognizer.recognize(frame, Bounds(2, 110, 120, 20))
    >>> latency = parse_latency(text or "")
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from hudbot.interfaces.vision import Frame, VisionError

if TYPE_CHECKING:
    from PIL import Image

    from hudbot.models.geometry import Bounds

logger = logging.getLogger(__name__)

LATENCY_PATTERN = re.compile(r"(\S+?)\s*ms", re.IGNORECASE)

# OCR often reads a zero latency as a letter O
_ZERO_READINGS = frozenset(["0", "O", "o"])


def parse_latency(text: str) -> int | None:
    """Parse a ping readout such as "42ms".

    Returns:
        The latency in ms (0 for "0ms", "Oms" or "oms"), or None when
        the text carries no readout.
    """
    match = LATENCY_PATTERN.search(text)
    if not match:
        return None
    value = match.group(1)
    if value in _ZERO_READINGS:
        return 0
    if value.isdigit():
        return int(value)
    return None


class TextRecognizer:
    """pytesseract-backed recognizer for small HUD regions.

    Attributes:
        _language: Default OCR language code.
    """

    def __init__(self, language: str = "eng") -> None:
        self._language = language
        self._tesseract_available = self._check_tesseract()

        if self._tesseract_available:
            logger.info("TextRecognizer initialized with pytesseract")
        else:
            logger.warning("tesseract binary not available, text recognition disabled")

    def _check_tesseract(self) -> bool:
        """Check that the tesseract binary can be called."""
        try:
            import pytesseract

            pytesseract.get_tesseract_version()
            return True
        except Exception:
            return False

    def _run_ocr(self, image: Image.Image, language: str) -> str:
        """Run OCR on an image. Override or mock for testing."""
        if not self._tesseract_available:
            return ""

        import pytesseract

        try:
            text: str = pytesseract.image_to_string(image.convert("RGB"), lang=language)
            return text
        except Exception as e:
            raise VisionError(f"OCR processing failed: {e}") from e

    def recognize(
        self,
        frame: Frame,
        region: Bounds,
        language: str | None = None,
    ) -> str | None:
        """Recognize the text inside a region of a frame.

        Args:
            frame: Frame to read from.
            region: Area to crop before recognition.
            language: Language hint, defaults to the recognizer's language.

        Returns:
            The recognized text, or None if recognition failed.
        """
        image = frame.to_image()
        left, top, right, bottom = region.as_box()
        image = image.crop(
            (max(0, left), max(0, top), min(frame.width, right), min(frame.height, bottom))
        )

        try:
            text = self._run_ocr(image, language or self._language)
        except VisionError as e:
            logger.warning(f"Text recognition failed for {region!r}: {e}")
            return None

        logger.debug(f"Recognized {text!r} in {region!r}")
        return text
