"""Parallel pixel classification.

Rows of a frame are scanned concurrently on a thread pool. Each row emits
``(Point, category)`` pairs into one bounded queue that the caller drains
through an iterator. Producers block when the queue is full, so a slow
consumer applies backpressure instead of losing points.

Example:
    >>> classifier = PixelClassifier()
    >>> refs = [ColorReference((234, 234, 149), 5, TargetType.MOB_PASSIVE)]
    >>> for point, category in classifier.classify(frame, refs):
    ...     clouds[category].append(point)
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from hudbot.interfaces.vision import Frame, VisionError
from hudbot.models.geometry import Point
from hudbot.vision.color import OPAQUE_ALPHA, CategoryT, ColorReference, match_mask

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 4096

# Vertical bands of UI chrome that never contain game entities. A band of N
# rows skips exactly N rows: y < top and y >= height - bottom.
IGNORE_AREA_TOP = 0
IGNORE_AREA_BOTTOM = 110

# Player health bar region, inclusive; its colors resemble mob names
HEALTH_BAR_MAX_X = 250
HEALTH_BAR_MAX_Y = 110

_DONE = object()


@dataclass(frozen=True)
class Roi:
    """Region of interest, inclusive on both ends.

    A max of 0 means "use the full extent" of the frame.
    """

    min_x: int = 0
    min_y: int = 0
    max_x: int = 0
    max_y: int = 0

    def resolve(self, width: int, height: int) -> tuple[int, int, int, int]:
        """Clamp to a frame, returning (min_x, min_y, max_x, max_y)."""
        max_x = width - 1 if self.max_x == 0 else min(self.max_x, width - 1)
        max_y = height - 1 if self.max_y == 0 else min(self.max_y, height - 1)
        return (max(0, self.min_x), max(0, self.min_y), max_x, max_y)


class PixelClassifier:
    """Scans frames for pixels matching a list of reference colors.

    Attributes:
        ignore_area_top: Rows above this are skipped.
        ignore_area_bottom: This many rows at the bottom are skipped.
    """

    def __init__(
        self,
        ignore_area_top: int = IGNORE_AREA_TOP,
        ignore_area_bottom: int = IGNORE_AREA_BOTTOM,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        max_workers: int | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            ignore_area_top: Height of the top ignore band.
            ignore_area_bottom: Height of the bottom ignore band.
            queue_size: Capacity of the shared result queue.
            max_workers: Thread pool size. None lets the executor decide.
        """
        self.ignore_area_top = ignore_area_top
        self.ignore_area_bottom = ignore_area_bottom
        self._queue_size = queue_size
        self._max_workers = max_workers

    def _rows(self, height: int, min_y: int, max_y: int) -> list[int]:
        bottom_limit = height - self.ignore_area_bottom
        return [
            y
            for y in range(min_y, max_y + 1)
            if y >= self.ignore_area_top and y < bottom_limit
        ]

    @staticmethod
    def classify_row(
        row: np.ndarray,
        references: Sequence[ColorReference[CategoryT]],
    ) -> np.ndarray:
        """Index of the first matching reference for each pixel, -1 if none.

        Non-opaque pixels never match.
        """
        assigned = np.full(row.shape[0], -1, dtype=np.int16)
        opaque = row[:, 3] == OPAQUE_ALPHA
        for index, reference in enumerate(references):
            hit = opaque & (assigned < 0) & match_mask(row, reference.color, reference.tolerance)
            assigned[hit] = index
        return assigned

    def classify(
        self,
        frame: Frame,
        references: Sequence[ColorReference[CategoryT]],
        roi: Roi | None = None,
        exclude_health_bar: bool = False,
    ) -> Iterator[tuple[Point, CategoryT]]:
        """Classify the pixels of a frame.

        The returned iterator yields points in no particular order and can
        only be consumed once. Closing it early stops the remaining rows.

        Args:
            frame: Frame to scan.
            references: Reference colors, tested in order; first match wins.
            roi: Optional region of interest.
            exclude_health_bar: Skip the top-left health bar region.

        Yields:
            (point, category) for every matching pixel.

        Raises:
            VisionError: If a row scan fails.
        """
        min_x, min_y, max_x, max_y = (roi or Roi()).resolve(frame.width, frame.height)
        rows = self._rows(frame.height, min_y, max_y)
        if not references or not rows or min_x > max_x:
            return

        pixels = frame.pixels
        results: queue.Queue[object] = queue.Queue(maxsize=self._queue_size)
        stop = threading.Event()
        errors: list[Exception] = []

        def scan_row(y: int) -> None:
            if stop.is_set():
                return
            assigned = self.classify_row(pixels[y, min_x : max_x + 1], references)
            if exclude_health_bar and y <= HEALTH_BAR_MAX_Y:
                assigned[: max(0, HEALTH_BAR_MAX_X + 1 - min_x)] = -1
            for offset in np.flatnonzero(assigned >= 0):
                if stop.is_set():
                    return
                results.put((Point(min_x + int(offset), y), references[assigned[offset]].category))

        def produce() -> None:
            try:
                with ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix="pixel-scan",
                ) as pool:
                    futures = [pool.submit(scan_row, y) for y in rows]
                    for future in futures:
                        exc = future.exception()
                        if exc is not None and not errors:
                            errors.append(exc)  # type: ignore[arg-type]
                            stop.set()
            finally:
                results.put(_DONE)

        producer = threading.Thread(target=produce, name="pixel-classifier", daemon=True)
        producer.start()

        finished = False
        try:
            while True:
                item = results.get()
                if item is _DONE:
                    finished = True
                    break
                yield item  # type: ignore[misc]
        finally:
            if not finished:
                # Unblock producers so the pool can wind down
                stop.set()
                while results.get() is not _DONE:
                    pass
            producer.join()

        if errors:
            raise VisionError(f"Pixel classification failed: {errors[0]}") from errors[0]

    def collect(
        self,
        frame: Frame,
        references: Sequence[ColorReference[CategoryT]],
        roi: Roi | None = None,
        exclude_health_bar: bool = False,
    ) -> dict[CategoryT, list[Point]]:
        """Drain classify() into one point list per category."""
        clouds: dict[CategoryT, list[Point]] = {ref.category: [] for ref in references}
        for point, category in self.classify(frame, references, roi, exclude_health_bar):
            clouds[category].append(point)
        logger.debug(
            "Classified pixels: "
            + ", ".join(f"{category}={len(points)}" for category, points in clouds.items())
        )
        return clouds
