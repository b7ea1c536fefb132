"""Frame analysis: mobs, the target marker and client status.

ImageAnalyzer owns the most recent frame and composes pixel classification,
clustering and target selection into the queries behaviors need.

Example:
    >>> analyzer = ImageAnalyzer(FrameCapture(source))
    >>> if analyzer.capture():
    ...     mobs = analyzer.identify_mobs(config.farming)
    ...     target = analyzer.find_closest_mob(mobs, avoid_list, 325)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from hudbot.interfaces.vision import Frame, VisionError
from hudbot.models.geometry import Bounds, Point, PointCloud
from hudbot.models.targets import Target, TargetType
from hudbot.vision.capture import FrameCapture
from hudbot.vision.clustering import merge_cloud_into_targets
from hudbot.vision.color import ColorReference
from hudbot.vision.ocr import TextRecognizer, parse_latency
from hudbot.vision.pixels import PixelClassifier
from hudbot.vision.selection import AvoidanceList, find_closest_target
from hudbot.vision.stats import ClientStats, StatsReader

if TYPE_CHECKING:
    from hudbot.config.loader import FarmingConfig
    from hudbot.core.session import SessionState

logger = logging.getLogger(__name__)

TARGET_MARKER_COLOR = (246, 90, 106)
BLANK_TARGET_MARKER_COLOR = (164, 180, 226)
TARGET_MARKER_TOLERANCE = 5

# Latency readout in the top-left HUD
PING_AREA = Bounds(2, 110, 120, 20)


class ImageAnalyzer:
    """Runs detections against the current frame.

    A failed capture clears the current frame, so detections never run on
    stale data; queries then report "nothing found".
    """

    def __init__(
        self,
        capture: FrameCapture | None = None,
        classifier: PixelClassifier | None = None,
        stats_reader: StatsReader | None = None,
        recognizer: TextRecognizer | None = None,
    ) -> None:
        self._capture = capture
        self._classifier = classifier or PixelClassifier()
        self._stats_reader = stats_reader or StatsReader()
        self._recognizer = recognizer
        self._frame: Frame | None = None

    @property
    def frame(self) -> Frame | None:
        return self._frame

    def set_frame(self, frame: Frame | None) -> None:
        """Analyze an externally supplied frame (offline analysis, tests)."""
        self._frame = frame

    @property
    def center(self) -> Point | None:
        if self._frame is None:
            return None
        return Point(*self._frame.center)

    def capture(self) -> bool:
        """Capture a new frame.

        Returns:
            True if a frame is available for this tick.
        """
        if self._capture is None:
            return self._frame is not None
        try:
            self._frame = self._capture.capture()
            return True
        except VisionError as e:
            logger.warning(f"Failed to capture frame: {e}")
            self._frame = None
            return False

    def read_stats(self) -> ClientStats | None:
        """Read HUD stat bars, or None when there is no frame."""
        if self._frame is None:
            return None
        try:
            return self._stats_reader.read(self._frame)
        except VisionError as e:
            logger.warning(f"Failed to read stats: {e}")
            return None

    def identify_mobs(self, config: FarmingConfig) -> list[Target]:
        """Detect mob name tags, aggressive mobs first."""
        if self._frame is None:
            return []

        references = [
            ColorReference(config.passive_mobs_color, config.passive_tolerance, TargetType.MOB_PASSIVE),
            ColorReference(
                config.aggressive_mobs_color, config.aggressive_tolerance, TargetType.MOB_AGGRESSIVE
            ),
        ]
        try:
            clouds = self._classifier.collect(self._frame, references, exclude_health_bar=True)
        except VisionError as e:
            logger.warning(f"Mob detection failed: {e}")
            return []

        width_range = (config.min_mobs_name_width, config.max_mobs_name_width)
        passive = merge_cloud_into_targets(
            PointCloud(clouds[TargetType.MOB_PASSIVE]),
            TargetType.MOB_PASSIVE,
            width_range=width_range,
        )
        aggressive = merge_cloud_into_targets(
            PointCloud(clouds[TargetType.MOB_AGGRESSIVE]),
            TargetType.MOB_AGGRESSIVE,
            width_range=width_range,
        )
        logger.debug(f"Mobs: {len(aggressive)} aggressive, {len(passive)} passive")
        return aggressive + passive

    def _find_marker(self, color: tuple[int, int, int]) -> list[Target]:
        assert self._frame is not None
        references = [ColorReference(color, TARGET_MARKER_TOLERANCE, TargetType.TARGET_MARKER)]
        clouds = self._classifier.collect(self._frame, references)
        return merge_cloud_into_targets(
            PointCloud(clouds[TargetType.TARGET_MARKER]),
            TargetType.TARGET_MARKER,
        )

    def identify_target_marker(self) -> Target | None:
        """Locate the marker drawn under the current target.

        The red marker is tried first; the blank marker is tried once if
        it is missing. The largest cluster wins.
        """
        if self._frame is None:
            return None

        try:
            markers = self._find_marker(TARGET_MARKER_COLOR)
            if not markers:
                markers = self._find_marker(BLANK_TARGET_MARKER_COLOR)
        except VisionError as e:
            logger.warning(f"Target marker detection failed: {e}")
            return None

        if not markers:
            return None
        largest = max(markers, key=lambda t: t.bounds.size)
        return largest if largest.bounds.size > 1 else None

    def marker_distance(self, target: Target) -> int:
        """Distance from the frame center to a target's attack point."""
        center = self.center
        if center is None:
            raise VisionError("No frame available")
        return target.attack_point.distance_to(center)

    def find_closest_mob(
        self,
        mobs: Sequence[Target],
        avoid_list: AvoidanceList | None,
        max_distance: int,
    ) -> Target | None:
        center = self.center
        if center is None:
            return None
        return find_closest_target(mobs, center, max_distance, avoid_list)

    def read_latency(self) -> int | None:
        """OCR the ping readout. None means no information this tick."""
        if self._frame is None or self._recognizer is None:
            return None
        text = self._recognizer.recognize(self._frame, PING_AREA, "eng")
        if text is None:
            return None
        return parse_latency(text)

    def detect_disconnect(self, session: SessionState) -> bool:
        """Update the session's disconnect counter from the ping readout.

        Returns:
            True while the session is considered disconnected.
        """
        latency = self.read_latency()
        if latency is not None:
            session.record_latency(latency)
        return session.is_disconnected
