"""Vision package for reading the game HUD.

This package provides:
- PixelClassifier: Parallel color classification over frame rows
- ColorReference: One color signature with tolerance and category
- merge_cloud_into_targets: Two-pass spatial clustering into targets
- find_closest_target / AvoidanceList: Target selection with temporal avoidance
- StatsReader: HP/MP/FP and target HP bars
- FrameCapture / PlaywrightFrameSource: Frame acquisition
- TextRecognizer: Tesseract OCR for HUD text
- ImageAnalyzer: Per-frame composition of the above
"""

from hudbot.vision.analyzer import ImageAnalyzer
from hudbot.vision.capture import FrameCapture, PlaywrightFrameSource
from hudbot.vision.clustering import merge_cloud_into_targets
from hudbot.vision.color import ColorReference, pixel_matches
from hudbot.vision.ocr import TextRecognizer, parse_latency
from hudbot.vision.pixels import PixelClassifier, Roi
from hudbot.vision.selection import AvoidanceList, find_closest_target
from hudbot.vision.stats import ClientStats, StatsReader

__all__ = [
    "AvoidanceList",
    "ClientStats",
    "ColorReference",
    "FrameCapture",
    "ImageAnalyzer",
    "PixelClassifier",
    "PlaywrightFrameSource",
    "Roi",
    "StatsReader",
    "TextRecognizer",
    "find_closest_target",
    "merge_cloud_into_targets",
    "parse_latency",
    "pixel_matches",
]
