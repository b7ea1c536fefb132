"""Interfaces to the external collaborators hudbot consumes."""

from hudbot.interfaces.vision import Frame, FrameSource, VisionError

__all__ = ["Frame", "FrameSource", "VisionError"]
