"""
Centralized enums for rasterflow.
"""

from enum import Enum


class Operation(str, Enum):
    """Pixel operations exposed by the engine."""

    LOAD = "load"
    BRIGHTNESS = "brightness"
    GAUSSIAN_BLUR = "gaussian_blur"
    RESIZE = "resize"
    ROTATE = "rotate"
    DETECT_EDGES = "detect_edges"
    SAVE = "save"
    RELEASE = "release"


class RotateCanvas(str, Enum):
    """Output canvas policy for rotation."""

    SAME = "same"  # keep the source width/height, corners are cropped
    EXPAND = "expand"  # grow to the rotated bounding box


class ColorMode(str, Enum):
    """Channel layouts understood by the core."""

    GRAYSCALE = "grayscale"
    RGB = "rgb"

    @classmethod
    def from_channels(cls, channels: int) -> "ColorMode":
        return cls.RGB if channels == 3 else cls.GRAYSCALE
