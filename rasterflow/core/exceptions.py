"""
Error taxonomy for the raster engine.

Every failure path in the core raises one of these so callers can tell
allocation, configuration, codec and concurrency problems apart.
"""

from typing import Optional


class RasterError(Exception):
    """Base class for all raster engine errors."""


class AllocationError(RasterError):
    """Pixel storage could not be allocated (out of memory or over the tracker ceiling)."""

    def __init__(self, message: str, requested_bytes: Optional[int] = None):
        super().__init__(message)
        self.requested_bytes = requested_bytes


class ConfigError(RasterError):
    """Invalid operation parameter (kernel size, sigma, dimensions, angle...)."""

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class DecodeError(RasterError):
    """Input bytes or file could not be turned into a pixel buffer."""


class EncodeError(RasterError):
    """A pixel buffer could not be written out by the codec."""


class ConcurrencyError(RasterError):
    """A worker failed to start or crashed while processing its rows."""


class EmptyBufferError(RasterError):
    """Operation attempted on a buffer that has been released."""


class ImageNotFoundError(RasterError, KeyError):
    """No stored image has the requested ID."""

    def __init__(self, image_id: str):
        super().__init__(f"Image not found: {image_id}")
        self.image_id = image_id

    def __str__(self) -> str:
        return f"Image not found: {self.image_id}"
