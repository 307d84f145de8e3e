"""
Geometric sampling utilities.

Handles the coordinate math shared by geometric transforms:
- Bilinear point sampling with edge replication
- Rotation canvas sizing and inverse mapping
"""

import math
from typing import Tuple

import numpy as np

from rasterflow.core.constants import BufferConstants, ProcessingConstants
from rasterflow.core.enums import RotateCanvas
from rasterflow.core.image.buffer import PixelBuffer


def to_samples(values: np.ndarray) -> np.ndarray:
    """
    Round half-up and clamp float values to uint8 samples.

    Args:
        values: Float array of any shape

    Returns:
        uint8 array of the same shape
    """
    rounded = np.floor(values + 0.5)
    return np.clip(rounded, BufferConstants.SAMPLE_MIN, BufferConstants.SAMPLE_MAX).astype(
        np.uint8
    )


class Resampler:
    """
    Bilinear sampler over a source buffer.

    The source is read-only for the lifetime of the sampler, so one instance
    can be shared by every worker of a parallel operation.
    """

    def __init__(self, source: PixelBuffer):
        self.source = source
        self._pixels = source.pixels
        self._max_x = source.width - 1
        self._max_y = source.height - 1

    def sample_row(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """
        Sample every channel at a run of fractional coordinates.

        Corners are x0 = floor(x), x1 = x0 + 1 (same for y), clamped into
        the buffer so edge pixels are replicated rather than extrapolated.
        With a = x - x0 and b = y - y0 the result is
        (1-a)(1-b)*v00 + a(1-b)*v10 + (1-a)b*v01 + ab*v11, rounded half-up
        and clamped to [0, 255].

        Args:
            xs: Source x coordinates, shape (n,)
            ys: Source y coordinates, shape (n,)

        Returns:
            uint8 array of shape (n, channels)
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)

        x0f = np.floor(xs)
        y0f = np.floor(ys)
        a = (xs - x0f)[:, np.newaxis]
        b = (ys - y0f)[:, np.newaxis]

        x0 = np.clip(x0f, 0, self._max_x).astype(np.intp)
        x1 = np.clip(x0f + 1, 0, self._max_x).astype(np.intp)
        y0 = np.clip(y0f, 0, self._max_y).astype(np.intp)
        y1 = np.clip(y0f + 1, 0, self._max_y).astype(np.intp)

        pixels = self._pixels
        v00 = pixels[y0, x0].astype(np.float64)
        v10 = pixels[y0, x1].astype(np.float64)
        v01 = pixels[y1, x0].astype(np.float64)
        v11 = pixels[y1, x1].astype(np.float64)

        result = (
            (1.0 - a) * (1.0 - b) * v00
            + a * (1.0 - b) * v10
            + (1.0 - a) * b * v01
            + a * b * v11
        )
        return to_samples(result)

    def sample(self, x: float, y: float, channel: int) -> int:
        """Sample one channel at a single fractional coordinate."""
        if not 0 <= channel < self.source.channels:
            raise IndexError(f"Channel {channel} out of range for {self.source.channels} channels")
        return int(self.sample_row(np.array([x]), np.array([y]))[0, channel])


def sample_bilinear(buffer: PixelBuffer, x: float, y: float, channel: int) -> int:
    """Convenience wrapper around Resampler.sample for one-off lookups."""
    return Resampler(buffer).sample(x, y, channel)


def rotated_canvas_size(
    width: int, height: int, angle_degrees: float, canvas: RotateCanvas = RotateCanvas.SAME
) -> Tuple[int, int]:
    """
    Output (width, height) for a rotation.

    Args:
        width: Source width
        height: Source height
        angle_degrees: Rotation angle
        canvas: SAME keeps the source size, EXPAND fits the rotated bounding box

    Returns:
        Tuple of (width, height)
    """
    if canvas == RotateCanvas.SAME:
        return width, height

    theta = math.radians(angle_degrees)
    cos_t = abs(math.cos(theta))
    sin_t = abs(math.sin(theta))
    eps = ProcessingConstants.COORDINATE_EPSILON

    new_width = math.ceil(width * cos_t + height * sin_t - eps)
    new_height = math.ceil(width * sin_t + height * cos_t - eps)
    return max(1, new_width), max(1, new_height)


def inverse_rotate_row(
    y: int,
    dst_width: int,
    dst_height: int,
    src_width: int,
    src_height: int,
    angle_degrees: float,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Map one destination row back into source coordinates.

    Rotation is about the image centers; positive angles turn the image
    counter-clockwise as displayed (y axis pointing down).

    Returns:
        Tuple of (source xs, source ys), each of shape (dst_width,)
    """
    theta = math.radians(angle_degrees)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)

    dst_cx = (dst_width - 1) / 2.0
    dst_cy = (dst_height - 1) / 2.0
    src_cx = (src_width - 1) / 2.0
    src_cy = (src_height - 1) / 2.0

    u = np.arange(dst_width, dtype=np.float64) - dst_cx
    v = float(y) - dst_cy

    xs = u * cos_t - v * sin_t + src_cx
    ys = u * sin_t + v * cos_t + src_cy
    return xs, ys


def inside_source(xs: np.ndarray, ys: np.ndarray, src_width: int, src_height: int) -> np.ndarray:
    """Boolean mask of coordinates that land inside [0, w-1] x [0, h-1]."""
    eps = ProcessingConstants.COORDINATE_EPSILON
    return (
        (xs >= -eps)
        & (xs <= src_width - 1 + eps)
        & (ys >= -eps)
        & (ys <= src_height - 1 + eps)
    )
