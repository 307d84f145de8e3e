"""
Image processing operations.

Each operation is a per-row transform executed by ParallelPixelOp:
- Brightness shift (in place)
- Gaussian blur (in place, reads a clone)
- Sobel edge detection (in place, reads a clone)
- Resize (new buffer, bilinear)
- Rotate (new buffer, bilinear)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List

import numpy as np

from rasterflow.core.constants import BufferConstants, ProcessingConstants
from rasterflow.core.enums import RotateCanvas
from rasterflow.core.exceptions import ConfigError
from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.image.geometry import (
    Resampler,
    inside_source,
    inverse_rotate_row,
    rotated_canvas_size,
    to_samples,
)
from rasterflow.core.image.kernels import Kernel, KernelFactory
from rasterflow.core.parallel import ParallelPixelOp
from rasterflow.core.utils.decorators import log_timing
from rasterflow.core.utils.row_partitioner import RowRange

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = ProcessingConstants.DEFAULT_WORKER_COUNT


# ----------------------------------------------------------------------
# Row transform contexts
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class BrightnessContext:
    delta: int


@dataclass(frozen=True, eq=False)
class ConvolutionContext:
    """Read-only source clone plus per-offset column lookups (edge replicated)."""

    source: PixelBuffer
    kernels: List[Kernel]
    columns: List[np.ndarray] = field(default_factory=list)

    @classmethod
    def build(cls, source: PixelBuffer, kernels: List[Kernel]) -> "ConvolutionContext":
        radius = max(k.radius for k in kernels)
        base = np.arange(source.width)
        columns = [np.clip(base + dx, 0, source.width - 1) for dx in range(-radius, radius + 1)]
        return cls(source=source, kernels=kernels, columns=columns)


@dataclass(frozen=True, eq=False)
class ResampleContext:
    resampler: Resampler
    scale_x: float = 1.0
    scale_y: float = 1.0
    angle: float = 0.0
    fill: int = 0


# ----------------------------------------------------------------------
# Row transforms
# ----------------------------------------------------------------------


def _brightness_rows(buffer: PixelBuffer, row_range: RowRange, ctx: BrightnessContext):
    rows = buffer.pixels[row_range.as_slice()]
    shifted = rows.astype(np.int32) + ctx.delta
    np.clip(shifted, BufferConstants.SAMPLE_MIN, BufferConstants.SAMPLE_MAX, out=shifted)
    rows[...] = shifted


def _correlate_row(
    src: np.ndarray, y: int, kernel: Kernel, columns: List[np.ndarray]
) -> np.ndarray:
    """Weighted neighborhood sum for one row, coordinates clamped to the edges."""
    height = src.shape[0]
    radius = kernel.radius
    center = len(columns) // 2
    acc = np.zeros(src.shape[1:], dtype=np.float64)

    for ky in range(-radius, radius + 1):
        src_row = src[min(max(y + ky, 0), height - 1)]
        for kx in range(-radius, radius + 1):
            weight = kernel.weights[ky + radius, kx + radius]
            if weight == 0:
                continue
            acc += weight * src_row[columns[center + kx]]
    return acc


def _gaussian_rows(buffer: PixelBuffer, row_range: RowRange, ctx: ConvolutionContext):
    src = ctx.source.pixels
    dst = buffer.pixels
    kernel = ctx.kernels[0]
    for y in row_range:
        dst[y] = to_samples(_correlate_row(src, y, kernel, ctx.columns))


def _sobel_rows(buffer: PixelBuffer, row_range: RowRange, ctx: ConvolutionContext):
    src = ctx.source.pixels
    dst = buffer.pixels
    kernel_x, kernel_y = ctx.kernels
    for y in row_range:
        gx = _correlate_row(src, y, kernel_x, ctx.columns)
        gy = _correlate_row(src, y, kernel_y, ctx.columns)
        dst[y] = to_samples(np.sqrt(gx * gx + gy * gy))


def _resize_rows(buffer: PixelBuffer, row_range: RowRange, ctx: ResampleContext):
    dst = buffer.pixels
    xs = np.arange(buffer.width, dtype=np.float64) * ctx.scale_x
    for y in row_range:
        ys = np.full(buffer.width, y * ctx.scale_y, dtype=np.float64)
        dst[y] = ctx.resampler.sample_row(xs, ys)


def _rotate_rows(buffer: PixelBuffer, row_range: RowRange, ctx: ResampleContext):
    dst = buffer.pixels
    source = ctx.resampler.source
    for y in row_range:
        xs, ys = inverse_rotate_row(
            y, buffer.width, buffer.height, source.width, source.height, ctx.angle
        )
        row = ctx.resampler.sample_row(xs, ys)
        row[~inside_source(xs, ys, source.width, source.height)] = ctx.fill
        dst[y] = row


# ----------------------------------------------------------------------
# Public operations
# ----------------------------------------------------------------------


def _check_integer(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise ConfigError(f"{name} must be an integer, got {value!r}", parameter=name)
    return int(value)


def _run_in_place(buffer: PixelBuffer, kernels: List[Kernel], row_transform, workers: int):
    """Run a convolution-style transform reading from a clone of the buffer."""
    source = buffer.clone()
    try:
        context = ConvolutionContext.build(source, kernels)
        ParallelPixelOp(workers).run(buffer, row_transform, context)
    except Exception:
        # Undo partial writes so a failed operation leaves the image as it was
        np.copyto(buffer.pixels, source.pixels)
        raise
    finally:
        source.release()


@log_timing
def adjust_brightness(
    buffer: PixelBuffer, delta: int, workers: int = DEFAULT_WORKERS
) -> PixelBuffer:
    """
    Add delta to every sample, clamping to [0, 255]. Operates in place.

    Args:
        buffer: Image to modify
        delta: Signed brightness shift
        workers: Number of worker threads

    Returns:
        The same buffer
    """
    delta = _check_integer("delta", delta)
    # Any shift beyond the sample range already saturates every sample
    delta = max(-BufferConstants.SAMPLE_MAX, min(delta, BufferConstants.SAMPLE_MAX))

    ParallelPixelOp(workers).run(buffer, _brightness_rows, BrightnessContext(delta))
    logger.info(f"Brightness adjusted by {delta} on {buffer!r} with {workers} workers")
    return buffer


@log_timing
def gaussian_blur(
    buffer: PixelBuffer, size: int, sigma: float, workers: int = DEFAULT_WORKERS
) -> PixelBuffer:
    """
    Blur with a normalized Gaussian kernel. Operates in place.

    Args:
        buffer: Image to modify
        size: Kernel side length (positive, odd)
        sigma: Gaussian standard deviation (> 0)
        workers: Number of worker threads

    Returns:
        The same buffer
    """
    kernel = KernelFactory.gaussian(size, sigma)
    _run_in_place(buffer, [kernel], _gaussian_rows, workers)
    logger.info(f"Gaussian blur size={size} sigma={sigma} applied to {buffer!r}")
    return buffer


@log_timing
def detect_edges(buffer: PixelBuffer, workers: int = DEFAULT_WORKERS) -> PixelBuffer:
    """
    Replace every sample with its Sobel gradient magnitude. Operates in place.

    Channels are processed independently.
    """
    _run_in_place(buffer, [KernelFactory.SOBEL_X, KernelFactory.SOBEL_Y], _sobel_rows, workers)
    logger.info(f"Sobel edge detection applied to {buffer!r}")
    return buffer


@log_timing
def resize(
    buffer: PixelBuffer, new_width: int, new_height: int, workers: int = DEFAULT_WORKERS
) -> PixelBuffer:
    """
    Resample to new dimensions with bilinear interpolation.

    Destination pixel (x, y) reads source coordinate
    (x * src_w / dst_w, y * src_h / dst_h).

    Args:
        buffer: Source image (not modified)
        new_width: Target width (> 0)
        new_height: Target height (> 0)
        workers: Number of worker threads

    Returns:
        New PixelBuffer; the caller owns both buffers
    """
    new_width = _check_integer("width", new_width)
    new_height = _check_integer("height", new_height)
    if new_width <= 0 or new_height <= 0:
        raise ConfigError(
            f"Target size must be positive, got {new_width}x{new_height}",
            parameter="width" if new_width <= 0 else "height",
        )

    resampler = Resampler(buffer)
    context = ResampleContext(
        resampler=resampler,
        scale_x=buffer.width / new_width,
        scale_y=buffer.height / new_height,
    )

    result = PixelBuffer.allocate(
        new_height, new_width, buffer.channels, tracker=buffer.tracker
    )
    try:
        ParallelPixelOp(workers).run(result, _resize_rows, context)
    except Exception:
        result.release()
        raise

    logger.info(f"Resized {buffer.width}x{buffer.height} -> {new_width}x{new_height}")
    return result


@log_timing
def rotate(
    buffer: PixelBuffer,
    angle_degrees: float,
    canvas: RotateCanvas = RotateCanvas.SAME,
    fill: int = ProcessingConstants.ROTATE_FILL_DEFAULT,
    workers: int = DEFAULT_WORKERS,
) -> PixelBuffer:
    """
    Rotate about the image center with bilinear interpolation.

    Positive angles rotate counter-clockwise as displayed. Destination
    pixels whose source coordinate falls outside the source image are set
    to ``fill`` instead of an edge-replicated sample.

    Args:
        buffer: Source image (not modified)
        angle_degrees: Rotation angle in degrees
        canvas: SAME keeps the source size, EXPAND fits the rotated bounding box
        fill: Background sample value for uncovered pixels
        workers: Number of worker threads

    Returns:
        New PixelBuffer; the caller owns both buffers
    """
    if isinstance(angle_degrees, bool) or not isinstance(angle_degrees, (int, float, np.number)):
        raise ConfigError(f"Angle must be a number, got {angle_degrees!r}", parameter="angle")
    if not math.isfinite(angle_degrees):
        raise ConfigError(f"Angle must be finite, got {angle_degrees}", parameter="angle")
    fill = _check_integer("fill", fill)
    if not BufferConstants.SAMPLE_MIN <= fill <= BufferConstants.SAMPLE_MAX:
        raise ConfigError(f"Fill must be within [0, 255], got {fill}", parameter="fill")
    try:
        canvas = RotateCanvas(canvas)
    except ValueError as e:
        raise ConfigError(f"Unknown canvas policy: {canvas!r}", parameter="canvas") from e

    resampler = Resampler(buffer)
    width, height = rotated_canvas_size(buffer.width, buffer.height, angle_degrees, canvas)
    context = ResampleContext(resampler=resampler, angle=float(angle_degrees), fill=fill)

    result = PixelBuffer.allocate(height, width, buffer.channels, tracker=buffer.tracker)
    try:
        ParallelPixelOp(workers).run(result, _rotate_rows, context)
    except Exception:
        result.release()
        raise

    logger.info(
        f"Rotated {buffer.width}x{buffer.height} by {angle_degrees} degrees "
        f"({canvas.value} canvas -> {width}x{height})"
    )
    return result
