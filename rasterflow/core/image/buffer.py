"""
Pixel buffer - owned H x W x C grid of 8-bit samples.

The grid lives in a single contiguous NumPy allocation indexed as
``pixels[y, x, c]``, so allocation is all-or-nothing and there is no
partially built structure to unwind on failure.
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from rasterflow.core.constants import BufferConstants
from rasterflow.core.exceptions import AllocationError, ConfigError, DecodeError, EmptyBufferError
from rasterflow.core.memory_tracker import MemoryTracker, get_default_tracker

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


def _validate_dimensions(height: int, width: int, channels: int):
    """Raise ConfigError unless (height, width, channels) describes a valid buffer."""
    for name, value in (("height", height), ("width", width), ("channels", channels)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ConfigError(f"{name} must be an integer, got {value!r}", parameter=name)

    if height <= 0 or width <= 0:
        raise ConfigError(
            f"Buffer dimensions must be positive (height={height}, width={width})",
            parameter="height" if height <= 0 else "width",
        )

    if height > BufferConstants.MAX_DIMENSION or width > BufferConstants.MAX_DIMENSION:
        raise ConfigError(
            f"Buffer dimensions exceed {BufferConstants.MAX_DIMENSION} "
            f"(height={height}, width={width})",
            parameter="height" if height > BufferConstants.MAX_DIMENSION else "width",
        )

    if channels not in BufferConstants.SUPPORTED_CHANNELS:
        raise ConfigError(
            f"Channels must be one of {BufferConstants.SUPPORTED_CHANNELS}, got {channels}",
            parameter="channels",
        )


class PixelBuffer:
    """
    Owned image grid of shape (height, width, channels), dtype uint8.

    Exactly one owner at a time. Call release() (or use the buffer as a
    context manager) once the buffer is superseded.
    """

    def __init__(self, pixels: np.ndarray, tracker: MemoryTracker, token: int):
        # Use allocate(), load(), from_array() or clone() instead of calling this directly
        self._pixels: Optional[np.ndarray] = pixels
        self._tracker = tracker
        self._token: Optional[int] = token

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def allocate(
        cls,
        height: int,
        width: int,
        channels: int,
        fill: int = 0,
        tracker: Optional[MemoryTracker] = None,
    ) -> "PixelBuffer":
        """
        Allocate a new buffer filled with a constant sample value.

        Args:
            height: Number of rows (> 0)
            width: Number of pixels per row (> 0)
            channels: 1 (grayscale) or 3 (RGB)
            fill: Initial sample value
            tracker: Memory tracker to register with (default: process-wide)

        Returns:
            New PixelBuffer

        Raises:
            ConfigError: If the dimensions are invalid
            AllocationError: If the memory cannot be obtained
        """
        _validate_dimensions(height, width, channels)
        if not BufferConstants.SAMPLE_MIN <= fill <= BufferConstants.SAMPLE_MAX:
            raise ConfigError(f"Fill value must be within [0, 255], got {fill}", parameter="fill")

        tracker = tracker or get_default_tracker()
        nbytes = int(height) * int(width) * int(channels)

        token = tracker.reserve(nbytes)
        try:
            pixels = np.full((height, width, channels), fill, dtype=np.uint8)
        except MemoryError as e:
            tracker.rollback(token)
            logger.error(f"Failed to allocate {height}x{width}x{channels} buffer: {e}")
            raise AllocationError(
                f"Out of memory allocating {height}x{width}x{channels} buffer",
                requested_bytes=nbytes,
            ) from e

        return cls(pixels, tracker, token)

    @classmethod
    def load(
        cls,
        raw_bytes: BytesLike,
        width: int,
        height: int,
        channels: int,
        tracker: Optional[MemoryTracker] = None,
    ) -> "PixelBuffer":
        """
        Build a buffer from a flat row-major byte buffer.

        The input stride is ``width * channels``. Channel counts other than 1
        or 3 (e.g. RGBA or gray+alpha from a decoder) are coerced to
        grayscale by keeping the first sample of every pixel.

        Args:
            raw_bytes: Decoded samples, row-major
            width: Image width in pixels
            height: Image height in pixels
            channels: Channel count reported by the decoder

        Returns:
            New PixelBuffer owning a copy of the samples

        Raises:
            DecodeError: If the byte count does not match the dimensions
        """
        stride = channels if isinstance(channels, (int, np.integer)) and channels >= 1 else 1
        if stride in BufferConstants.SUPPORTED_CHANNELS:
            target_channels = stride
        else:
            target_channels = BufferConstants.FALLBACK_CHANNELS
        if target_channels != channels:
            logger.warning(
                f"Decoder reported {channels} channels, coercing to {target_channels}"
            )

        try:
            _validate_dimensions(height, width, target_channels)
        except ConfigError as e:
            raise DecodeError(f"Invalid decoded image geometry: {e}") from e

        flat = np.frombuffer(raw_bytes, dtype=np.uint8)
        expected = int(width) * int(height) * stride
        if flat.size != expected:
            raise DecodeError(
                f"Decoded buffer holds {flat.size} bytes, expected {expected} "
                f"for {width}x{height}x{stride}"
            )

        source = flat.reshape(height, width, stride)[:, :, :target_channels]

        buffer = cls.allocate(height, width, target_channels, tracker=tracker)
        np.copyto(buffer._pixels, source)
        return buffer

    @classmethod
    def from_array(
        cls, array: np.ndarray, tracker: Optional[MemoryTracker] = None
    ) -> "PixelBuffer":
        """
        Build a buffer from an existing array (copied).

        Args:
            array: uint8-compatible array of shape (H, W) or (H, W, C)

        Returns:
            New PixelBuffer
        """
        array = np.asarray(array)
        if array.ndim == 2:
            array = array[:, :, np.newaxis]
        if array.ndim != 3:
            raise ConfigError(f"Expected a 2D or 3D array, got shape {array.shape}")

        height, width, channels = array.shape
        buffer = cls.allocate(height, width, channels, tracker=tracker)
        np.copyto(buffer._pixels, np.clip(array, 0, 255).astype(np.uint8, copy=False))
        return buffer

    def clone(self, tracker: Optional[MemoryTracker] = None) -> "PixelBuffer":
        """
        Deep copy with independent storage.

        Raises:
            EmptyBufferError: If this buffer has been released
            AllocationError: If the copy cannot be allocated
        """
        pixels = self.pixels
        height, width, channels = pixels.shape
        copy = PixelBuffer.allocate(height, width, channels, tracker=tracker or self._tracker)
        np.copyto(copy._pixels, pixels)
        return copy

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def release(self):
        """Free the samples. Safe to call more than once."""
        if self._token is not None:
            self._tracker.release(self._token)
            self._token = None
        self._pixels = None

    @property
    def tracker(self) -> MemoryTracker:
        return self._tracker

    @property
    def is_empty(self) -> bool:
        return self._pixels is None

    def __enter__(self) -> "PixelBuffer":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def pixels(self) -> np.ndarray:
        """Underlying (H, W, C) uint8 array."""
        if self._pixels is None:
            raise EmptyBufferError("Buffer has been released")
        return self._pixels

    @property
    def height(self) -> int:
        return 0 if self._pixels is None else self._pixels.shape[0]

    @property
    def width(self) -> int:
        return 0 if self._pixels is None else self._pixels.shape[1]

    @property
    def channels(self) -> int:
        return 0 if self._pixels is None else self._pixels.shape[2]

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (self.height, self.width, self.channels)

    @property
    def nbytes(self) -> int:
        return 0 if self._pixels is None else int(self._pixels.nbytes)

    def row(self, y: int) -> np.ndarray:
        """View of row ``y`` with shape (W, C)."""
        return self.pixels[y]

    def flatten(self) -> bytes:
        """Row-major contiguous samples (stride = width * channels), the inverse of load()."""
        return self.pixels.tobytes(order="C")

    def __repr__(self) -> str:
        if self.is_empty:
            return "PixelBuffer(empty)"
        return f"PixelBuffer(width={self.width}, height={self.height}, channels={self.channels})"
