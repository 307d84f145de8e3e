"""
Image format conversion utilities.

Handles the codec boundary around the core:
- File / bytes decoding into flat row-major samples (Pillow)
- Flat samples encoding to files / bytes (Pillow)
- Base64 export for API payloads (OpenCV)
- Textual matrix rendering
"""

import base64
import io
import logging
from pathlib import Path
from typing import List, Tuple, Union

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from rasterflow.core.constants import DisplayConstants
from rasterflow.core.exceptions import DecodeError, EncodeError
from rasterflow.core.image.buffer import PixelBuffer

logger = logging.getLogger(__name__)

# Modes Pillow can hand over as-is; everything else is converted to RGB first
NATIVE_MODES = {"L": 1, "LA": 2, "RGB": 3, "RGBA": 4}
ENCODE_MODES = {1: "L", 3: "RGB"}

DecodedImage = Tuple[bytes, int, int, int]


class ImageConverters:
    """Utilities for converting between pixel buffers and encoded images."""

    @staticmethod
    def _decode_pil(image: Image.Image) -> DecodedImage:
        if image.mode not in NATIVE_MODES:
            logger.debug(f"Converting {image.mode} image to RGB")
            image = image.convert("RGB")
        width, height = image.size
        return image.tobytes(), width, height, NATIVE_MODES[image.mode]

    @staticmethod
    def decode_file(path: Union[str, Path]) -> DecodedImage:
        """
        Decode an image file.

        Args:
            path: Image file path (PNG, JPEG, ...)

        Returns:
            Tuple of (raw_bytes, width, height, reported_channels)

        Raises:
            DecodeError: If the file is missing or not a readable image
        """
        path = Path(path)
        try:
            with Image.open(path) as image:
                image.load()
                return ImageConverters._decode_pil(image)
        except FileNotFoundError as e:
            raise DecodeError(f"Image not found: {path}") from e
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"Failed to decode {path}: {e}")
            raise DecodeError(f"Failed to decode {path}: {e}") from e

    @staticmethod
    def decode_bytes(data: bytes) -> DecodedImage:
        """
        Decode an in-memory encoded image.

        Returns:
            Tuple of (raw_bytes, width, height, reported_channels)
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                return ImageConverters._decode_pil(image)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error(f"Failed to decode image bytes: {e}")
            raise DecodeError(f"Failed to decode image bytes: {e}") from e

    @staticmethod
    def _to_pil(raw_bytes: bytes, width: int, height: int, channels: int) -> Image.Image:
        mode = ENCODE_MODES.get(channels)
        if mode is None:
            raise EncodeError(f"Cannot encode {channels}-channel image")
        expected = width * height * channels
        if len(raw_bytes) != expected:
            raise EncodeError(
                f"Buffer holds {len(raw_bytes)} bytes, expected {expected} "
                f"for {width}x{height}x{channels}"
            )
        return Image.frombytes(mode, (width, height), raw_bytes)

    @staticmethod
    def encode_file(
        raw_bytes: bytes, width: int, height: int, channels: int, path: Union[str, Path]
    ) -> Path:
        """
        Encode row-major samples to an image file. Format follows the extension.

        Args:
            raw_bytes: Samples, stride = width * channels
            width: Image width
            height: Image height
            channels: 1 or 3
            path: Destination file

        Returns:
            Path written

        Raises:
            EncodeError: If the samples are inconsistent or the file cannot be written
        """
        path = Path(path)
        image = ImageConverters._to_pil(raw_bytes, width, height, channels)
        try:
            image.save(path)
        except (OSError, ValueError, KeyError) as e:
            logger.error(f"Failed to save {path}: {e}")
            raise EncodeError(f"Failed to save {path}: {e}") from e
        return path

    @staticmethod
    def encode_bytes(
        raw_bytes: bytes, width: int, height: int, channels: int, format: str = "PNG"
    ) -> bytes:
        """Encode row-major samples to an in-memory image."""
        image = ImageConverters._to_pil(raw_bytes, width, height, channels)
        output = io.BytesIO()
        try:
            image.save(output, format=format)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError(f"Failed to encode image as {format}: {e}") from e
        return output.getvalue()

    @staticmethod
    def buffer_to_bgr(buffer: PixelBuffer) -> np.ndarray:
        """OpenCV view of a buffer: BGR for color, 2D for grayscale."""
        pixels = buffer.pixels
        if buffer.channels == 1:
            return np.ascontiguousarray(pixels[:, :, 0])
        return cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)

    @staticmethod
    def encode_image_to_base64(buffer: PixelBuffer, format: str = ".png") -> str:
        """
        Encode a buffer to a base64 string with OpenCV.

        Args:
            buffer: Image to encode
            format: Image format ('.png', '.jpg', etc.)

        Returns:
            Base64 encoded string
        """
        success, encoded = cv2.imencode(format, ImageConverters.buffer_to_bgr(buffer))
        if not success:
            raise EncodeError(f"OpenCV failed to encode image as {format}")
        return base64.b64encode(encoded.tobytes()).decode("utf-8")

    @staticmethod
    def from_base64(base64_string: str) -> DecodedImage:
        """Decode a base64 encoded image into (raw_bytes, width, height, channels)."""
        try:
            data = base64.b64decode(base64_string, validate=True)
        except ValueError as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
        return ImageConverters.decode_bytes(data)

    @staticmethod
    def format_rows(
        buffer: PixelBuffer, max_rows: int = DisplayConstants.DEFAULT_ROWS
    ) -> List[str]:
        """
        Render the first rows of a buffer as text.

        Grayscale samples print as right-aligned columns, RGB pixels as
        (r,g,b) tuples.

        Args:
            buffer: Image to render (read only)
            max_rows: Maximum number of rows to include

        Returns:
            List of text lines, with a trailing "... (N more rows)" when truncated
        """
        pixels = buffer.pixels
        shown = min(buffer.height, max(0, max_rows))
        lines = []

        for y in range(shown):
            if buffer.channels == 1:
                cells = [f"{v:3d}" for v in pixels[y, :, 0].tolist()]
            else:
                cells = [f"({r:3d},{g:3d},{b:3d})" for r, g, b in pixels[y].tolist()]
            lines.append(" ".join(cells))

        if buffer.height > shown:
            lines.append(f"... ({buffer.height - shown} more rows)")
        return lines

