"""
Image Service - Operation invocation surface over stored images.

This service is the explicit state handle the outer layers (API, CLI)
call into: it loads and saves images, runs pixel operations on stored
buffers, and records every operation in the history.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from rasterflow.config import ProcessingConfig
from rasterflow.core.constants import HistoryConstants
from rasterflow.core.enums import Operation, RotateCanvas
from rasterflow.core.exceptions import ConfigError, ImageNotFoundError, RasterError
from rasterflow.core.image import processors
from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.image.converters import ImageConverters
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.operation_history import OperationHistory
from rasterflow.core.utils.decorators import timer

logger = logging.getLogger(__name__)


class ImageService:
    """
    Service for image lifecycle and pixel operations.

    Every operation takes an image ID, runs against the stored buffer and
    returns the image metadata afterwards. In-place operations mutate the
    stored buffer; resize and rotate swap in a new buffer and release the
    old one.
    """

    def __init__(
        self,
        image_manager: ImageManager,
        history: Optional[OperationHistory] = None,
        processing: Optional[ProcessingConfig] = None,
    ):
        """
        Initialize image service.

        Args:
            image_manager: Image manager instance
            history: Operation history (a private one is created if omitted)
            processing: Processing settings (defaults if omitted)
        """
        self.image_manager = image_manager
        self.history = history or OperationHistory()
        self.processing = processing or ProcessingConfig()

    @property
    def workers(self) -> int:
        return self.processing.worker_count

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def get_image(self, image_id: str) -> PixelBuffer:
        """
        Get a stored buffer.

        Raises:
            ImageNotFoundError: If no image has this ID
        """
        buffer = self.image_manager.get(image_id)
        if buffer is None:
            raise ImageNotFoundError(image_id)
        return buffer

    def get_metadata(self, image_id: str) -> Dict[str, Any]:
        metadata = self.image_manager.get_metadata(image_id)
        if metadata is None:
            raise ImageNotFoundError(image_id)
        return metadata

    def _store_decoded(
        self, decoded, source: str, image_id: Optional[str], params: Dict[str, Any]
    ) -> str:
        raw_bytes, width, height, channels = decoded
        with timer() as t:
            buffer = PixelBuffer.load(
                raw_bytes, width, height, channels, tracker=self.image_manager.tracker
            )
            if image_id is not None and self.image_manager.replace(image_id, buffer):
                stored_id = image_id
            else:
                stored_id = self.image_manager.store(buffer, source=source)

        self.history.add_record(
            image_id=stored_id,
            operation=Operation.LOAD.value,
            params=params,
            processing_time_ms=t["ms"],
            shape_after=buffer.shape,
        )
        logger.info(
            f"Loaded {source} as {stored_id}: {width}x{height}, {buffer.channels} channel(s)"
        )
        return stored_id

    def load(self, path: Union[str, Path], image_id: Optional[str] = None) -> str:
        """
        Decode an image file and store it.

        Args:
            path: Image file path
            image_id: Existing image to replace (its previous buffer is released)

        Returns:
            Image ID
        """
        decoded = ImageConverters.decode_file(path)
        return self._store_decoded(decoded, str(path), image_id, {"path": str(path)})

    def load_bytes(
        self, data: bytes, source: str = "upload", image_id: Optional[str] = None
    ) -> str:
        """Decode an in-memory encoded image and store it."""
        decoded = ImageConverters.decode_bytes(data)
        return self._store_decoded(decoded, source, image_id, {"source": source})

    def load_base64(self, payload: str, image_id: Optional[str] = None) -> str:
        """Decode a base64 encoded image and store it."""
        decoded = ImageConverters.from_base64(payload)
        return self._store_decoded(decoded, "base64", image_id, {"source": "base64"})

    def display(self, image_id: str, rows: Optional[int] = None) -> List[str]:
        """Render the first rows of an image as text (read only)."""
        rows = self.processing.display_rows if rows is None else rows
        return ImageConverters.format_rows(self.get_image(image_id), rows)

    def save(self, image_id: str, path: Union[str, Path]) -> Path:
        """
        Encode an image to a file.

        Returns:
            Path written
        """
        buffer = self.get_image(image_id)
        with timer() as t:
            written = ImageConverters.encode_file(
                buffer.flatten(), buffer.width, buffer.height, buffer.channels, path
            )
        self.history.add_record(
            image_id=image_id,
            operation=Operation.SAVE.value,
            params={"path": str(path)},
            processing_time_ms=t["ms"],
            shape_before=buffer.shape,
            shape_after=buffer.shape,
        )
        logger.info(f"Saved {image_id} to {written}")
        return written

    def export_base64(self, image_id: str, format: str = ".png") -> str:
        """Encode an image as a base64 string."""
        return ImageConverters.encode_image_to_base64(self.get_image(image_id), format)

    def release(self, image_id: str) -> bool:
        """Release an image. Returns False if it was not stored."""
        released = self.image_manager.delete(image_id)
        if released:
            self.history.add_record(image_id=image_id, operation=Operation.RELEASE.value)
        return released

    # ------------------------------------------------------------------
    # Pixel operations
    # ------------------------------------------------------------------

    def _execute(
        self,
        image_id: str,
        operation: Operation,
        func: Callable[[PixelBuffer], PixelBuffer],
        params: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Template method for pixel operations.

        Handles buffer lookup, timing, ownership of replaced buffers and
        history recording. Failed operations are recorded and re-raised;
        the stored image is left as it was.
        """
        buffer = self.get_image(image_id)
        shape_before = buffer.shape

        try:
            with timer() as t:
                result = func(buffer)
        except RasterError as e:
            self.history.add_record(
                image_id=image_id,
                operation=operation.value,
                params=params,
                processing_time_ms=t["ms"],
                status=HistoryConstants.STATUS_ERROR,
                shape_before=shape_before,
                error=str(e),
            )
            logger.error(f"{operation.value} failed on {image_id}: {e}")
            raise

        if result is buffer:
            self.image_manager.touch(image_id)
        else:
            self.image_manager.replace(image_id, result)

        self.history.add_record(
            image_id=image_id,
            operation=operation.value,
            params=params,
            processing_time_ms=t["ms"],
            shape_before=shape_before,
            shape_after=result.shape,
        )
        logger.info(f"{operation.value} on {image_id} took {t['ms']} ms")
        return self.get_metadata(image_id)

    def adjust_brightness(self, image_id: str, delta: int) -> Dict[str, Any]:
        return self._execute(
            image_id,
            Operation.BRIGHTNESS,
            lambda buffer: processors.adjust_brightness(buffer, delta, workers=self.workers),
            {"delta": delta},
        )

    def gaussian_blur(self, image_id: str, size: int, sigma: float) -> Dict[str, Any]:
        if isinstance(size, int) and size > self.processing.max_kernel_size:
            raise ConfigError(
                f"Kernel size {size} exceeds maximum {self.processing.max_kernel_size}",
                parameter="size",
            )
        return self._execute(
            image_id,
            Operation.GAUSSIAN_BLUR,
            lambda buffer: processors.gaussian_blur(buffer, size, sigma, workers=self.workers),
            {"size": size, "sigma": sigma},
        )

    def resize(self, image_id: str, width: int, height: int) -> Dict[str, Any]:
        return self._execute(
            image_id,
            Operation.RESIZE,
            lambda buffer: processors.resize(buffer, width, height, workers=self.workers),
            {"width": width, "height": height},
        )

    def rotate(
        self,
        image_id: str,
        angle: float,
        canvas: RotateCanvas = RotateCanvas.SAME,
        fill: Optional[int] = None,
    ) -> Dict[str, Any]:
        fill = self.processing.rotate_fill if fill is None else fill
        canvas_name = canvas.value if isinstance(canvas, RotateCanvas) else str(canvas)
        return self._execute(
            image_id,
            Operation.ROTATE,
            lambda buffer: processors.rotate(
                buffer, angle, canvas=canvas, fill=fill, workers=self.workers
            ),
            {"angle": angle, "canvas": canvas_name, "fill": fill},
        )

    def detect_edges(self, image_id: str) -> Dict[str, Any]:
        return self._execute(
            image_id,
            Operation.DETECT_EDGES,
            lambda buffer: processors.detect_edges(buffer, workers=self.workers),
            {},
        )
