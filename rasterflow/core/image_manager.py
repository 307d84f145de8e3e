"""
Image Manager - Explicit state handle for loaded pixel buffers
"""

import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, Dict, List, Optional

from rasterflow.core.constants import ImageStoreConstants
from rasterflow.core.enums import ColorMode
from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.memory_tracker import MemoryTracker

logger = logging.getLogger(__name__)


@dataclass
class ImageEntry:
    """A stored buffer plus bookkeeping"""

    image_id: str
    buffer: PixelBuffer
    source: Optional[str] = None
    created: datetime = field(default_factory=datetime.now)
    updated: datetime = field(default_factory=datetime.now)
    revision: int = 0


class ImageManager:
    """
    Owns every loaded image and releases buffers when they are superseded.

    Storing or replacing a buffer transfers its ownership to the manager;
    callers must not release a buffer they handed over.
    """

    def __init__(
        self,
        max_images: int = ImageStoreConstants.DEFAULT_MAX_IMAGES,
        tracker: Optional[MemoryTracker] = None,
    ):
        """
        Initialize Image Manager

        Args:
            max_images: Maximum number of images kept; least recently used
                images are released beyond this
            tracker: Memory tracker buffers are allocated against
        """
        self.max_images = max_images
        self.tracker = tracker or MemoryTracker()
        self._images: "OrderedDict[str, ImageEntry]" = OrderedDict()
        self.lock = RLock()

        logger.info(f"Image Manager initialized (max_images={max_images})")

    def store(self, buffer: PixelBuffer, source: Optional[str] = None) -> str:
        """
        Take ownership of a buffer.

        Args:
            buffer: Buffer to store
            source: Optional origin (file path, "upload", ...)

        Returns:
            New image ID
        """
        with self.lock:
            image_id = f"{ImageStoreConstants.ID_PREFIX}{uuid.uuid4().hex[:12]}"
            self._images[image_id] = ImageEntry(image_id=image_id, buffer=buffer, source=source)
            self._evict_if_needed()

            logger.debug(f"Stored {image_id}: {buffer!r}")
            return image_id

    def get(self, image_id: str) -> Optional[PixelBuffer]:
        """Get the buffer for an image, or None if unknown"""
        with self.lock:
            entry = self._images.get(image_id)
            if entry is None:
                return None
            self._images.move_to_end(image_id)
            return entry.buffer

    def has_image(self, image_id: str) -> bool:
        with self.lock:
            return image_id in self._images

    def replace(self, image_id: str, buffer: PixelBuffer) -> bool:
        """
        Swap in a new buffer for an existing image, releasing the old one.

        Returns:
            False if the image is unknown (the new buffer is not taken over)
        """
        with self.lock:
            entry = self._images.get(image_id)
            if entry is None:
                return False

            if entry.buffer is not buffer:
                entry.buffer.release()
                entry.buffer = buffer
            entry.updated = datetime.now()
            entry.revision += 1
            self._images.move_to_end(image_id)
            return True

    def touch(self, image_id: str) -> bool:
        """Record an in-place modification of an image"""
        with self.lock:
            entry = self._images.get(image_id)
            if entry is None:
                return False
            entry.updated = datetime.now()
            entry.revision += 1
            return True

    def delete(self, image_id: str) -> bool:
        """Release and forget an image"""
        with self.lock:
            entry = self._images.pop(image_id, None)
            if entry is None:
                return False
            entry.buffer.release()
            logger.debug(f"Released {image_id}")
            return True

    def get_metadata(self, image_id: str) -> Optional[Dict[str, Any]]:
        """Get image metadata"""
        with self.lock:
            entry = self._images.get(image_id)
            if entry is None:
                return None
            buffer = entry.buffer
            return {
                "image_id": entry.image_id,
                "width": buffer.width,
                "height": buffer.height,
                "channels": buffer.channels,
                "color_mode": ColorMode.from_channels(buffer.channels).value,
                "size_bytes": buffer.nbytes,
                "source": entry.source,
                "created": entry.created.isoformat(),
                "updated": entry.updated.isoformat(),
                "revision": entry.revision,
            }

    def list_images(self) -> List[Dict[str, Any]]:
        """List metadata of all stored images, oldest first"""
        with self.lock:
            return [self.get_metadata(image_id) for image_id in self._images]

    def get_stats(self) -> Dict[str, Any]:
        """Get storage statistics"""
        with self.lock:
            return {
                "image_count": len(self._images),
                "max_images": self.max_images,
                "memory": self.tracker.get_stats(),
            }

    def cleanup(self):
        """Release every stored image"""
        with self.lock:
            for entry in self._images.values():
                entry.buffer.release()
            count = len(self._images)
            self._images.clear()
            logger.info(f"Image Manager cleaned up ({count} images released)")

    def _evict_if_needed(self):
        while len(self._images) > self.max_images:
            image_id, entry = self._images.popitem(last=False)
            entry.buffer.release()
            logger.info(f"Evicted least recently used image {image_id}")
