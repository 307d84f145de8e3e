"""
Tests for ImageService
"""

import numpy as np
import pytest
from PIL import Image

from rasterflow.config import ProcessingConfig
from rasterflow.core.enums import RotateCanvas
from rasterflow.core.exceptions import (
    AllocationError,
    ConfigError,
    DecodeError,
    ImageNotFoundError,
)
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.memory_tracker import MemoryTracker
from rasterflow.services.image_service import ImageService


class TestImageServiceLifecycle:
    """Test loading, saving and releasing images"""

    def test_load(self, image_service, png_path, test_array):
        image_id = image_service.load(png_path)

        buffer = image_service.get_image(image_id)
        assert buffer.shape == (24, 32, 3)
        assert np.array_equal(buffer.pixels, test_array)
        assert image_service.history.get_recent(1)[0].operation == "load"

    def test_load_rgba_coerced(self, image_service, tmp_path):
        """Test 4-channel files keep the first sample per pixel"""
        path = tmp_path / "alpha.png"
        Image.new("RGBA", (3, 2), (90, 20, 30, 40)).save(path)

        image_id = image_service.load(path)
        metadata = image_service.get_metadata(image_id)

        assert metadata["channels"] == 1
        assert np.all(image_service.get_image(image_id).pixels == 90)

    def test_load_replaces_existing(self, image_service, png_path, tracker):
        """Test loading into an existing ID releases the previous buffer"""
        image_id = image_service.load(png_path)
        old = image_service.get_image(image_id)

        assert image_service.load(png_path, image_id=image_id) == image_id
        assert old.is_empty
        assert tracker.live_count == 1

    def test_load_missing_file(self, image_service, tmp_path):
        with pytest.raises(DecodeError):
            image_service.load(tmp_path / "missing.png")

    def test_load_base64(self, image_service, png_path):
        import base64

        payload = base64.b64encode(png_path.read_bytes()).decode()
        image_id = image_service.load_base64(payload)
        assert image_service.get_metadata(image_id)["width"] == 32

    def test_unknown_image(self, image_service):
        with pytest.raises(ImageNotFoundError):
            image_service.get_image("img_missing")
        with pytest.raises(ImageNotFoundError):
            image_service.adjust_brightness("img_missing", 10)

    def test_save(self, image_service, png_path, tmp_path, test_array):
        image_id = image_service.load(png_path)

        written = image_service.save(image_id, tmp_path / "copy.png")

        with Image.open(written) as image:
            assert np.array_equal(np.asarray(image), test_array)

    def test_display(self, image_service, png_path):
        image_id = image_service.load(png_path)

        lines = image_service.display(image_id, rows=2)
        assert len(lines) == 3
        assert lines[-1] == "... (22 more rows)"
        assert len(image_service.display(image_id)) == 11

    def test_export_base64(self, image_service, png_path):
        image_id = image_service.load(png_path)
        assert len(image_service.export_base64(image_id)) > 0

    def test_release(self, image_service, png_path, tracker):
        image_id = image_service.load(png_path)

        assert image_service.release(image_id) is True
        assert image_service.release(image_id) is False
        assert tracker.live_count == 0


class TestImageServiceOperations:
    """Test pixel operations through the service"""

    @pytest.fixture
    def image_id(self, image_service, png_path):
        return image_service.load(png_path)

    def test_brightness_in_place(self, image_service, image_id, test_array):
        buffer = image_service.get_image(image_id)

        metadata = image_service.adjust_brightness(image_id, 10)

        assert image_service.get_image(image_id) is buffer
        assert metadata["revision"] == 1
        assert np.array_equal(buffer.pixels, np.clip(test_array.astype(int) + 10, 0, 255))

    def test_resize_swaps_buffer(self, image_service, image_id, tracker):
        old = image_service.get_image(image_id)

        metadata = image_service.resize(image_id, 64, 48)

        assert (metadata["width"], metadata["height"]) == (64, 48)
        assert old.is_empty
        assert tracker.live_count == 1

    def test_rotate_uses_configured_fill(self, image_manager, history, png_path):
        service = ImageService(
            image_manager, history, ProcessingConfig(rotate_fill=9, worker_count=1)
        )
        image_id = service.load(png_path)

        metadata = service.rotate(image_id, 45, canvas=RotateCanvas.EXPAND)

        assert metadata["width"] > 32
        assert service.get_image(image_id).pixels[0, 0].tolist() == [9, 9, 9]
        assert history.get_recent(1)[0].params == {"angle": 45, "canvas": "expand", "fill": 9}

    def test_blur_and_edges(self, image_service, image_id):
        image_service.gaussian_blur(image_id, 3, 1.0)
        image_service.detect_edges(image_id)

        operations = [r.operation for r in image_service.history.get_recent(3)]
        assert operations == ["detect_edges", "gaussian_blur", "load"]

    def test_blur_kernel_limit(self, image_service, image_id):
        with pytest.raises(ConfigError):
            image_service.gaussian_blur(image_id, 33, 2.0)

    def test_failed_operation_recorded(self, image_service, image_id, test_array):
        """Test failures are recorded as ERROR and leave the image untouched"""
        with pytest.raises(ConfigError):
            image_service.gaussian_blur(image_id, 4, 1.0)

        record = image_service.history.get_recent(1)[0]
        assert record.status == "ERROR"
        assert record.operation == "gaussian_blur"
        assert "odd" in record.error
        assert np.array_equal(image_service.get_image(image_id).pixels, test_array)

    def test_allocation_ceiling(self, png_path):
        """Test a resize over the memory ceiling fails cleanly"""
        tracker = MemoryTracker(max_bytes=10_000)
        service = ImageService(ImageManager(tracker=tracker))
        image_id = service.load(png_path)

        with pytest.raises(AllocationError):
            service.resize(image_id, 200, 200)

        assert service.get_metadata(image_id)["width"] == 32
        assert tracker.live_count == 1
