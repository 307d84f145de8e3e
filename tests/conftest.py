"""
Pytest configuration and fixtures for rasterflow tests
"""

import numpy as np
import pytest
from PIL import Image

from rasterflow.config import ProcessingConfig
from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.memory_tracker import MemoryTracker
from rasterflow.core.operation_history import OperationHistory
from rasterflow.services.image_service import ImageService


@pytest.fixture
def tracker():
    """Fresh memory tracker without a ceiling"""
    return MemoryTracker()


@pytest.fixture
def test_array():
    """Deterministic 24x32 RGB test pattern"""
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)


@pytest.fixture
def gray_buffer(tracker):
    """4x4 grayscale buffer filled with 100"""
    buffer = PixelBuffer.allocate(4, 4, 1, fill=100, tracker=tracker)
    yield buffer
    buffer.release()


@pytest.fixture
def rgb_buffer(tracker, test_array):
    """RGB buffer holding the test pattern"""
    buffer = PixelBuffer.from_array(test_array, tracker=tracker)
    yield buffer
    buffer.release()


@pytest.fixture
def png_path(tmp_path, test_array):
    """Test pattern written as an RGB PNG file"""
    path = tmp_path / "pattern.png"
    Image.fromarray(test_array).save(path)
    return path


@pytest.fixture
def image_manager(tracker):
    """Create ImageManager instance for testing"""
    manager = ImageManager(max_images=10, tracker=tracker)
    yield manager
    manager.cleanup()


@pytest.fixture
def history():
    """Create OperationHistory instance for testing"""
    return OperationHistory(max_size=100)


@pytest.fixture
def image_service(image_manager, history):
    """Create ImageService instance for testing"""
    return ImageService(
        image_manager=image_manager,
        history=history,
        processing=ProcessingConfig(worker_count=2),
    )
