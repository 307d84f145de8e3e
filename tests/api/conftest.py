"""
Pytest configuration for API integration tests
"""

import base64

import pytest
from fastapi.testclient import TestClient

from rasterflow.config import ProcessingConfig
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.memory_tracker import MemoryTracker
from rasterflow.core.operation_history import OperationHistory


@pytest.fixture(scope="function")
def client(tmp_path):
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh client to avoid state contamination.
    """
    from rasterflow.main import app

    image_manager = ImageManager(max_images=10, tracker=MemoryTracker())
    history = OperationHistory(max_size=100)

    app.state.image_manager = image_manager
    app.state.history = history
    app.state.processing = ProcessingConfig()
    app.state.storage_path = tmp_path
    app.state.config = {"processing": {"worker_count": 2}}

    # No context manager so the lifespan handler does not replace the state above
    test_client = TestClient(app, raise_server_exceptions=False)

    yield test_client

    image_manager.cleanup()


@pytest.fixture
def uploaded_image(client, png_path):
    """Upload the test pattern and return its image ID"""
    payload = base64.b64encode(png_path.read_bytes()).decode()
    response = client.post("/api/image/upload", json={"data_base64": payload})
    assert response.status_code == 200
    return response.json()["image_id"]
