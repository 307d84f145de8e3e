"""
Tests for configuration loading
"""

import pytest
from pydantic import ValidationError

from rasterflow.config import ProcessingConfig, Settings


class TestSettings:
    """Test Settings defaults and environment overrides"""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.processing.worker_count == 2
        assert settings.processing.display_rows == 10
        assert settings.processing.rotate_fill == 0
        assert settings.image.max_images == 20
        assert settings.image.max_memory_bytes == 512 * 1024 * 1024
        assert settings.image.storage_path == "data/images"
        assert settings.history.buffer_size == 100
        assert settings.system.log_level == "INFO"

    def test_environment_overrides(self):
        settings = Settings.from_env(
            {
                "RASTERFLOW_ENVIRONMENT": "production",
                "RASTERFLOW_PROCESSING__WORKER_COUNT": "4",
                "RASTERFLOW_SYSTEM__LOG_LEVEL": "debug",
                "RASTERFLOW_API__CORS_ORIGINS": "http://a.test, http://b.test",
                "UNRELATED": "ignored",
            }
        )

        assert settings.environment == "production"
        assert settings.processing.worker_count == 4
        assert settings.system.log_level == "DEBUG"
        assert settings.api.cors_origins == ["http://a.test", "http://b.test"]

    def test_invalid_values(self):
        with pytest.raises(ValidationError):
            Settings.from_env({"RASTERFLOW_PROCESSING__WORKER_COUNT": "0"})
        with pytest.raises(ValidationError):
            Settings.from_env({"RASTERFLOW_SYSTEM__LOG_LEVEL": "LOUD"})

    def test_worker_count_bounds(self):
        with pytest.raises(ValidationError):
            ProcessingConfig(worker_count=17)

    def test_to_dict(self):
        data = Settings.from_env({}).to_dict()
        assert set(data) == {"environment", "system", "processing", "image", "history", "api"}
