"""
Configuration for rasterflow.

Settings are grouped in pydantic models and can be overridden with
environment variables named RASTERFLOW_<SECTION>__<FIELD>, e.g.
RASTERFLOW_PROCESSING__WORKER_COUNT=4 or RASTERFLOW_SYSTEM__LOG_LEVEL=DEBUG.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from rasterflow.core.constants import (
    DisplayConstants,
    HistoryConstants,
    ImageStoreConstants,
    ProcessingConstants,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "RASTERFLOW_"


class SystemConfig(BaseModel):
    """Process-wide settings"""

    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level


class ProcessingConfig(BaseModel):
    """Pixel operation settings"""

    worker_count: int = Field(
        default=ProcessingConstants.DEFAULT_WORKER_COUNT,
        ge=ProcessingConstants.MIN_WORKER_COUNT,
        le=ProcessingConstants.MAX_WORKER_COUNT,
        description="Worker threads per operation",
    )
    display_rows: int = Field(
        default=DisplayConstants.DEFAULT_ROWS,
        ge=1,
        le=DisplayConstants.MAX_ROWS,
        description="Rows shown by display",
    )
    rotate_fill: int = Field(
        default=ProcessingConstants.ROTATE_FILL_DEFAULT,
        ge=0,
        le=255,
        description="Background value for pixels uncovered by rotation",
    )
    max_kernel_size: int = Field(
        default=ProcessingConstants.GAUSSIAN_SIZE_MAX,
        ge=1,
        description="Largest Gaussian kernel accepted by the service layer",
    )


class ImageConfig(BaseModel):
    """Image storage settings"""

    max_images: int = Field(
        default=ImageStoreConstants.DEFAULT_MAX_IMAGES,
        ge=ImageStoreConstants.MIN_IMAGES,
        le=ImageStoreConstants.MAX_IMAGES,
    )
    max_memory_mb: Optional[int] = Field(
        default=ImageStoreConstants.DEFAULT_MAX_MEMORY_MB,
        ge=1,
        description="Ceiling for live pixel memory (None disables it)",
    )
    storage_path: str = Field(
        default=ImageStoreConstants.DEFAULT_STORAGE_PATH,
        description="Directory the API may load images from and save them to",
    )

    @property
    def max_memory_bytes(self) -> Optional[int]:
        return None if self.max_memory_mb is None else self.max_memory_mb * 1024 * 1024


class HistoryConfig(BaseModel):
    buffer_size: int = Field(default=HistoryConstants.DEFAULT_BUFFER_SIZE, ge=1)


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    cors_enabled: bool = True
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class Settings(BaseModel):
    """Complete application configuration"""

    environment: str = "development"
    system: SystemConfig = Field(default_factory=SystemConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    api: APIConfig = Field(default_factory=APIConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated Settings
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}

        for key, value in environ.items():
            if not key.startswith(ENV_PREFIX):
                continue
            name = key[len(ENV_PREFIX):].lower()
            if "__" in name:
                section, field_name = name.split("__", 1)
                data.setdefault(section, {})[field_name] = value
            else:
                data[name] = value

        return cls.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings.from_env()
