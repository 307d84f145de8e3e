"""
Schemas Package

Pydantic models for request validation and response serialization,
organized by API domain.
"""

from .history import HistoryResponse, OperationRecordModel
from .image import (
    BlurRequest,
    BrightnessRequest,
    DisplayResponse,
    ExportResponse,
    ImageInfo,
    ImageListResponse,
    LoadRequest,
    ResizeRequest,
    RotateRequest,
    SaveRequest,
    SaveResponse,
    UploadRequest,
)
from .system import PerformanceMetrics, SystemStatus

__all__ = [
    # Image
    "LoadRequest",
    "UploadRequest",
    "SaveRequest",
    "BrightnessRequest",
    "BlurRequest",
    "ResizeRequest",
    "RotateRequest",
    "ImageInfo",
    "ImageListResponse",
    "DisplayResponse",
    "SaveResponse",
    "ExportResponse",
    # History
    "OperationRecordModel",
    "HistoryResponse",
    # System
    "SystemStatus",
    "PerformanceMetrics",
]
