"""
Image API models.

This module contains models for image operations:
- Loading from files and base64 uploads
- Pixel operation requests
- Image metadata, display and export responses
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from rasterflow.core.constants import ProcessingConstants
from rasterflow.core.enums import RotateCanvas


class LoadRequest(BaseModel):
    """Request to decode an image file on the server"""

    path: str = Field(..., description="Image file path inside the storage directory")
    image_id: Optional[str] = Field(None, description="Existing image to replace")


class UploadRequest(BaseModel):
    """Request to decode a base64 encoded image"""

    data_base64: str = Field(..., min_length=1)
    image_id: Optional[str] = None


class SaveRequest(BaseModel):
    path: str = Field(
        ..., description="Destination inside the storage directory; format follows the extension"
    )


class BrightnessRequest(BaseModel):
    delta: int = Field(..., description="Value added to every sample (result is clamped)")


class BlurRequest(BaseModel):
    """Gaussian blur parameters"""

    size: int = Field(
        ProcessingConstants.GAUSSIAN_SIZE_DEFAULT, ge=1, description="Odd kernel size"
    )
    sigma: float = Field(ProcessingConstants.GAUSSIAN_SIGMA_DEFAULT, gt=0)


class ResizeRequest(BaseModel):
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)


class RotateRequest(BaseModel):
    """Rotation parameters. Positive angles rotate counter-clockwise."""

    angle: float = Field(..., description="Angle in degrees")
    canvas: RotateCanvas = RotateCanvas.SAME
    fill: Optional[int] = Field(None, ge=0, le=255, description="Background sample value")


class ImageInfo(BaseModel):
    """Metadata of a stored image"""

    image_id: str
    width: int
    height: int
    channels: int
    color_mode: str
    size_bytes: int
    source: Optional[str] = None
    created: str
    updated: str
    revision: int


class ImageListResponse(BaseModel):
    images: List[ImageInfo]
    count: int


class DisplayResponse(BaseModel):
    """Textual rendering of the first rows of an image"""

    image_id: str
    rows: List[str]


class SaveResponse(BaseModel):
    success: bool
    path: str


class ExportResponse(BaseModel):
    image_id: str
    format: str
    data_base64: str
