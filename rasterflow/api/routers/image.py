"""
Image API Router - Loading, pixel operations and export
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from rasterflow.api.dependencies import get_image_manager, get_image_service, get_storage_path
from rasterflow.api.exceptions import safe_endpoint
from rasterflow.core.constants import DisplayConstants
from rasterflow.core.utils.paths import resolve_storage_path
from rasterflow.schemas import (
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

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
@safe_endpoint
async def list_images(image_manager=Depends(get_image_manager)) -> ImageListResponse:
    """List stored images"""
    images = [ImageInfo(**metadata) for metadata in image_manager.list_images()]
    return ImageListResponse(images=images, count=len(images))


@router.post("/load")
@safe_endpoint
async def load_image(
    request: LoadRequest,
    image_service=Depends(get_image_service),
    storage_path=Depends(get_storage_path),
) -> ImageInfo:
    """
    Decode an image file from the storage directory.

    Relative paths are resolved against the storage directory; paths that
    leave it are rejected with 400.

    If image_id names a stored image, its buffer is replaced and the
    previous one released.
    """
    path = resolve_storage_path(storage_path, request.path)
    image_id = image_service.load(path, image_id=request.image_id)
    return ImageInfo(**image_service.get_metadata(image_id))


@router.post("/upload")
@safe_endpoint
async def upload_image(
    request: UploadRequest, image_service=Depends(get_image_service)
) -> ImageInfo:
    """Decode a base64 encoded image"""
    image_id = image_service.load_base64(request.data_base64, image_id=request.image_id)
    return ImageInfo(**image_service.get_metadata(image_id))


@router.get("/{image_id}")
@safe_endpoint
async def get_image_info(image_id: str, image_service=Depends(get_image_service)) -> ImageInfo:
    """Get image metadata"""
    return ImageInfo(**image_service.get_metadata(image_id))


@router.get("/{image_id}/display")
@safe_endpoint
async def display_image(
    image_id: str,
    rows: int = Query(DisplayConstants.DEFAULT_ROWS, ge=1, le=DisplayConstants.MAX_ROWS),
    image_service=Depends(get_image_service),
) -> DisplayResponse:
    """Render the first rows of sample values as text"""
    return DisplayResponse(image_id=image_id, rows=image_service.display(image_id, rows))


@router.get("/{image_id}/export")
@safe_endpoint
async def export_image(
    image_id: str,
    format: str = Query("png", pattern=r"^\.?(png|jpg|jpeg|bmp)$"),
    image_service=Depends(get_image_service),
) -> ExportResponse:
    """Encode an image as base64"""
    extension = format if format.startswith(".") else f".{format}"
    data = image_service.export_base64(image_id, extension)
    return ExportResponse(image_id=image_id, format=extension.lstrip("."), data_base64=data)


@router.post("/{image_id}/save")
@safe_endpoint
async def save_image(
    image_id: str,
    request: SaveRequest,
    image_service=Depends(get_image_service),
    storage_path=Depends(get_storage_path),
) -> SaveResponse:
    """Encode an image to a file in the storage directory"""
    path = resolve_storage_path(storage_path, request.path)
    written = image_service.save(image_id, path)
    return SaveResponse(success=True, path=str(written))


@router.post("/{image_id}/brightness")
@safe_endpoint
async def adjust_brightness(
    image_id: str, request: BrightnessRequest, image_service=Depends(get_image_service)
) -> ImageInfo:
    """Add a constant to every sample, clamped to 0..255"""
    return ImageInfo(**image_service.adjust_brightness(image_id, request.delta))


@router.post("/{image_id}/blur")
@safe_endpoint
async def gaussian_blur(
    image_id: str, request: BlurRequest, image_service=Depends(get_image_service)
) -> ImageInfo:
    """Gaussian blur with an odd kernel size"""
    return ImageInfo(**image_service.gaussian_blur(image_id, request.size, request.sigma))


@router.post("/{image_id}/resize")
@safe_endpoint
async def resize_image(
    image_id: str, request: ResizeRequest, image_service=Depends(get_image_service)
) -> ImageInfo:
    """Bilinear resize to new dimensions"""
    return ImageInfo(**image_service.resize(image_id, request.width, request.height))


@router.post("/{image_id}/rotate")
@safe_endpoint
async def rotate_image(
    image_id: str, request: RotateRequest, image_service=Depends(get_image_service)
) -> ImageInfo:
    """Rotate about the image center; positive angles are counter-clockwise"""
    metadata = image_service.rotate(
        image_id, request.angle, canvas=request.canvas, fill=request.fill
    )
    return ImageInfo(**metadata)


@router.post("/{image_id}/edges")
@safe_endpoint
async def detect_edges(image_id: str, image_service=Depends(get_image_service)) -> ImageInfo:
    """Sobel edge magnitude"""
    return ImageInfo(**image_service.detect_edges(image_id))


@router.delete("/{image_id}")
@safe_endpoint
async def release_image(image_id: str, image_service=Depends(get_image_service)) -> dict:
    """Release an image and its buffer"""
    if not image_service.release(image_id):
        raise HTTPException(status_code=404, detail=f"Image {image_id} not found")

    logger.info(f"Released {image_id} via API")
    return {"success": True, "image_id": image_id}
