"""
Shared FastAPI dependencies for rasterflow.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request

from rasterflow.config import ProcessingConfig
from rasterflow.core.image_manager import ImageManager
from rasterflow.core.operation_history import OperationHistory
from rasterflow.services.image_service import ImageService

logger = logging.getLogger(__name__)


class Managers:
    """Container for all manager instances."""

    def __init__(
        self,
        image_manager: ImageManager,
        history: OperationHistory,
        processing: ProcessingConfig,
    ):
        self.image_manager = image_manager
        self.history = history
        self.processing = processing


def get_managers(request: Request) -> Managers:
    """
    Get all manager instances from app state.

    Raises:
        HTTPException: If managers not initialized
    """
    try:
        return Managers(
            image_manager=request.app.state.image_manager,
            history=request.app.state.history,
            processing=request.app.state.processing,
        )
    except AttributeError as e:
        logger.error(f"Managers not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Managers not initialized"
        )


def get_image_manager(managers: Managers = Depends(get_managers)) -> ImageManager:
    """Get ImageManager instance."""
    return managers.image_manager


def get_history(managers: Managers = Depends(get_managers)) -> OperationHistory:
    """Get OperationHistory instance."""
    return managers.history


def get_config(request: Request) -> Dict[str, Any]:
    """Get application configuration, or an empty dict if none was set"""
    try:
        return request.app.state.config
    except AttributeError:
        logger.warning("Config not found in app state, using defaults")
        return {}


def get_image_service(managers: Managers = Depends(get_managers)) -> ImageService:
    """
    Get image service instance.

    Args:
        managers: Manager container dependency

    Returns:
        ImageService instance
    """
    return ImageService(
        image_manager=managers.image_manager,
        history=managers.history,
        processing=managers.processing,
    )


def get_storage_path(request: Request) -> Path:
    """
    Get the directory file based endpoints are confined to.

    Raises:
        HTTPException: If the storage directory was not configured
    """
    try:
        return Path(request.app.state.storage_path)
    except AttributeError as e:
        logger.error(f"Storage path not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Storage path not initialized"
        )
