"""
Service layer - operations over stored images
"""

from .image_service import ImageService

__all__ = ["ImageService"]
