"""
API Routers for rasterflow
"""

from . import history, image, system

__all__ = ["image", "history", "system"]
