"""
Core modules for rasterflow
"""

from .image.buffer import PixelBuffer
from .image_manager import ImageManager
from .memory_tracker import MemoryTracker
from .operation_history import OperationHistory, OperationRecord
from .parallel import ParallelPixelOp

__all__ = [
    "PixelBuffer",
    "ImageManager",
    "MemoryTracker",
    "OperationHistory",
    "OperationRecord",
    "ParallelPixelOp",
]
