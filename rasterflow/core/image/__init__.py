"""
Image processing core - modular architecture.

This package provides the raster engine building blocks:
- buffer: PixelBuffer, the owned H x W x C sample grid
- kernels: Gaussian and Sobel convolution kernels
- geometry: bilinear Resampler and rotation coordinate math
- processors: row-parallel operations (brightness, blur, edges, resize, rotate)
- converters: codec boundary (Pillow / OpenCV) and text rendering
"""

from rasterflow.core.image.buffer import PixelBuffer
from rasterflow.core.image.converters import ImageConverters
from rasterflow.core.image.geometry import Resampler, sample_bilinear
from rasterflow.core.image.kernels import Kernel, KernelFactory
from rasterflow.core.image.processors import (
    adjust_brightness,
    detect_edges,
    gaussian_blur,
    resize,
    rotate,
)

__all__ = [
    "PixelBuffer",
    "ImageConverters",
    "Resampler",
    "sample_bilinear",
    "Kernel",
    "KernelFactory",
    "adjust_brightness",
    "gaussian_blur",
    "detect_edges",
    "resize",
    "rotate",
]
