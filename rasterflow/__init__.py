"""
rasterflow - multi-threaded raster image processing.

Pixel buffers, Gaussian and Sobel convolution, bilinear resize and
rotation, run over disjoint row ranges by a pool of worker threads.
"""

__version__ = "1.0.0"
