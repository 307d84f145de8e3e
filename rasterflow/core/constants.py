"""
Constants and configuration values for the rasterflow engine.
Centralizes all magic numbers and default values.
"""


class BufferConstants:
    """Constants related to pixel buffers."""

    # Supported channel layouts
    GRAYSCALE = 1
    RGB = 3
    SUPPORTED_CHANNELS = (GRAYSCALE, RGB)
    FALLBACK_CHANNELS = GRAYSCALE

    # 8-bit samples
    SAMPLE_MIN = 0
    SAMPLE_MAX = 255

    # Upper bound for a single side, keeps accidental giant allocations out
    MAX_DIMENSION = 32768


class ProcessingConstants:
    """Constants for row-parallel processing."""

    DEFAULT_WORKER_COUNT = 2
    MIN_WORKER_COUNT = 1
    MAX_WORKER_COUNT = 16

    # Gaussian blur
    GAUSSIAN_SIZE_DEFAULT = 5
    GAUSSIAN_SIZE_MAX = 31
    GAUSSIAN_SIGMA_DEFAULT = 1.0

    # Rotation
    ROTATE_FILL_DEFAULT = 0
    # Tolerance for trigonometric round-off when testing source bounds
    COORDINATE_EPSILON = 1e-6


class DisplayConstants:
    """Constants for textual matrix display."""

    DEFAULT_ROWS = 10
    MAX_ROWS = 1000


class ImageStoreConstants:
    """Constants related to image storage."""

    DEFAULT_MAX_IMAGES = 20
    DEFAULT_MAX_MEMORY_MB = 512
    DEFAULT_STORAGE_PATH = "data/images"
    MIN_IMAGES = 1
    MAX_IMAGES = 1000
    ID_PREFIX = "img_"


class HistoryConstants:
    """Constants for operation history."""

    DEFAULT_BUFFER_SIZE = 100
    STATUS_OK = "OK"
    STATUS_ERROR = "ERROR"
