"""
Convolution kernels.

Provides the Gaussian kernel factory used by blur and the fixed
Sobel kernels used by edge detection.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np

from rasterflow.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Kernel:
    """Immutable square convolution kernel"""

    size: int
    weights: np.ndarray  # (size, size) float64, read-only
    sigma: float = 0.0

    @property
    def radius(self) -> int:
        return self.size // 2

    @property
    def total(self) -> float:
        return float(self.weights.sum())


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64)
    array.setflags(write=False)
    return array


class KernelFactory:
    """Builds convolution kernels on demand."""

    SOBEL_X = Kernel(
        size=3,
        weights=_frozen([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]]),
    )
    SOBEL_Y = Kernel(
        size=3,
        weights=_frozen([[-1, -2, -1], [0, 0, 0], [1, 2, 1]]),
    )

    @staticmethod
    def gaussian(size: int, sigma: float) -> Kernel:
        """
        Build a normalized 2D Gaussian kernel.

        Weight at offset (dx, dy) from the center is
        exp(-(dx^2 + dy^2) / (2 sigma^2)) / (2 pi sigma^2), divided by the sum
        of all raw weights so the kernel sums to 1.0.

        Args:
            size: Kernel side length, positive and odd
            sigma: Standard deviation, > 0

        Returns:
            Kernel

        Raises:
            ConfigError: If size is not a positive odd integer or sigma <= 0
        """
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
            raise ConfigError(f"Kernel size must be an integer, got {size!r}", parameter="size")
        if size <= 0 or size % 2 == 0:
            raise ConfigError(
                f"Kernel size must be a positive odd integer, got {size}", parameter="size"
            )
        if not isinstance(sigma, (int, float, np.number)) or not math.isfinite(sigma):
            raise ConfigError(f"Sigma must be a finite number, got {sigma!r}", parameter="sigma")
        if sigma <= 0:
            raise ConfigError(f"Sigma must be greater than 0, got {sigma}", parameter="sigma")

        radius = size // 2
        offsets = np.arange(-radius, radius + 1, dtype=np.float64)
        dx, dy = np.meshgrid(offsets, offsets)

        two_sigma_sq = 2.0 * sigma * sigma
        raw = np.exp(-(dx * dx + dy * dy) / two_sigma_sq) / (math.pi * two_sigma_sq)

        total = raw.sum()
        if total > 0:
            raw = raw / total
        else:
            logger.warning(f"Gaussian kernel size={size} sigma={sigma} has zero sum")

        return Kernel(size=int(size), weights=_frozen(raw), sigma=float(sigma))
