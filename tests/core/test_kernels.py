"""
Tests for convolution kernels
"""

import math

import cv2
import numpy as np
import pytest

from rasterflow.core.exceptions import ConfigError
from rasterflow.core.image.kernels import KernelFactory


class TestGaussianKernel:
    """Test Gaussian kernel construction"""

    @pytest.mark.parametrize("size,sigma", [(1, 1.0), (3, 0.8), (5, 1.0), (7, 2.5), (15, 4.0)])
    def test_normalized_and_symmetric(self, size, sigma):
        """Test weights are non-negative, sum to 1 and are point symmetric"""
        kernel = KernelFactory.gaussian(size, sigma)

        assert kernel.size == size
        assert kernel.weights.shape == (size, size)
        assert np.all(kernel.weights >= 0)
        assert abs(kernel.total - 1.0) < 1e-4
        assert np.allclose(kernel.weights, kernel.weights[::-1, ::-1])
        assert np.allclose(kernel.weights, kernel.weights.T)

    @pytest.mark.parametrize("size,sigma", [(3, 1.0), (5, 1.0), (9, 2.0)])
    def test_matches_opencv(self, size, sigma):
        """Test the kernel equals the outer product of OpenCV's 1D Gaussian"""
        g = cv2.getGaussianKernel(size, sigma, cv2.CV_64F)
        expected = g @ g.T

        kernel = KernelFactory.gaussian(size, sigma)
        assert np.allclose(kernel.weights, expected, atol=1e-9)

    def test_center_is_peak(self):
        """Test the center weight is the largest"""
        kernel = KernelFactory.gaussian(5, 1.0)
        assert kernel.weights[2, 2] == kernel.weights.max()
        assert kernel.radius == 2

    def test_size_one_is_identity(self):
        """Test a 1x1 kernel holds a single weight of 1"""
        kernel = KernelFactory.gaussian(1, 0.5)
        assert kernel.weights.tolist() == [[1.0]]

    def test_weights_read_only(self):
        """Test kernels cannot be modified after construction"""
        kernel = KernelFactory.gaussian(3, 1.0)
        with pytest.raises(ValueError):
            kernel.weights[0, 0] = 5.0

    @pytest.mark.parametrize("size", [0, -3, 4, 2, 3.0, True])
    def test_invalid_size(self, size):
        """Test sizes that are not positive odd integers are rejected"""
        with pytest.raises(ConfigError) as exc_info:
            KernelFactory.gaussian(size, 1.0)
        assert exc_info.value.parameter == "size"

    @pytest.mark.parametrize("sigma", [0, -1.0, math.nan, math.inf, "1.0"])
    def test_invalid_sigma(self, sigma):
        """Test non-positive or non-finite sigma is rejected"""
        with pytest.raises(ConfigError) as exc_info:
            KernelFactory.gaussian(5, sigma)
        assert exc_info.value.parameter == "sigma"


class TestSobelKernels:
    """Test the fixed Sobel kernels"""

    def test_sobel_x(self):
        assert KernelFactory.SOBEL_X.weights.tolist() == [
            [-1, 0, 1],
            [-2, 0, 2],
            [-1, 0, 1],
        ]

    def test_sobel_y_is_transpose(self):
        """Test the vertical kernel is the transpose of the horizontal one"""
        assert np.array_equal(KernelFactory.SOBEL_Y.weights, KernelFactory.SOBEL_X.weights.T)
        assert KernelFactory.SOBEL_Y.total == 0
