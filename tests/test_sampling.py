"""
Unit tests for pixel sampling.
"""

import numpy as np
import pytest

from palette_engine.services.colors.errors import EmptyImageError
from palette_engine.services.colors.sampling import sample_pixels
from palette_engine.services.imaging import RawImageBuffer


class TestSamplePixels:
    """Test alpha filtering and sample ordering"""

    def test_opaque_image_samples_every_pixel(self, solid_red_image):
        samples = sample_pixels(solid_red_image)

        assert samples.shape == (100, 3)
        assert samples.dtype == np.float64
        assert np.all(samples == (255.0, 0.0, 0.0))

    def test_row_major_order(self):
        """Samples follow the image's row-major pixel order"""
        array = np.zeros((2, 3, 4), dtype=np.uint8)
        array[:, :, 0] = np.arange(6, dtype=np.uint8).reshape(2, 3)
        array[:, :, 3] = 255

        samples = sample_pixels(RawImageBuffer.from_array(array))
        assert list(samples[:, 0]) == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]

    def test_alpha_threshold_is_strict(self):
        """Alpha exactly at the threshold is discarded"""
        array = np.zeros((1, 3, 4), dtype=np.uint8)
        array[0, :, :3] = [(10, 10, 10), (20, 20, 20), (30, 30, 30)]
        array[0, :, 3] = [128, 129, 255]

        samples = sample_pixels(RawImageBuffer.from_array(array))
        assert samples.tolist() == [[20.0, 20.0, 20.0], [30.0, 30.0, 30.0]]

    def test_custom_threshold(self, make_solid_image):
        image = make_solid_image(4, 4, (1, 2, 3), alpha=100)
        assert sample_pixels(image, alpha_threshold=50).shape[0] == 16
        with pytest.raises(EmptyImageError):
            sample_pixels(image)

    def test_fully_transparent(self, transparent_image):
        with pytest.raises(EmptyImageError):
            sample_pixels(transparent_image)

    def test_zero_dimension(self):
        with pytest.raises(EmptyImageError):
            sample_pixels(RawImageBuffer(width=0, height=0, data=b""))

    def test_partial_transparency(self, split_red_blue_image):
        """Only the opaque half contributes samples"""
        array = split_red_blue_image.as_array().copy()
        array[:, 5:, 3] = 0

        samples = sample_pixels(RawImageBuffer.from_array(array))
        assert samples.shape == (50, 3)
        assert np.all(samples == (255.0, 0.0, 0.0))
