"""
Test configuration and fixtures for palette engine tests.
"""
import numpy as np
import pytest

from palette_engine.services.imaging import RawImageBuffer
from palette_engine.services.observability import get_metrics_collector


def _solid_rgba(width, height, rgb, alpha=255):
    array = np.empty((height, width, 4), dtype=np.uint8)
    array[:, :, :3] = rgb
    array[:, :, 3] = alpha
    return array


@pytest.fixture
def make_solid_image():
    """Factory for single-color RGBA buffers."""
    def _make(width, height, rgb, alpha=255):
        return RawImageBuffer.from_array(_solid_rgba(width, height, rgb, alpha))
    return _make


@pytest.fixture
def solid_red_image(make_solid_image):
    """10x10 opaque pure red image."""
    return make_solid_image(10, 10, (255, 0, 0))


@pytest.fixture
def split_red_blue_image():
    """10x10 image: left half pure red, right half pure blue."""
    array = _solid_rgba(10, 10, (255, 0, 0))
    array[:, 5:, :3] = (0, 0, 255)
    return RawImageBuffer.from_array(array)


@pytest.fixture
def stacked_red_blue_image():
    """10x10 image: top half pure red, bottom half pure blue."""
    array = _solid_rgba(10, 10, (255, 0, 0))
    array[5:, :, :3] = (0, 0, 255)
    return RawImageBuffer.from_array(array)


@pytest.fixture
def transparent_image(make_solid_image):
    """10x10 fully transparent image."""
    return make_solid_image(10, 10, (255, 255, 255), alpha=0)


@pytest.fixture
def gradient_image():
    """100x20 horizontal red-to-green gradient over a constant blue channel."""
    width, height = 100, 20
    ramp = np.round(np.linspace(0, 255, width)).astype(np.uint8)
    array = np.empty((height, width, 4), dtype=np.uint8)
    array[:, :, 0] = ramp[None, :]
    array[:, :, 1] = 255 - ramp[None, :]
    array[:, :, 2] = 128
    array[:, :, 3] = 255
    return RawImageBuffer.from_array(array)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    get_metrics_collector().reset()
