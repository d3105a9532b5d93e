"""
Palette Engine Imaging Utilities
Raw RGBA buffers, the Pillow-backed decode adapter, and the downscaling
preprocessor that bounds clustering cost.
"""
import io
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import cv2
import numpy as np
from loguru import logger
from PIL import Image, ImageOps, UnidentifiedImageError

from palette_engine.config import ExtractionQuality
from palette_engine.services.colors.errors import DecodeFailure


@dataclass(frozen=True, eq=False)
class RawImageBuffer:
    """
    Decoded image: width, height and row-major RGBA bytes (4 per pixel).

    The buffer is read-only input; the engine never mutates it.
    """
    width: int
    height: int
    data: Union[bytes, bytearray, memoryview, np.ndarray]

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise DecodeFailure(f"Negative image dimensions: {self.width}x{self.height}")
        expected = self.width * self.height * 4
        actual = self.data.size if isinstance(self.data, np.ndarray) else len(self.data)
        if actual != expected:
            raise DecodeFailure(
                f"RGBA buffer size mismatch: expected {expected} bytes for "
                f"{self.width}x{self.height}, got {actual}"
            )

    @classmethod
    def from_array(cls, array: np.ndarray) -> "RawImageBuffer":
        """
        Wrap a uint8 image array.

        Args:
            array: (H, W, 4) RGBA, (H, W, 3) RGB (treated as opaque) or (H, W) grayscale

        Returns:
            RawImageBuffer over a contiguous RGBA copy of the array
        """
        array = np.asarray(array)
        if array.dtype != np.uint8:
            raise DecodeFailure(f"Expected uint8 image array, got {array.dtype}")

        if array.ndim == 2:
            array = np.repeat(array[:, :, None], 3, axis=2)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise DecodeFailure(f"Unsupported image array shape: {array.shape}")
        if array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=np.uint8)
            array = np.concatenate([array, alpha], axis=2)

        height, width = array.shape[:2]
        return cls(width=width, height=height, data=np.ascontiguousarray(array).reshape(-1))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def as_array(self) -> np.ndarray:
        """(H, W, 4) read-only uint8 view over the buffer."""
        if isinstance(self.data, np.ndarray):
            view = self.data.reshape(self.height, self.width, 4).view()
        else:
            view = np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 4)
        view.flags.writeable = False
        return view


def decode_image(source: Union[bytes, str, Path, Image.Image]) -> RawImageBuffer:
    """
    Decode an encoded image into a RawImageBuffer using Pillow.

    Args:
        source: Encoded bytes, a file path, or an already opened PIL image

    Returns:
        RGBA buffer with EXIF orientation applied

    Raises:
        DecodeFailure: If the image cannot be read or decoded
    """
    try:
        if isinstance(source, Image.Image):
            pil_image = source
        elif isinstance(source, (bytes, bytearray)):
            pil_image = Image.open(io.BytesIO(source))
        else:
            pil_image = Image.open(source)

        pil_image = ImageOps.exif_transpose(pil_image)
        if pil_image.mode != "RGBA":
            pil_image = pil_image.convert("RGBA")
        rgba = np.array(pil_image, dtype=np.uint8)

    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DecodeFailure(f"Failed to decode image: {str(e)}") from e

    height, width = rgba.shape[:2]
    logger.debug(f"Decoded image {width}x{height}")
    return RawImageBuffer(width=width, height=height, data=rgba.reshape(-1))


def downscale_to_max_dimension(image: RawImageBuffer, max_dimension: int) -> RawImageBuffer:
    """
    Resize image so the longest edge is at most max_dimension pixels.

    Images already within bounds are returned unchanged (never upscaled).

    Args:
        image: Input RGBA buffer
        max_dimension: Maximum edge size in pixels

    Returns:
        Buffer whose dimensions are <= the input's, aspect ratio preserved
    """
    if max_dimension < 1:
        raise ValueError(f"max_dimension must be positive, got {max_dimension}")

    width, height = image.size
    current_max = max(width, height)

    if current_max <= max_dimension:
        return image

    scale = max_dimension / current_max
    new_width = min(width, max(1, int(round(width * scale))))
    new_height = min(height, max(1, int(round(height * scale))))

    # Use INTER_AREA for downscaling (better quality)
    resized = cv2.resize(image.as_array().copy(), (new_width, new_height), interpolation=cv2.INTER_AREA)

    logger.debug(f"Downscaled {width}x{height} -> {new_width}x{new_height}")
    return RawImageBuffer.from_array(resized)


def preprocess(image: RawImageBuffer,
               quality: Optional[Union[ExtractionQuality, str]] = None) -> RawImageBuffer:
    """Downscale image to the maximum dimension of the given quality tier."""
    tier = ExtractionQuality.parse(quality)
    return downscale_to_max_dimension(image, tier.max_dimension)
