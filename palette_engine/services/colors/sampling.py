"""
Pixel sampling for color clustering.

Turns an RGBA buffer into a flat, row-major matrix of RGB samples, keeping
only pixels opaque enough to contribute to the image's visible color.
"""

from typing import Optional

import numpy as np
from loguru import logger

from palette_engine.config import config
from palette_engine.services.colors.errors import EmptyImageError
from palette_engine.services.imaging import RawImageBuffer


def opaque_mask(rgba: np.ndarray, alpha_threshold: int) -> np.ndarray:
    """Boolean mask of pixels whose alpha is strictly above the threshold."""
    return rgba[..., 3] > alpha_threshold


def sample_pixels(image: RawImageBuffer, alpha_threshold: Optional[int] = None) -> np.ndarray:
    """
    Extract RGB samples from every pixel opaque enough to count.

    Args:
        image: Preprocessed RGBA buffer
        alpha_threshold: Pixels with alpha <= this value are discarded
                         (default config.ALPHA_THRESHOLD)

    Returns:
        (N, 3) float64 samples in row-major pixel order

    Raises:
        EmptyImageError: If the image has no pixels or none qualifies
    """
    if alpha_threshold is None:
        alpha_threshold = config.ALPHA_THRESHOLD

    if image.width == 0 or image.height == 0:
        raise EmptyImageError(f"Image has zero dimension: {image.width}x{image.height}")

    flat = image.as_array().reshape(-1, 4)
    keep = opaque_mask(flat, alpha_threshold)
    # Boolean indexing preserves row-major order, which seeding relies on
    samples = flat[keep, :3].astype(np.float64)

    total = flat.shape[0]
    if samples.shape[0] == 0:
        raise EmptyImageError(
            f"No pixel above alpha threshold {alpha_threshold} among {total} pixels"
        )

    logger.debug(f"Sampled {samples.shape[0]}/{total} pixels (alpha > {alpha_threshold})")
    return samples
