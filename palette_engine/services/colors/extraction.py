"""
Color extraction service.

This module implements the extraction pipeline: validate the color count,
downscale the image, sample opaque pixels, cluster them with deterministic
k-means, and assemble weighted, ordered colors. Every call is independent;
the pipeline keeps no state between calls.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import numpy as np
from loguru import logger
from PIL import Image

from palette_engine.config import config, ExtractionQuality
from palette_engine.schemas import ColorEntry, ExtractionMetadata, ExtractionReport
from palette_engine.services.colors.assembly import assemble_colors, build_clusters
from palette_engine.services.colors.color_model import ExtractedColor
from palette_engine.services.colors.errors import ExtractionError, InvalidColorCountError
from palette_engine.services.colors.kmeans import cluster
from palette_engine.services.colors.naming import describe_color
from palette_engine.services.colors.sampling import sample_pixels
from palette_engine.services.imaging import RawImageBuffer, decode_image, preprocess
from palette_engine.services.observability import (
    ExtractionMetrics,
    ExtractionTracker,
    log_memory_usage,
    performance_monitor,
)
from palette_engine.services.reliability import CancellationToken, run_cancellable


@dataclass
class _PipelineOutput:
    colors: List[ExtractedColor]
    metrics: ExtractionMetrics
    quality: ExtractionQuality


def validate_color_count(color_count: int) -> None:
    """
    Reject color counts outside [MIN_COLOR_COUNT, MAX_COLOR_COUNT].

    Raises:
        InvalidColorCountError: If the count is not an integer in range
    """
    if not config.validate_color_count(color_count):
        raise InvalidColorCountError(color_count, config.MIN_COLOR_COUNT, config.MAX_COLOR_COUNT)


def _run_pipeline(image: RawImageBuffer,
                  color_count: int,
                  quality: Optional[Union[ExtractionQuality, str]],
                  cancel_token: Optional[CancellationToken],
                  name_colors: bool) -> _PipelineOutput:
    validate_color_count(color_count)
    color_count = int(color_count)
    tier = ExtractionQuality.parse(quality)

    tracker = ExtractionTracker(image_size=image.size, color_count=color_count)
    log = logger.bind(extraction_id=tracker.extraction_id)

    def checkpoint(stage: str) -> None:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(stage)

    try:
        # Stage 1: bound the image size
        with performance_monitor("preprocessing"):
            start_time = time.time()
            processed = preprocess(image, tier)
            tracker.log_stage("preprocessing", (time.time() - start_time) * 1000,
                              output_size=processed.size,
                              max_dimension=tier.max_dimension)
        checkpoint("preprocessing")

        # Stage 2: sample opaque pixels
        with performance_monitor("pixel_sampling"):
            start_time = time.time()
            samples = sample_pixels(processed)
            tracker.log_stage("sampling", (time.time() - start_time) * 1000,
                              sample_count=int(samples.shape[0]))
        checkpoint("sampling")

        if samples.shape[0] < color_count:
            tracker.log_warning(
                f"Only {samples.shape[0]} samples for {color_count} requested colors"
            )

        # Stage 3: cluster
        start_time = time.time()
        result = cluster(samples, k=color_count, cancel_token=cancel_token)
        tracker.log_stage("clustering", (time.time() - start_time) * 1000,
                          iterations=result.iterations,
                          converged=result.converged)
        if not result.converged:
            tracker.log_warning(f"K-means hit the iteration cap ({result.iterations})")
        if config.METRICS_ENABLED:
            log_memory_usage("clustering_complete")
        checkpoint("clustering")

        # Stage 4: assemble public colors
        with performance_monitor("result_assembly", sample_count=int(samples.shape[0]),
                                 cluster_count=color_count):
            start_time = time.time()
            clusters = build_clusters(result)
            colors = assemble_colors(clusters, namer=describe_color if name_colors else None)
            tracker.log_stage("assembly", (time.time() - start_time) * 1000,
                              palette_size=len(colors))

        # Release working arrays before returning
        del samples, result, clusters

    except ExtractionError as e:
        log.bind(error_type=type(e).__name__).error(
            f"Color extraction {tracker.extraction_id} failed: {e}")
        raise

    metrics = tracker.finish(palette_size=len(colors))
    log.bind(colors=[c.hex_code for c in colors]).info(
        f"Color extraction {tracker.extraction_id} completed successfully")
    return _PipelineOutput(colors=colors, metrics=metrics, quality=tier)


def extract_colors(image: RawImageBuffer,
                   color_count: int = config.DEFAULT_COLOR_COUNT,
                   quality: Optional[Union[ExtractionQuality, str]] = None,
                   cancel_token: Optional[CancellationToken] = None,
                   name_colors: bool = False) -> List[ExtractedColor]:
    """
    Extract the dominant colors of an image.

    Args:
        image: Decoded RGBA buffer
        color_count: Number of clusters, 1-10
        quality: Quality tier selecting the downscale bound (default config.DEFAULT_QUALITY)
        cancel_token: Optional token polled between stages and k-means iterations
        name_colors: Fill ExtractedColor.name with a coarse display name

    Returns:
        At most color_count colors, ordered by percentage descending

    Raises:
        InvalidColorCountError: Before any work if color_count is out of range
        EmptyImageError: If no pixel is opaque enough to sample
        ExtractionCancelledError: If the token is cancelled mid-run
    """
    return _run_pipeline(image, color_count, quality, cancel_token, name_colors).colors


def extract_report(image: RawImageBuffer,
                   color_count: int = config.DEFAULT_COLOR_COUNT,
                   quality: Optional[Union[ExtractionQuality, str]] = None,
                   cancel_token: Optional[CancellationToken] = None,
                   name_colors: bool = False) -> ExtractionReport:
    """Run extract_colors and return the colors with run metadata."""
    output = _run_pipeline(image, color_count, quality, cancel_token, name_colors)
    metrics = output.metrics
    processed_width, processed_height = metrics.processed_image_size

    return ExtractionReport(
        colors=[ColorEntry.from_color(c) for c in output.colors],
        metadata=ExtractionMetadata(
            extraction_id=metrics.extraction_id,
            color_count_requested=int(color_count),
            quality=output.quality.value,
            source_width=image.width,
            source_height=image.height,
            processed_width=processed_width,
            processed_height=processed_height,
            sample_count=metrics.sample_count,
            iterations=metrics.iterations,
            converged=metrics.converged,
            duration_ms=metrics.total_duration_ms,
        ),
    )


def extract_colors_from_source(source: Union[bytes, str, Path, Image.Image, np.ndarray],
                               color_count: int = config.DEFAULT_COLOR_COUNT,
                               quality: Optional[Union[ExtractionQuality, str]] = None,
                               cancel_token: Optional[CancellationToken] = None,
                               name_colors: bool = False) -> List[ExtractedColor]:
    """
    Decode an encoded image (or wrap an array) and extract its colors.

    Raises:
        DecodeFailure: If the source cannot be decoded
    """
    validate_color_count(color_count)

    if isinstance(source, np.ndarray):
        image = RawImageBuffer.from_array(source)
    else:
        image = decode_image(source)

    logger.debug(f"Decoded source into {image.width}x{image.height} buffer")
    return extract_colors(image, color_count, quality=quality,
                          cancel_token=cancel_token, name_colors=name_colors)


async def extract_colors_async(image: RawImageBuffer,
                               color_count: int = config.DEFAULT_COLOR_COUNT,
                               quality: Optional[Union[ExtractionQuality, str]] = None,
                               name_colors: bool = False,
                               cancel_token: Optional[CancellationToken] = None) -> List[ExtractedColor]:
    """
    Run extract_colors in a worker thread.

    Cancelling the awaiting task cancels the extraction at its next
    checkpoint.
    """
    validate_color_count(color_count)
    token = cancel_token or CancellationToken()
    return await run_cancellable(
        extract_colors, token, image, color_count,
        quality=quality, cancel_token=token, name_colors=name_colors,
    )
