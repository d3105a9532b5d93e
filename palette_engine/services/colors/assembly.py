"""
Result assembly: turn clustering output into weighted, ordered colors.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np
from loguru import logger

from palette_engine.config import config
from palette_engine.services.colors.color_model import ExtractedColor, RGBColor
from palette_engine.services.colors.kmeans import KMeansResult


@dataclass(frozen=True)
class ColorCluster:
    """A centroid and the percentage (0-100) of samples assigned to it."""
    centroid: RGBColor
    percentage: float
    sample_count: int


def build_clusters(result: KMeansResult) -> List[ColorCluster]:
    """Compute per-cluster membership percentages, in centroid order."""
    k = result.k
    total = result.labels.shape[0]
    counts = np.bincount(result.labels, minlength=k)

    clusters = []
    for index in range(k):
        count = int(counts[index])
        clusters.append(ColorCluster(
            centroid=RGBColor(*result.centroids[index]),
            percentage=count / total * 100.0 if total else 0.0,
            sample_count=count,
        ))
    return clusters


def assemble_colors(clusters: List[ColorCluster],
                    materiality_threshold: Optional[float] = None,
                    namer: Optional[Callable[[RGBColor], str]] = None) -> List[ExtractedColor]:
    """
    Convert clusters into public colors.

    Clusters at or below the materiality threshold are dropped. The rest are
    sorted by percentage, descending; the sort is stable so ties keep
    centroid order.

    Args:
        clusters: Clusters in centroid order
        materiality_threshold: Minimum percentage to report (default config.MATERIALITY_THRESHOLD)
        namer: Optional callable giving a display name for a centroid

    Returns:
        List of ExtractedColor, percentage-descending
    """
    if materiality_threshold is None:
        materiality_threshold = config.MATERIALITY_THRESHOLD

    material = [c for c in clusters if c.percentage > materiality_threshold]
    dropped = len(clusters) - len(material)
    if dropped:
        logger.debug(f"Dropped {dropped} cluster(s) at or below {materiality_threshold}%")

    material.sort(key=lambda c: c.percentage, reverse=True)

    return [
        ExtractedColor.from_rgb(
            cluster.centroid,
            percentage=cluster.percentage,
            name=namer(cluster.centroid) if namer else None,
        )
        for cluster in material
    ]
