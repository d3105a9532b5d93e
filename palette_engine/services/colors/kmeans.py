"""
Deterministic k-means clustering in RGB space.

Seeding picks evenly strided samples instead of random ones, so the same
samples and k always produce the same centroids. All working buffers are
allocated once per call and updated in place across iterations.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np
from loguru import logger

from palette_engine.config import config
from palette_engine.services.colors.errors import EmptyImageError, InvalidColorCountError
from palette_engine.services.observability import performance_tracked
from palette_engine.services.reliability import CancellationToken


@dataclass(frozen=True, eq=False)
class KMeansResult:
    """Final centroids (k, 3) and the sample-to-centroid assignment (N,)."""
    centroids: np.ndarray
    labels: np.ndarray
    iterations: int
    converged: bool

    @property
    def k(self) -> int:
        return self.centroids.shape[0]


def seed_centroids(samples: np.ndarray, k: int) -> np.ndarray:
    """
    Pick k initial centroids at evenly strided sample indices.

    index_i = min(i * step, N - 1) with step = max(1, N // min(N, 10k)).
    """
    n = samples.shape[0]
    step = max(1, n // min(n, k * 10))
    indices = np.minimum(np.arange(k) * step, n - 1)
    return samples[indices].astype(np.float64, copy=True)


class _Workspace:
    """Per-call buffers reused by every iteration."""

    def __init__(self, samples: np.ndarray, k: int, chunk_size: int):
        n = samples.shape[0]
        self.chunk = max(1, min(chunk_size, n))
        self.labels = np.empty(n, dtype=np.intp)
        self.best = np.empty(n, dtype=np.float64)
        self.dist = np.empty((k, self.chunk), dtype=np.float64)
        self.diff = np.empty((self.chunk, 3), dtype=np.float64)
        self.channels = np.ascontiguousarray(samples.T)
        self.sums = np.empty((k, 3), dtype=np.float64)
        self.previous = np.empty((k, 3), dtype=np.float64)


def _assign(samples: np.ndarray, centroids: np.ndarray, ws: _Workspace) -> None:
    """
    Assign every sample to its nearest centroid (squared Euclidean).

    np.argmin returns the first minimum, so ties go to the lowest centroid
    index. Also records each sample's distance to its centroid in ws.best.
    """
    n = samples.shape[0]
    k = centroids.shape[0]
    for start in range(0, n, ws.chunk):
        stop = min(start + ws.chunk, n)
        m = stop - start
        block = samples[start:stop]
        diff = ws.diff[:m]
        dist = ws.dist[:, :m]
        for j in range(k):
            np.subtract(block, centroids[j], out=diff)
            np.multiply(diff, diff, out=diff)
            np.sum(diff, axis=1, out=dist[j])
        np.argmin(dist, axis=0, out=ws.labels[start:stop])
        np.min(dist, axis=0, out=ws.best[start:stop])


def _update(samples: np.ndarray, centroids: np.ndarray, ws: _Workspace) -> int:
    """
    Move each centroid to the mean of its members, in place.

    Empty clusters are reseeded, in index order, to the sample farthest from
    its current centroid; a sample used for reseeding is not reused within
    the same update. If every sample sits exactly on a centroid, an empty
    cluster keeps its position.

    Returns:
        Number of clusters that were reseeded
    """
    k = centroids.shape[0]
    counts = np.bincount(ws.labels, minlength=k)
    for c in range(3):
        ws.sums[:, c] = np.bincount(ws.labels, weights=ws.channels[c], minlength=k)

    populated = counts > 0
    centroids[populated] = ws.sums[populated] / counts[populated, None]

    reseeded = 0
    for j in np.flatnonzero(~populated):
        idx = int(np.argmax(ws.best))
        if ws.best[idx] <= 0.0:
            break
        centroids[j] = samples[idx]
        ws.best[idx] = 0.0
        reseeded += 1
    return reseeded


@performance_tracked("kmeans_clustering")
def cluster(samples: np.ndarray,
            k: int,
            max_iterations: Optional[int] = None,
            tolerance: Optional[float] = None,
            cancel_token: Optional[CancellationToken] = None,
            chunk_size: Optional[int] = None) -> KMeansResult:
    """
    Partition samples into k clusters by iterative centroid refinement.

    Args:
        samples: (N, 3) RGB samples, N >= 1
        k: Number of clusters, k >= 1
        max_iterations: Iteration cap (default config.MAX_ITERATIONS)
        tolerance: Stop once the largest centroid movement falls below this
                   many channel units (default config.CONVERGENCE_TOLERANCE)
        cancel_token: Checked after every iteration
        chunk_size: Samples per assignment block (default config.KMEANS_CHUNK_SIZE)

    Returns:
        KMeansResult with the final centroids and a final assignment pass

    Raises:
        EmptyImageError: If there are no samples
        InvalidColorCountError: If k < 1
        ExtractionCancelledError: If the token is cancelled mid-run
    """
    if max_iterations is None:
        max_iterations = config.MAX_ITERATIONS
    if tolerance is None:
        tolerance = config.CONVERGENCE_TOLERANCE
    if chunk_size is None:
        chunk_size = config.KMEANS_CHUNK_SIZE

    samples = np.asarray(samples, dtype=np.float64)
    if samples.ndim != 2 or samples.shape[1] != 3:
        raise ValueError(f"Expected (N, 3) samples, got shape {samples.shape}")
    if samples.shape[0] == 0:
        raise EmptyImageError("No samples to cluster")
    if k < 1:
        raise InvalidColorCountError(k, 1, config.MAX_COLOR_COUNT)

    n = samples.shape[0]
    logger.debug(f"Starting k-means with k={k}, {n} samples")

    centroids = seed_centroids(samples, k)
    ws = _Workspace(samples, k, chunk_size)

    converged = False
    iterations = 0
    for iterations in range(1, max_iterations + 1):
        _assign(samples, centroids, ws)

        ws.previous[:] = centroids
        reseeded = _update(samples, centroids, ws)
        if reseeded:
            logger.debug(f"Iteration {iterations}: reseeded {reseeded} empty cluster(s)")

        movement = float(np.sqrt(((centroids - ws.previous) ** 2).sum(axis=1)).max())

        if cancel_token is not None:
            cancel_token.raise_if_cancelled(f"k-means iteration {iterations}")

        if movement < tolerance:
            converged = True
            break

    _assign(samples, centroids, ws)

    logger.debug(f"K-means finished after {iterations} iterations (converged={converged})")
    return KMeansResult(
        centroids=centroids,
        labels=ws.labels,
        iterations=iterations,
        converged=converged,
    )
