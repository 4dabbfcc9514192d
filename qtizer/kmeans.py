"""Seeded k-means clustering of color samples."""

import logging
from typing import Optional

import numpy as np

from .types import (
    Assignment,
    CentroidArray,
    ClusterResult,
    EmptyInputError,
    RGB_CHANNELS,
    RGBA_CHANNELS,
    SampleSet,
    ValidationError,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 4096

# Seeds are unsigned 64-bit integers
MAX_SEED = 2**64 - 1


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the generator used to draw initial centroids.

    Args:
        seed: Seed in [0, 2**64 - 1]. None draws fresh entropy from the OS.

    Returns:
        A new numpy Generator owned by the caller
    """
    if seed is not None:
        validate_seed(seed)
    return np.random.default_rng(seed)


def validate_seed(seed: int) -> None:
    """Raise ValidationError unless seed fits an unsigned 64-bit integer."""
    if seed < 0:
        raise ValidationError(f"seed must be >= 0, got {seed}")
    if seed > MAX_SEED:
        raise ValidationError(f"seed must be <= {MAX_SEED}, got {seed}")


def _metric_channels(channels: int, use_alpha: bool) -> int:
    return channels if use_alpha else min(channels, RGB_CHANNELS)


def initial_centroids(samples: SampleSet, k: int, rng: np.random.Generator) -> CentroidArray:
    """Pick k distinct samples uniformly at random as starting centroids.

    Centroids keep the order of the draw, which fixes the order of the
    final palette.
    """
    indices = rng.choice(len(samples), size=k, replace=False)
    return samples[np.asarray(indices)].astype(np.float64)


def squared_distances(samples: np.ndarray, centroids: CentroidArray, use_alpha: bool = False) -> np.ndarray:
    """Squared Euclidean distance from every sample to every centroid.

    Args:
        samples: (N, C) sample array
        centroids: (K, C) centroid array
        use_alpha: Include the fourth channel when present

    Returns:
        (N, K) float64 distances
    """
    n_channels = _metric_channels(samples.shape[1], use_alpha)
    samples = samples.astype(np.float64)
    centroids = centroids.astype(np.float64)

    # Accumulate channel by channel so a constant alpha adds exact zeros
    distances = np.zeros((len(samples), len(centroids)), dtype=np.float64)
    for channel in range(n_channels):
        diff = samples[:, channel, np.newaxis] - centroids[np.newaxis, :, channel]
        distances += diff * diff

    return distances


def assign(
    samples: SampleSet,
    centroids: CentroidArray,
    use_alpha: bool = False,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Assignment:
    """Map each sample to its nearest centroid.

    Equidistant centroids resolve to the lowest index (``np.argmin`` returns
    the first minimum).

    Args:
        samples: (N, C) sample array
        centroids: (K, C) centroid array
        use_alpha: Include alpha in the distance
        batch_size: Samples per distance block

    Returns:
        (N,) array of centroid indices in [0, K)
    """
    if batch_size < 1:
        raise ValidationError(f"batch_size must be >= 1, got {batch_size}")

    n_samples = len(samples)
    labels = np.empty(n_samples, dtype=np.intp)

    for start in range(0, n_samples, batch_size):
        end = min(start + batch_size, n_samples)
        distances = squared_distances(samples[start:end], centroids, use_alpha)
        labels[start:end] = np.argmin(distances, axis=1)

    return labels


def update(samples: SampleSet, assignments: Assignment, centroids: CentroidArray) -> CentroidArray:
    """Recompute every centroid as the mean of its members.

    A cluster with no members keeps its previous centroid. All channels are
    averaged, so alpha is carried through even when it is left out of the
    distance.

    Returns:
        A new (K, C) array; ``centroids`` is not modified
    """
    k, n_channels = centroids.shape
    counts = np.bincount(assignments, minlength=k)

    sums = np.zeros((k, n_channels), dtype=np.float64)
    for channel in range(n_channels):
        sums[:, channel] = np.bincount(
            assignments, weights=samples[:, channel].astype(np.float64), minlength=k
        )

    new_centroids = centroids.copy()
    occupied = counts > 0
    new_centroids[occupied] = sums[occupied] / counts[occupied, np.newaxis]

    empty = int(k - np.count_nonzero(occupied))
    if empty:
        logger.debug(f"{empty} empty cluster(s) kept their previous centroid")

    return new_centroids


def _validate_samples(samples: SampleSet) -> np.ndarray:
    samples = np.asarray(samples)

    if samples.size == 0:
        raise EmptyInputError("Cannot cluster an empty sample set")

    if samples.ndim != 2 or samples.shape[1] not in (RGB_CHANNELS, RGBA_CHANNELS):
        raise ValidationError(
            f"Samples must have shape (N, 3) or (N, 4), got {samples.shape}"
        )

    return samples


def cluster(
    samples: SampleSet,
    k: int,
    iterations: int,
    seed: Optional[int] = None,
    use_alpha: bool = False,
    rng: Optional[np.random.Generator] = None,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> ClusterResult:
    """Run k-means over color samples for a fixed number of passes.

    Initial centroids are k samples drawn without replacement. Each pass
    assigns every sample before any centroid moves. There is no convergence
    check; ``iterations`` is the full budget.

    Args:
        samples: (N, 3) or (N, 4) uint8 samples, never modified
        k: Number of clusters (>= 1, clamped to N)
        iterations: Number of assignment/update passes (>= 0)
        seed: Seed for a fresh generator; ignored when ``rng`` is given
        use_alpha: Include alpha in the distance metric
        rng: Generator to draw initial centroids from
        batch_size: Samples per distance block

    Returns:
        ClusterResult with exactly k centroids in draw order

    Raises:
        EmptyInputError: If there are no samples
        ValidationError: If k < 1, iterations < 0 or samples are malformed
    """
    samples = _validate_samples(samples)

    if k < 1:
        raise ValidationError(f"k must be >= 1, got {k}")
    if iterations < 0:
        raise ValidationError(f"iterations must be >= 0, got {iterations}")

    n_samples = len(samples)
    if k > n_samples:
        logger.debug(f"Clamping k={k} to sample count {n_samples}")
        k = n_samples

    if rng is None:
        rng = make_rng(seed)

    centroids = initial_centroids(samples, k, rng)
    assignments = None

    logger.info(f"Clustering {n_samples:,} samples into {k} colors ({iterations} iterations)")

    for i in range(iterations):
        logger.debug(f"k-means iteration {i + 1}/{iterations}")
        assignments = assign(samples, centroids, use_alpha, batch_size)
        centroids = update(samples, assignments, centroids)

    return ClusterResult(centroids=centroids, assignments=assignments, iterations=iterations)
