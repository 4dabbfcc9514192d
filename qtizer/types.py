"""Common types and exceptions for qtizer."""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

# Type aliases
SampleSet = np.ndarray  # (N, 3) or (N, 4) uint8
CentroidArray = np.ndarray  # (K, C) float64
Assignment = np.ndarray  # (N,) intp
Color = Union[Tuple[int, int, int], Tuple[int, int, int, int]]

RGB_CHANNELS = 3
RGBA_CHANNELS = 4


@dataclass
class IngestResult:
    """Pixel samples decoded from an image."""

    samples: SampleSet
    width: int
    height: int
    has_alpha: bool = False
    original_path: str = ""

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])


@dataclass
class ClusterResult:
    """Outcome of one k-means run.

    ``centroids`` keeps the float accumulation; ``palette`` is the rounded
    view used for output. ``assignments`` holds the last assignment pass and
    is None when no pass ran (zero iterations).
    """

    centroids: CentroidArray
    assignments: Optional[Assignment] = None
    iterations: int = 0

    @property
    def k(self) -> int:
        return int(self.centroids.shape[0])

    @property
    def palette(self) -> np.ndarray:
        """Centroids rounded half-up and clipped to uint8."""
        rounded = np.floor(self.centroids + 0.5)
        return np.clip(rounded, 0, 255).astype(np.uint8)


class QtizerError(Exception):
    """Base exception for qtizer errors."""

    exit_code = 1


class InputError(QtizerError):
    """Exception raised when an input image cannot be read or decoded."""

    pass


class EmptyInputError(InputError):
    """Exception raised when decoding yields zero samples."""

    pass


class ValidationError(QtizerError, ValueError):
    """Exception raised for invalid option values."""

    exit_code = 2


class OutputError(QtizerError):
    """Exception raised when the palette or image cannot be written."""

    pass
