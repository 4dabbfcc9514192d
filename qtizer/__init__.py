"""qtizer: color palette quantization with seeded k-means clustering.

Decodes a raster image into pixel samples, clusters them into K
representative colors and prints them as hex or rgb codes.
"""

__version__ = "0.1.0"

from qtizer.types import (
    ClusterResult,
    EmptyInputError,
    IngestResult,
    InputError,
    OutputError,
    QtizerError,
    ValidationError,
)
from qtizer.kmeans import cluster
from qtizer.formatting import PaletteFormat, format_palette

__all__ = [
    "ClusterResult",
    "EmptyInputError",
    "IngestResult",
    "InputError",
    "OutputError",
    "QtizerError",
    "ValidationError",
    "PaletteFormat",
    "cluster",
    "format_palette",
]
