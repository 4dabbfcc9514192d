"""Main pipeline orchestrator for qtizer."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .formatting import PaletteFormat, format_palette, sort_palette
from .kmeans import DEFAULT_BATCH_SIZE, cluster, make_rng, validate_seed
from .output import (
    image_format_for,
    is_image_path,
    supports_alpha,
    write_palette,
    write_quantized_image,
)
from .raster_ingest import ingest
from .types import ClusterResult, QtizerError, SampleSet, ValidationError

logger = logging.getLogger(__name__)

SORT_CHOICES = ("brightness",)


@dataclass
class PaletteConfig:
    """Configuration for palette extraction."""

    # Clustering
    k: int = 8
    iterations: int = 5
    use_alpha: bool = False
    seed: Optional[int] = None
    batch_size: int = DEFAULT_BATCH_SIZE

    # Output; format None means hex and leaves image outputs allowed
    format: Optional[PaletteFormat] = None
    sort: Optional[str] = None
    color_preview: Optional[bool] = None

    def __post_init__(self):
        """Validate option values before any work starts."""
        if self.k < 1:
            raise ValidationError(f"k must be >= 1, got {self.k}")
        if self.iterations < 0:
            raise ValidationError(f"iterations must be >= 0, got {self.iterations}")
        if self.seed is not None:
            validate_seed(self.seed)
        if self.batch_size < 1:
            raise ValidationError(f"batch_size must be >= 1, got {self.batch_size}")
        if isinstance(self.format, str):
            self.format = PaletteFormat.parse(self.format)
        if self.sort is not None and self.sort not in SORT_CHOICES:
            raise ValidationError(f"Unknown sort '{self.sort}' (choose from {', '.join(SORT_CHOICES)})")

    @property
    def palette_format(self) -> PaletteFormat:
        return self.format or PaletteFormat.HEX


class PalettePipeline:
    """Image to palette pipeline: ingest, cluster, format, write."""

    def __init__(self, config: Optional[PaletteConfig] = None):
        """Initialize pipeline with configuration.

        Args:
            config: Pipeline configuration. Uses defaults if None.
        """
        self.config = config or PaletteConfig()
        self.result: Optional[ClusterResult] = None

    def validate_output(self, output_path: Optional[Union[str, Path]]) -> None:
        """Reject output targets that cannot hold what was asked for.

        Raises:
            ValidationError: If a text format is requested for an image file,
                or alpha is requested for an image format without alpha
        """
        if output_path is None or not is_image_path(output_path):
            return

        if self.config.format is not None:
            raise ValidationError(
                "Cannot specify color-code format when outputting an image file"
            )

        if self.config.use_alpha and not supports_alpha(output_path):
            raise ValidationError(
                f"The {image_format_for(output_path)} image format does not support alpha"
            )

    def run(self, samples: SampleSet) -> ClusterResult:
        """Cluster samples with this pipeline's settings."""
        rng = make_rng(self.config.seed)
        self.result = cluster(
            samples,
            self.config.k,
            self.config.iterations,
            use_alpha=self.config.use_alpha,
            rng=rng,
            batch_size=self.config.batch_size,
        )
        return self.result

    def format(self, result: ClusterResult) -> List[str]:
        """Render the palette of a clustering result as text lines."""
        palette = self._ordered_palette(result)
        return format_palette(palette, self.config.palette_format, self.config.use_alpha)

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None,
    ) -> List[str]:
        """Extract a palette from an image and write it out.

        Args:
            input_path: Path to input image
            output_path: Text or image destination; None writes to stdout

        Returns:
            Formatted palette lines

        Raises:
            InputError: If the image cannot be decoded
            EmptyInputError: If the image has no pixels
            ValidationError: If options conflict with the output target
            OutputError: If writing fails
        """
        self.validate_output(output_path)

        try:
            start = time.perf_counter()
            ingested = ingest(input_path, use_alpha=self.config.use_alpha)
            result = self.run(ingested.samples)
            logger.info(
                f"Clustered {ingested.width}x{ingested.height} image in "
                f"{time.perf_counter() - start:.2f}s"
            )

            palette = self._ordered_palette(result)
            lines = format_palette(palette, self.config.palette_format, self.config.use_alpha)

            if output_path is not None and is_image_path(output_path):
                write_quantized_image(
                    ingested.samples,
                    result.palette,
                    ingested.width,
                    ingested.height,
                    output_path,
                    use_alpha=self.config.use_alpha,
                )
            else:
                write_palette(
                    lines,
                    output_path,
                    colors=palette,
                    color_preview=self.config.color_preview,
                )

            return lines

        except QtizerError:
            raise
        except Exception as e:
            raise QtizerError(f"Pipeline processing failed: {e}") from e

    def _ordered_palette(self, result: ClusterResult) -> np.ndarray:
        palette = result.palette
        if self.config.sort == "brightness":
            palette = sort_palette(palette)
        return palette


def extract_palette(
    input_path: Union[str, Path],
    k: int = 8,
    iterations: int = 5,
    seed: Optional[int] = None,
    use_alpha: bool = False,
) -> np.ndarray:
    """Convenience function: decode an image and return its (K, C) palette."""
    config = PaletteConfig(k=k, iterations=iterations, seed=seed, use_alpha=use_alpha)
    pipeline = PalettePipeline(config)
    ingested = ingest(input_path, use_alpha=use_alpha)
    return pipeline.run(ingested.samples).palette
