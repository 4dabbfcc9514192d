"""Output sinks: palette text and quantized images."""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
from PIL import Image
from scipy.cluster.vq import vq

from .formatting import colorize
from .types import OutputError, RGB_CHANNELS, SampleSet

logger = logging.getLogger(__name__)

# Pillow formats the palette tool refuses to write alpha into
FORMATS_WITHOUT_ALPHA = ("JPEG", "BMP", "PPM", "TIFF")

# Writable by Pillow but not raster image files
DOCUMENT_FORMATS = ("PDF", "EPS")


def image_format_for(path: Union[str, Path]) -> Optional[str]:
    """Raster format Pillow can write for the file extension, or None.

    Read-only formats (PSD, FLI, ...) and document containers (PDF, EPS)
    return None, so such paths receive a text palette.
    """
    suffix = Path(path).suffix.lower()
    if not suffix:
        return None

    image_format = Image.registered_extensions().get(suffix)
    if image_format is None or image_format in DOCUMENT_FORMATS:
        return None
    if image_format not in Image.SAVE:
        return None
    return image_format


def is_image_path(path: Union[str, Path]) -> bool:
    return image_format_for(path) is not None


def supports_alpha(path: Union[str, Path]) -> bool:
    return image_format_for(path) not in FORMATS_WITHOUT_ALPHA


def write_palette(
    lines: Sequence[str],
    output_path: Optional[Union[str, Path]] = None,
    colors: Optional[Sequence[Sequence[int]]] = None,
    color_preview: Optional[bool] = None,
) -> None:
    """Write one palette line per color to stdout or a file.

    Args:
        lines: Formatted color codes
        output_path: Destination file; None writes to stdout
        colors: Palette matching ``lines``, used for the terminal preview
        color_preview: Force the ANSI preview on or off for stdout.
            None enables it when stdout is a terminal.

    Raises:
        OutputError: If writing fails
    """
    if output_path is None:
        stream = sys.stdout
        if color_preview is None:
            color_preview = stream.isatty()

        if color_preview and colors is not None:
            lines = [colorize(line, color) for line, color in zip(lines, colors)]

        try:
            for line in lines:
                stream.write(line + "\n")
            stream.flush()
        except OSError as e:
            raise OutputError(f"Failed to write palette to stdout: {e}") from e
        return

    path = Path(output_path)
    text = "".join(line + "\n" for line in lines)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Failed to write palette to {path}: {e}") from e

    logger.info(f"Palette saved to {path}")


def write_quantized_image(
    samples: SampleSet,
    palette: np.ndarray,
    width: int,
    height: int,
    output_path: Union[str, Path],
    use_alpha: bool = False,
) -> np.ndarray:
    """Replace every pixel by its nearest palette color and save the image.

    Args:
        samples: (width * height, C) samples in row-major order
        palette: (K, C) uint8 palette
        width: Image width
        height: Image height
        output_path: Destination; the extension selects the format
        use_alpha: Write an RGBA image when the palette has alpha

    Returns:
        The quantized (height, width, C) array that was saved

    Raises:
        OutputError: If the image cannot be written
    """
    path = Path(output_path)

    n_channels = samples.shape[1] if use_alpha else RGB_CHANNELS
    codes, _ = vq(
        samples[:, :n_channels].astype(np.float64),
        palette[:, :n_channels].astype(np.float64),
    )
    pixels = palette[codes, :n_channels]

    quantized = np.ascontiguousarray(pixels.reshape(height, width, pixels.shape[1]))

    try:
        Image.fromarray(quantized).save(path)
    except (OSError, ValueError, KeyError) as e:
        raise OutputError(f"Failed to save quantized image {path}: {e}") from e

    logger.info(f"Saved quantized image to {path}")
    return quantized
