"""Raster image ingestion into flat pixel samples."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .types import (
    EmptyInputError,
    IngestResult,
    InputError,
    RGB_CHANNELS,
    RGBA_CHANNELS,
    ValidationError,
)

logger = logging.getLogger(__name__)

ALPHA_MODES = ("RGBA", "LA", "PA", "La", "RGBa")


def _source_has_alpha(img: Image.Image) -> bool:
    return img.mode in ALPHA_MODES or (img.mode == "P" and "transparency" in img.info)


def ingest(path: Union[str, Path], use_alpha: bool = False) -> IngestResult:
    """
    Decode an image file into a flat sequence of color samples.

    Samples are in row-major pixel order. With ``use_alpha`` every sample
    carries four channels (RGBA), otherwise three (RGB).

    Args:
        path: Path to image file
        use_alpha: Keep the alpha channel

    Returns:
        IngestResult with an (N, 3) or (N, 4) uint8 sample array

    Raises:
        InputError: If the file is missing, unsupported or corrupt
        EmptyInputError: If the image has no pixels
    """
    path = Path(path)

    if not path.exists():
        raise InputError(f"Image file not found: {path}")

    if not path.is_file():
        raise InputError(f"Path is not a file: {path}")

    mode = "RGBA" if use_alpha else "RGB"

    try:
        with Image.open(path) as img:
            img.load()

            # Apply EXIF orientation so the sample order matches what viewers show
            img = ImageOps.exif_transpose(img)
            has_alpha = _source_has_alpha(img)

            if img.mode != mode:
                img = img.convert(mode)

            width, height = img.size
            pixels = np.asarray(img, dtype=np.uint8)

    except UnidentifiedImageError as e:
        raise InputError(f"Unsupported image format {path}: {e}") from e
    except (IOError, OSError) as e:
        raise InputError(f"Failed to load image {path}: {e}") from e

    logger.info(f"Loaded {path} ({width}x{height}, mode={mode})")

    return _to_result(pixels, width, height, has_alpha, str(path))


def ingest_from_array(image: np.ndarray, use_alpha: bool = False, path: str = "") -> IngestResult:
    """
    Create IngestResult from numpy array.

    Args:
        image: Image array (H, W), (H, W, 3) or (H, W, 4) with values 0-255
        use_alpha: Keep the alpha channel; opaque alpha is added to RGB input
        path: Optional path for reference

    Returns:
        IngestResult
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise ValidationError(f"Expected 2D or 3D array, got {image.ndim}D")

    channels = image.shape[2]
    if channels not in (RGB_CHANNELS, RGBA_CHANNELS):
        raise ValidationError(f"Expected 3 or 4 channels, got {channels}")

    has_alpha = channels == RGBA_CHANNELS
    image = np.clip(image, 0, 255).astype(np.uint8)

    if use_alpha and not has_alpha:
        opaque = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
        image = np.concatenate([image, opaque], axis=2)
    elif not use_alpha and has_alpha:
        image = image[..., :RGB_CHANNELS]

    height, width = image.shape[:2]
    return _to_result(image, width, height, has_alpha, path)


def _to_result(pixels: np.ndarray, width: int, height: int, has_alpha: bool, path: str) -> IngestResult:
    if width * height == 0:
        raise EmptyInputError(f"Image has no pixels: {path or '<array>'}")

    samples = np.ascontiguousarray(pixels.reshape(-1, pixels.shape[-1]))
    samples.setflags(write=False)

    return IngestResult(
        samples=samples,
        width=width,
        height=height,
        has_alpha=has_alpha,
        original_path=path,
    )
