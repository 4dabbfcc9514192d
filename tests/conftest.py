"""Pytest configuration and fixtures."""

import numpy as np
import pytest
from PIL import Image

# 2x2 image: two red pixels, one green, one blue
FOUR_PIXELS = [(255, 0, 0), (255, 0, 0), (0, 255, 0), (0, 0, 255)]


class ScriptedRng:
    """Stand-in generator returning a fixed initial draw."""

    def __init__(self, indices):
        self.indices = list(indices)
        self.calls = []

    def choice(self, n, size=None, replace=True):
        self.calls.append((n, size, replace))
        return np.array(self.indices[:size])


@pytest.fixture
def four_pixel_samples():
    """Samples of the 2x2 red/red/green/blue image."""
    return np.array(FOUR_PIXELS, dtype=np.uint8)


@pytest.fixture
def four_pixel_png(tmp_path):
    """The 2x2 red/red/green/blue image saved as PNG."""
    pixels = np.array(FOUR_PIXELS, dtype=np.uint8).reshape(2, 2, 3)
    path = tmp_path / "four.png"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def quadrant_png(tmp_path):
    """64x64 image with four solid quadrants."""
    image = np.zeros((64, 64, 3), dtype=np.uint8)
    image[:32, :32] = [255, 0, 0]  # Red
    image[:32, 32:] = [0, 255, 0]  # Green
    image[32:, :32] = [0, 0, 255]  # Blue
    image[32:, 32:] = [255, 255, 0]  # Yellow
    path = tmp_path / "quadrants.png"
    Image.fromarray(image).save(path)
    return path


@pytest.fixture
def rgba_png(tmp_path):
    """8x8 RGBA image: opaque red on the left, half transparent blue on the right."""
    image = np.zeros((8, 8, 4), dtype=np.uint8)
    image[:, :4] = [255, 0, 0, 255]
    image[:, 4:] = [0, 0, 255, 128]
    path = tmp_path / "alpha.png"
    Image.fromarray(image).save(path)
    return path


@pytest.fixture
def scripted_rng():
    """Factory for generators with a fixed initial draw."""
    return ScriptedRng
