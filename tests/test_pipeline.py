"""Integration tests for the palette pipeline."""

import numpy as np
import pytest
from PIL import Image

from qtizer.formatting import PaletteFormat
from qtizer.pipeline import PaletteConfig, PalettePipeline, extract_palette
from qtizer.types import EmptyInputError, InputError, ValidationError

QUADRANT_HEX = {"#ff0000", "#00ff00", "#0000ff", "#ffff00"}


class TestPaletteConfig:
    """Test configuration validation."""

    def test_defaults(self):
        config = PaletteConfig()

        assert config.k == 8
        assert config.iterations == 5
        assert config.use_alpha is False
        assert config.seed is None
        assert config.palette_format is PaletteFormat.HEX

    @pytest.mark.parametrize("kwargs,message", [
        ({"k": 0}, "k must be >= 1"),
        ({"iterations": -1}, "iterations must be >= 0"),
        ({"seed": -1}, "seed must be >= 0"),
        ({"seed": 2**64}, "seed must be <="),
        ({"batch_size": 0}, "batch_size must be >= 1"),
        ({"sort": "hue"}, "Unknown sort"),
        ({"format": "cmyk"}, "Unknown format"),
    ])
    def test_invalid_values(self, kwargs, message):
        with pytest.raises(ValidationError, match=message):
            PaletteConfig(**kwargs)

    def test_format_string_parsed(self):
        assert PaletteConfig(format="rgb").format is PaletteFormat.RGB


class TestPalettePipeline:
    """End-to-end palette extraction."""

    def test_quadrants_to_stdout(self, quadrant_png, capsys):
        pipeline = PalettePipeline(PaletteConfig(k=4, iterations=10, seed=0))

        lines = pipeline.process(quadrant_png)

        out = capsys.readouterr().out.splitlines()
        assert out == lines
        assert len(lines) == 4
        assert all(line.startswith("#") and len(line) == 7 for line in lines)
        assert pipeline.result.k == 4

    def test_one_color_per_quadrant_when_k_covers_all(self, tmp_path, capsys):
        # Four pixels, four colors: every pixel becomes its own centroid
        image = np.array(
            [[[255, 0, 0], [0, 255, 0]], [[0, 0, 255], [255, 255, 0]]], dtype=np.uint8
        )
        path = tmp_path / "tiny.png"
        Image.fromarray(image).save(path)

        lines = PalettePipeline(PaletteConfig(k=8, seed=5)).process(path)

        assert set(lines) == QUADRANT_HEX

    def test_seeded_output_is_reproducible(self, quadrant_png, capsys):
        config = PaletteConfig(k=3, iterations=5, seed=99, format=PaletteFormat.RGB)

        first = PalettePipeline(config).process(quadrant_png)
        second = PalettePipeline(config).process(quadrant_png)

        assert first == second
        assert all(line.startswith("rgb(") for line in first)

    def test_text_file_output(self, four_pixel_png, tmp_path):
        output = tmp_path / "palette.txt"

        lines = PalettePipeline(PaletteConfig(k=2, seed=42)).process(four_pixel_png, output)

        assert output.read_text().splitlines() == lines

    def test_alpha_lines(self, rgba_png, capsys):
        config = PaletteConfig(k=2, iterations=3, seed=1, use_alpha=True)

        lines = PalettePipeline(config).process(rgba_png)

        assert sorted(lines) == ["#0000ff80", "#ff0000ff"]

    def test_sorted_output(self, tmp_path, capsys):
        image = np.array(
            [[[255, 0, 0], [0, 0, 255]], [[255, 255, 0], [0, 255, 0]]], dtype=np.uint8
        )
        path = tmp_path / "tiny.png"
        Image.fromarray(image).save(path)
        config = PaletteConfig(k=4, iterations=0, seed=3, sort="brightness")

        lines = PalettePipeline(config).process(path)

        assert lines == ["#ffff00", "#00ff00", "#ff0000", "#0000ff"]

    def test_image_output(self, quadrant_png, tmp_path):
        output = tmp_path / "quantized.png"

        PalettePipeline(PaletteConfig(k=4, iterations=5, seed=0)).process(quadrant_png, output)

        with Image.open(output) as img:
            assert img.size == (64, 64)
            assert img.mode == "RGB"
            colors = {tuple(c) for c in np.asarray(img).reshape(-1, 3)}
        assert len(colors) <= 4

    def test_format_with_image_output_rejected(self, quadrant_png, tmp_path):
        config = PaletteConfig(format=PaletteFormat.HEX)

        with pytest.raises(ValidationError, match="color-code format"):
            PalettePipeline(config).process(quadrant_png, tmp_path / "out.png")

    def test_alpha_with_jpeg_rejected(self, rgba_png, tmp_path):
        config = PaletteConfig(use_alpha=True)

        with pytest.raises(ValidationError, match="does not support alpha"):
            PalettePipeline(config).process(rgba_png, tmp_path / "out.jpg")

    def test_missing_input(self, tmp_path):
        with pytest.raises(InputError):
            PalettePipeline().process(tmp_path / "nothing.png")

    def test_run_empty_samples(self):
        with pytest.raises(EmptyInputError):
            PalettePipeline().run(np.zeros((0, 3), dtype=np.uint8))

    def test_format_result(self, four_pixel_samples):
        pipeline = PalettePipeline(PaletteConfig(k=2, iterations=0, seed=4))

        lines = pipeline.format(pipeline.run(four_pixel_samples))

        assert len(lines) == 2
        assert all(line in {"#ff0000", "#00ff00", "#0000ff"} for line in lines)


class TestExtractPalette:
    """Test the convenience function."""

    def test_extract_palette(self, quadrant_png):
        palette = extract_palette(quadrant_png, k=2, iterations=3, seed=8)

        assert palette.shape == (2, 3)
        assert palette.dtype == np.uint8
