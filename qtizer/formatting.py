"""Palette text formats and terminal color preview."""

from enum import Enum
from typing import Iterable, List, Sequence

import numpy as np

from .types import RGBA_CHANNELS, ValidationError

ANSI_RESET = "\x1b[0m"
ANSI_WHITE_TEXT = "\x1b[38;2;255;255;255m"
ANSI_BLACK_TEXT = "\x1b[38;2;0;0;0m"


class PaletteFormat(Enum):
    """Color code output format."""

    HEX = "hex"  # #rrggbb or #rrggbbaa
    RGB = "rgb"  # rgb(r, g, b) or rgba(r, g, b, a)

    @classmethod
    def parse(cls, value: str) -> "PaletteFormat":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValidationError(f"Unknown format '{value}' (choose from {choices})") from None


def _channels(color: Sequence[int]) -> List[int]:
    return [int(c) for c in color]


def format_color(color: Sequence[int], fmt: PaletteFormat, use_alpha: bool = False) -> str:
    """Render a single color code without any terminal escapes.

    Alpha is written only when ``use_alpha`` is set and the color has a
    fourth channel.
    """
    c = _channels(color)
    with_alpha = use_alpha and len(c) >= RGBA_CHANNELS

    if fmt is PaletteFormat.HEX:
        text = f"#{c[0]:02x}{c[1]:02x}{c[2]:02x}"
        return text + f"{c[3]:02x}" if with_alpha else text

    if fmt is PaletteFormat.RGB:
        if with_alpha:
            return f"rgba({c[0]}, {c[1]}, {c[2]}, {c[3]})"
        return f"rgb({c[0]}, {c[1]}, {c[2]})"

    raise ValidationError(f"Unsupported format: {fmt}")


def format_palette(palette: Iterable[Sequence[int]], fmt: PaletteFormat, use_alpha: bool = False) -> List[str]:
    """Render every palette entry, keeping palette order."""
    return [format_color(color, fmt, use_alpha) for color in palette]


def brightness(color: Sequence[int]) -> int:
    """Luma of the RGB part of a color (ITU-R BT.601 weights)."""
    r, g, b = _channels(color)[:3]
    return int(0.299 * r + 0.587 * g + 0.114 * b)


def colorize(text: str, color: Sequence[int]) -> str:
    """Wrap text in 24-bit ANSI codes using ``color`` as background.

    The foreground is white on dark colors and black on light ones.
    """
    r, g, b = _channels(color)[:3]
    foreground = ANSI_WHITE_TEXT if brightness(color) < 128 else ANSI_BLACK_TEXT
    return f"{foreground}\x1b[48;2;{r};{g};{b}m{text}{ANSI_RESET}"


def sort_palette(palette: np.ndarray) -> np.ndarray:
    """Order colors by descending brightness, then ascending packed RGB."""
    palette = np.asarray(palette)
    keys = [
        (-brightness(color), (int(color[0]) << 16) | (int(color[1]) << 8) | int(color[2]))
        for color in palette
    ]
    order = sorted(range(len(palette)), key=lambda i: keys[i])
    return palette[order]
