"""Command-line interface for qtizer."""

import argparse
import logging
import sys
from typing import Optional

from . import __version__
from .formatting import PaletteFormat
from .pipeline import SORT_CHOICES, PaletteConfig, PalettePipeline
from .types import QtizerError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="qtizer",
        description="Quantization/palette-generation tool using k-means clustering on pixel data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print an 8 color palette with a terminal preview
  qtizer photo.jpg

  # Reproducible 12 color palette, rgb() codes, written to a file
  qtizer photo.jpg palette.txt -k 12 -s 42 -f rgb

  # Quantized image (the output extension selects the image format)
  qtizer sprite.png -a -k 16 -o sprite_16.png
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "output_positional",
        nargs="?",
        default=None,
        metavar="output",
        help="Output file path (overridden by -o/--output)",
    )

    parser.add_argument(
        "-k",
        dest="k",
        type=int,
        default=8,
        metavar="count",
        help="Number of colors to quantize to (default: 8)",
    )

    parser.add_argument(
        "-n",
        dest="iterations",
        type=int,
        default=5,
        metavar="count",
        help="Number of k-means iterations to perform (default: 5)",
    )

    parser.add_argument(
        "-a",
        "--with-alpha",
        action="store_true",
        help="Include alpha channel",
    )

    parser.add_argument(
        "-s",
        "--seed",
        type=int,
        default=None,
        metavar="number",
        help="Optional RNG seed for reproducible results",
    )

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        metavar="output",
        help="Output file path; stdout if omitted, an image file for image extensions",
    )

    parser.add_argument(
        "-f",
        "--format",
        choices=[f.value for f in PaletteFormat],
        default=None,
        metavar="fmt",
        help="Palette output format: hex or rgb (default: hex)",
    )

    parser.add_argument(
        "--sort",
        choices=SORT_CHOICES,
        default=None,
        help="Sort palette lines instead of keeping cluster order",
    )

    parser.add_argument(
        "--color",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force the ANSI color preview on stdout on or off (default: auto)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def configure_logging(verbosity: int) -> None:
    """Send log records to stderr so stdout only carries the palette."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for input/output errors, 2 for invalid options)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    configure_logging(parsed.verbose)

    output_path = parsed.output if parsed.output is not None else parsed.output_positional

    try:
        config = PaletteConfig(
            k=parsed.k,
            iterations=parsed.iterations,
            use_alpha=parsed.with_alpha,
            seed=parsed.seed,
            format=PaletteFormat.parse(parsed.format) if parsed.format else None,
            sort=parsed.sort,
            color_preview=parsed.color,
        )
        PalettePipeline(config).process(parsed.input, output_path)
        return 0

    except QtizerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
