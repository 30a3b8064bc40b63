"""
Command line entry point: scan a single image file.

Usage:
    docscan --input photo.jpg --output flat.jpg
    docscan --input photo.jpg --output flat.jpg --corners "50,40;350,60;340,270;60,260"
"""

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from src.scanner.config_loader import WarpConfig, get_default_config, load_config
from src.scanner.errors import ScannerError
from src.scanner.processor import DocumentScanner
from src.utils.io import JPEG_QUALITY, read_image, save_image
from src.utils.logging_config import setup_logging
from src.utils.visualization import draw_quadrilateral

logger = logging.getLogger(__name__)


def parse_corners(text: str) -> List[List[float]]:
    """Parse "x,y;x,y;x,y;x,y" into a list of 4 [x, y] pairs."""
    pairs = [p for p in text.replace(" ", "").split(";") if p]
    if len(pairs) != 4:
        raise argparse.ArgumentTypeError(
            f"Expected 4 corners as 'x,y;x,y;x,y;x,y', got {len(pairs)}"
        )
    try:
        return [[float(v) for v in pair.split(",")] for pair in pairs]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid corner coordinates: {text}") from e


def positive_int(text: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        value = int(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected an integer, got {text!r}") from e
    if value < 1:
        raise argparse.ArgumentTypeError(f"Must be >= 1, got {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Detect a document in a photo and rectify its perspective",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--input", type=str, required=True, help="Input image file")
    parser.add_argument("--output", type=str, required=True, help="Output image file")
    parser.add_argument("--config", type=str, default=None, help="Scanner config YAML")
    parser.add_argument(
        "--corners",
        type=parse_corners,
        default=None,
        help="Manual corners 'x,y;x,y;x,y;x,y' (skips detection)",
    )
    parser.add_argument(
        "--quality", type=int, default=JPEG_QUALITY, help="JPEG quality (0-100)"
    )
    parser.add_argument(
        "--overlay", type=str, default=None, help="Save detected boundary overlay here"
    )
    parser.add_argument(
        "--workers",
        type=positive_int,
        default=None,
        help="Threads for the perspective warp",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        # pydantic ValidationError is a ValueError
        config = load_config(Path(args.config)) if args.config else get_default_config()
        if args.workers is not None:
            warp = WarpConfig(**{**config.warp.model_dump(), "workers": args.workers})
            config = config.model_copy(update={"warp": warp})

        scanner = DocumentScanner(config=config)
        image = read_image(args.input)

        if args.corners is not None:
            result = scanner.rectify(image, args.corners)
        else:
            result = scanner.scan(image)

        save_image(result.image, args.output, quality=args.quality)
        if args.overlay:
            save_image(draw_quadrilateral(image, result.quadrilateral), args.overlay)
    except (FileNotFoundError, ValueError, ScannerError) as e:
        logger.error(f"Scan failed: {e}")
        print(f"\n❌ Scan failed: {e}")
        return 1

    print("=" * 60)
    print(f"Input:    {args.input} ({image.width}x{image.height})")
    print(f"Output:   {args.output} ({result.width}x{result.height})")
    print(f"Corners:  {result.quadrilateral.to_list()}")
    print(f"Status:   {result.get_status_message()}")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
