"""
Shared Utilities

Image I/O, logging setup and debug overlays used around the scanner core.
"""

from src.utils.io import encode_image, read_image, save_image
from src.utils.logging_config import setup_logging
from src.utils.visualization import draw_quadrilateral

__all__ = [
    "encode_image",
    "read_image",
    "save_image",
    "setup_logging",
    "draw_quadrilateral",
]
