"""
I/O Utilities

Image encode/decode helpers. The pipeline core never touches the file system;
these are used by the CLI and by callers handing results to storage.
"""

from pathlib import Path
from typing import Union

import cv2
import numpy as np

from src.scanner.errors import InvalidImageError
from src.scanner.types import RasterImage

JPEG_QUALITY = 90


def read_image(file_path: Union[str, Path]) -> RasterImage:
    """
    Decode an image file into a 3-channel BGR RasterImage.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidImageError: If the file cannot be decoded.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    # cv2.imread cannot handle non-ASCII paths on Windows
    buffer = np.fromfile(str(file_path), dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if image is None:
        raise InvalidImageError(f"Could not decode image: {file_path}")
    return RasterImage(image)


def encode_image(
    image: RasterImage, ext: str = ".jpg", quality: int = JPEG_QUALITY
) -> bytes:
    """
    Encode a RasterImage into a compressed image format.

    Args:
        image: Image to encode.
        ext: Target format extension (".jpg", ".png", ...).
        quality: JPEG quality in [0, 100]; ignored for other formats.

    Returns:
        Encoded bytes.
    """
    if not 0 <= quality <= 100:
        raise ValueError(f"quality must be in [0, 100], got {quality}")

    params = []
    if ext.lower() in (".jpg", ".jpeg"):
        params = [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)]

    ok, encoded = cv2.imencode(ext, image.pixels, params)
    if not ok:
        raise ValueError(f"Failed to encode image as {ext}")
    return encoded.tobytes()


def save_image(
    image: RasterImage, file_path: Union[str, Path], quality: int = JPEG_QUALITY
) -> Path:
    """Encode and write an image, creating parent directories."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    data = encode_image(image, ext=file_path.suffix or ".jpg", quality=quality)
    file_path.write_bytes(data)
    return file_path
