"""
Preprocessing and edge detection (pipeline stages 1-2).

Each function returns a new RasterImage and leaves its input untouched.
"""

import logging
from typing import Optional

import numpy as np

from src.scanner.backend import VisionBackend, resolve_backend
from src.scanner.errors import InvalidImageError
from src.scanner.types import RasterImage

logger = logging.getLogger(__name__)


def to_grayscale(
    image: RasterImage, backend: Optional[VisionBackend] = None
) -> RasterImage:
    """
    Reduce an image to a single channel.

    3- and 4-channel inputs are treated as BGR / BGRA; single-channel input is
    copied unchanged.
    """
    if image.width == 0 or image.height == 0:
        raise InvalidImageError("Cannot preprocess an image with zero dimension")

    cv = resolve_backend(backend).cv
    if image.channels == 3:
        gray = cv.cvtColor(image.pixels, cv.COLOR_BGR2GRAY)
    elif image.channels == 4:
        gray = cv.cvtColor(image.pixels, cv.COLOR_BGRA2GRAY)
    else:
        gray = image.pixels.reshape(image.height, image.width).copy()

    return RasterImage(gray)


def preprocess(
    image: RasterImage,
    blur_kernel_size: int = 5,
    backend: Optional[VisionBackend] = None,
) -> RasterImage:
    """
    Grayscale conversion followed by a separable Gaussian blur.

    Args:
        image: Input image with 1, 3 or 4 channels.
        blur_kernel_size: Odd side length of the square kernel.
        backend: Vision backend; the process default when None.

    Returns:
        Single-channel smoothed image of the same size.

    Raises:
        InvalidImageError: If the image has a zero dimension.
        ValueError: If blur_kernel_size is not a positive odd integer.
    """
    if blur_kernel_size < 1 or blur_kernel_size % 2 == 0:
        raise ValueError(
            f"blur_kernel_size must be a positive odd integer, got {blur_kernel_size}"
        )

    backend = resolve_backend(backend)
    gray = to_grayscale(image, backend)
    # sigma=0 derives the sigma from the kernel size
    blurred = backend.cv.GaussianBlur(gray.pixels, (blur_kernel_size, blur_kernel_size), 0)

    logger.debug(
        f"Preprocessed {image.width}x{image.height} image "
        f"(channels={image.channels}, kernel={blur_kernel_size})"
    )
    return RasterImage(blurred)


def detect_edges(
    image: RasterImage,
    low_threshold: float = 75,
    high_threshold: float = 200,
    backend: Optional[VisionBackend] = None,
) -> RasterImage:
    """
    Canny edge map: gradient magnitude, non-maximum suppression and hysteresis.

    Args:
        image: Single-channel (smoothed) image.
        low_threshold: Gradients below this are discarded.
        high_threshold: Gradients above this are always edges; those in between
            survive only when connected to a strong edge.
        backend: Vision backend; the process default when None.

    Returns:
        Binary single-channel image with values 0 or 255.
    """
    if image.channels != 1:
        raise InvalidImageError(
            f"Edge detection expects a single-channel image, got {image.channels}"
        )
    if low_threshold > high_threshold:
        raise ValueError(
            f"low_threshold ({low_threshold}) must not exceed high_threshold ({high_threshold})"
        )

    gray = image.pixels.reshape(image.height, image.width)
    edges = resolve_backend(backend).cv.Canny(gray, low_threshold, high_threshold)

    logger.debug(
        f"Edge map: {int(np.count_nonzero(edges))} edge pixels "
        f"(thresholds {low_threshold}/{high_threshold})"
    )
    return RasterImage(edges)
