"""
Perspective warp (pipeline stage 7).

Every destination pixel is mapped through the inverse homography and the
source is resampled there. Rows are independent, so the output can be split
into horizontal strips and warped on a thread pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import numpy as np

from src.scanner.backend import VisionBackend, resolve_backend
from src.scanner.types import Homography, RasterImage

logger = logging.getLogger(__name__)

# Names of the OpenCV constants, looked up on the backend module
INTERPOLATION_FLAGS = {
    "linear": "INTER_LINEAR",
    "cubic": "INTER_CUBIC",
    "nearest": "INTER_NEAREST",
    "lanczos": "INTER_LANCZOS4",
}

BORDER_MODES = {
    "constant": "BORDER_CONSTANT",
    "replicate": "BORDER_REPLICATE",
}


def split_rows(height: int, workers: int, min_rows_per_worker: int = 64) -> List[Tuple[int, int]]:
    """
    Partition [0, height) into contiguous (start, stop) row ranges.

    No strip is shorter than min_rows_per_worker unless the whole image is.
    """
    strips = max(1, min(workers, height // max(1, min_rows_per_worker)))
    bounds = np.linspace(0, height, strips + 1).round().astype(int)
    return [(int(start), int(stop)) for start, stop in zip(bounds[:-1], bounds[1:])]


def _warp_rows(
    cv,
    source: np.ndarray,
    inverse: np.ndarray,
    width: int,
    start: int,
    stop: int,
    flags: int,
    border_mode: int,
    border_value: Tuple[int, ...],
) -> np.ndarray:
    # Destination row r of the strip is row (r + start) of the full output
    shift = np.array([[1, 0, 0], [0, 1, start], [0, 0, 1]], dtype=np.float64)
    strip_map = inverse @ shift
    return cv.warpPerspective(
        source,
        strip_map,
        (width, stop - start),
        flags=flags | cv.WARP_INVERSE_MAP,
        borderMode=border_mode,
        borderValue=border_value,
    )


def warp_image(
    image: RasterImage,
    homography: Homography,
    width: int,
    height: int,
    interpolation: str = "linear",
    border_mode: str = "constant",
    border_value: int = 0,
    workers: int = 1,
    min_rows_per_worker: int = 64,
    backend: Optional[VisionBackend] = None,
) -> RasterImage:
    """
    Resample the source into a width x height rectangle.

    Args:
        image: Source image.
        homography: Transform from source to destination coordinates.
        width: Output width in pixels.
        height: Output height in pixels.
        interpolation: "linear" (bilinear), "cubic", "nearest" or "lanczos".
        border_mode: "constant" fills with border_value, "replicate" clamps to
            the nearest edge pixel.
        border_value: Background intensity for constant borders.
        workers: Threads used for the warp; 1 warps in the calling thread.
        min_rows_per_worker: Smallest strip height handed to a thread.
        backend: Vision backend; the process default when None.

    Returns:
        RasterImage with the same channel depth as the source.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Output size must be positive, got {width}x{height}")
    if interpolation not in INTERPOLATION_FLAGS:
        raise ValueError(
            f"Invalid interpolation: {interpolation}. "
            f"Must be one of {list(INTERPOLATION_FLAGS)}"
        )
    if border_mode not in BORDER_MODES:
        raise ValueError(
            f"Invalid border_mode: {border_mode}. Must be one of {list(BORDER_MODES)}"
        )

    source = image.pixels
    if image.channels == 1 and source.ndim == 3:
        source = source.reshape(image.height, image.width)

    cv = resolve_backend(backend).cv
    inverse = homography.inverse().matrix
    flags = getattr(cv, INTERPOLATION_FLAGS[interpolation])
    mode = getattr(cv, BORDER_MODES[border_mode])
    fill = (border_value,) * 4

    strips = split_rows(height, workers, min_rows_per_worker)
    if len(strips) == 1:
        warped = _warp_rows(cv, source, inverse, width, 0, height, flags, mode, fill)
    else:
        logger.debug(f"Warping {width}x{height} output in {len(strips)} strips")
        with ThreadPoolExecutor(max_workers=len(strips)) as executor:
            futures = [
                executor.submit(
                    _warp_rows, cv, source, inverse, width, start, stop, flags, mode, fill
                )
                for start, stop in strips
            ]
            warped = np.concatenate([future.result() for future in futures], axis=0)

    logger.debug(
        f"Warped {image.width}x{image.height} -> {width}x{height} ({interpolation})"
    )
    return RasterImage(warped)
