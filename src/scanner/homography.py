"""
Homography estimation (pipeline stage 6).

Solves the 8-DOF direct linear system that maps an ordered quadrilateral
onto the rectangle (0,0), (W,0), (W,H), (0,H), with H[2, 2] fixed to 1.
"""

import logging
from typing import Tuple

import numpy as np

from src.scanner.errors import DegenerateGeometryError
from src.scanner.geometric_validator import validate_quadrilateral
from src.scanner.types import Homography, Quadrilateral

logger = logging.getLogger(__name__)


def destination_corners(width: int, height: int) -> np.ndarray:
    """Corners of the output rectangle in TL, TR, BR, BL order."""
    return np.array(
        [[0, 0], [width, 0], [width, height], [0, height]], dtype=np.float64
    )


def solve_homography(src: np.ndarray, dst: np.ndarray) -> Homography:
    """
    Solve for the transform mapping 4 source points onto 4 destination points.

    For each correspondence (x, y) -> (u, v):
        h11*x + h12*y + h13 - u*h31*x - u*h32*y = u
        h21*x + h22*y + h23 - v*h31*x - v*h32*y = v

    Raises:
        DegenerateGeometryError: If the system is singular or the solution is
            not finite.
    """
    src = np.asarray(src, dtype=np.float64).reshape(4, 2)
    dst = np.asarray(dst, dtype=np.float64).reshape(4, 2)

    a = np.zeros((8, 8), dtype=np.float64)
    b = np.zeros(8, dtype=np.float64)
    for i, ((x, y), (u, v)) in enumerate(zip(src, dst)):
        a[2 * i] = [x, y, 1, 0, 0, 0, -u * x, -u * y]
        a[2 * i + 1] = [0, 0, 0, x, y, 1, -v * x, -v * y]
        b[2 * i] = u
        b[2 * i + 1] = v

    try:
        h = np.linalg.solve(a, b)
    except np.linalg.LinAlgError as e:
        raise DegenerateGeometryError(f"Homography system is singular: {e}") from e

    if not np.all(np.isfinite(h)):
        raise DegenerateGeometryError("Homography solution is not finite")

    return Homography(np.append(h, 1.0).reshape(3, 3))


def estimate_homography(
    quadrilateral: Quadrilateral, collinearity_tolerance: float = 1e-3
) -> Tuple[Homography, int, int]:
    """
    Compute the rectifying transform and output size for a quadrilateral.

    Args:
        quadrilateral: Corners in TL, TR, BR, BL order.
        collinearity_tolerance: See geometric_validator.validate_quadrilateral.

    Returns:
        Tuple of (homography, width, height).

    Raises:
        DegenerateGeometryError: If the corners are collinear or too close.

    Example:
        >>> quad = Quadrilateral([[50, 40], [350, 60], [340, 270], [60, 260]])
        >>> homography, width, height = estimate_homography(quad)
        >>> np.round(homography.apply(quad.points), 6).tolist()
        [[0.0, 0.0], [301.0, 0.0], [301.0, 220.0], [0.0, 220.0]]
    """
    width, height = validate_quadrilateral(quadrilateral, collinearity_tolerance)

    homography = solve_homography(
        quadrilateral.points, destination_corners(width, height)
    )

    logger.debug(f"Estimated homography for {width}x{height} output: {homography}")
    return homography, width, height
