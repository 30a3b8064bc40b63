"""
Geometric validation functions for the Document Scanner module.

Measures the ordered quadrilateral and rejects shapes for which no
well-posed homography exists.
"""

import itertools
import logging
from typing import Tuple

import numpy as np

from src.scanner.errors import DegenerateGeometryError
from src.scanner.types import Quadrilateral

logger = logging.getLogger(__name__)


def calculate_edge_lengths(
    quadrilateral: Quadrilateral,
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> quad = Quadrilateral([[100, 100], [400, 100], [400, 200], [100, 200]])
        >>> top, right, bottom, left = calculate_edge_lengths(quad)
        >>> print(f"Width: {top:.0f}, Height: {right:.0f}")
        Width: 300, Height: 100
    """
    tl, tr, br, bl = quadrilateral.points

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(br - bl))
    left_edge = float(np.linalg.norm(bl - tl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def calculate_target_dimensions(quadrilateral: Quadrilateral) -> Tuple[int, int]:
    """
    Size of the rectified output in whole pixels.

    Width is the longer of the top and bottom edges, height the longer of the
    left and right edges, so no content is lost under mild perspective.

    Example:
        >>> quad = Quadrilateral([[50, 40], [350, 60], [340, 270], [60, 260]])
        >>> calculate_target_dimensions(quad)
        (301, 220)
    """
    top, right, bottom, left = calculate_edge_lengths(quadrilateral)

    width = int(round(max(top, bottom)))
    height = int(round(max(left, right)))

    logger.debug(f"Target dimensions: {width} x {height}")
    return width, height


def min_triangle_sine(points: np.ndarray) -> float:
    """
    Flatness of the flattest 3-point triangle among the corners.

    For every triangle the sine of its largest interior angle is taken:
    twice the area (|cross product|) divided by the two shorter sides. The
    value does not depend on scale or aspect ratio: 1.0 for any rectangle,
    0.0 when three of the points are collinear or two coincide.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)

    sines = []
    for a, b, c in itertools.combinations(pts, 3):
        sides = sorted(
            [
                float(np.linalg.norm(b - a)),
                float(np.linalg.norm(c - b)),
                float(np.linalg.norm(a - c)),
            ]
        )
        if sides[0] == 0.0:
            return 0.0
        cross = abs(float((b[0] - a[0]) * (c[1] - a[1]) - (b[1] - a[1]) * (c[0] - a[0])))
        sines.append(min(1.0, cross / (sides[0] * sides[1])))

    return min(sines)


def validate_quadrilateral(
    quadrilateral: Quadrilateral, collinearity_tolerance: float = 1e-3
) -> Tuple[int, int]:
    """
    Reject collinear or zero-size quadrilaterals.

    Args:
        quadrilateral: Ordered corners.
        collinearity_tolerance: Minimum value of min_triangle_sine.

    Returns:
        Target (width, height) of the rectified output.

    Raises:
        DegenerateGeometryError: If three or more corners are (nearly)
            collinear, or the output would be smaller than one pixel.
    """
    ratio = min_triangle_sine(quadrilateral.points)
    if ratio < collinearity_tolerance:
        raise DegenerateGeometryError(
            f"Quadrilateral corners are collinear or coincident "
            f"(triangle sine {ratio:.2e} < {collinearity_tolerance:.2e}): "
            f"{quadrilateral.to_list()}"
        )

    width, height = calculate_target_dimensions(quadrilateral)
    if width < 1 or height < 1:
        raise DegenerateGeometryError(
            f"Rectified size too small: width={width}, height={height}"
        )

    return width, height
