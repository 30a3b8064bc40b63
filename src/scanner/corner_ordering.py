"""
Corner ordering (pipeline stage 5).

Assigns Top-Left, Top-Right, Bottom-Right, Bottom-Left roles to 4 unordered
points. The output is always a permutation of the input; no vertex is
synthesized.
"""

import logging
from typing import Union

import numpy as np

from src.scanner.types import CornerOrdering, Quadrilateral

logger = logging.getLogger(__name__)


def _as_points(pts: Union[np.ndarray, list]) -> np.ndarray:
    pts = np.array(pts, dtype=np.float64).reshape(-1, 2)
    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )
    return pts


def sort_by_centroid_angle(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Sort 4 points by polar angle around their centroid.

    Angles come from atan2(y - cy, x - cx) in image coordinates (y grows
    downwards), ascending from -pi. For a roughly axis-aligned quadrilateral
    the result is TL, TR, BR, BL.

    Known limitation: once the quadrilateral is rotated past about 45 degrees
    the starting vertex changes and the roles rotate with it.

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.

    Returns:
        Array of shape (4, 2) in angular order.
    """
    pts = _as_points(pts)
    centroid = pts.mean(axis=0)
    angles = np.arctan2(pts[:, 1] - centroid[1], pts[:, 0] - centroid[0])
    return pts[np.argsort(angles, kind="stable")]


def sort_by_bounding_box(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Angular order anchored on the bounding box.

    Keeps the cyclic order of sort_by_centroid_angle, then rotates it so that
    the first vertex is the one closest to the top-left corner of the
    axis-aligned bounding box.

    Example:
        >>> pts = np.array([[150, 10], [290, 150], [150, 290], [10, 150]])
        >>> sort_by_bounding_box(pts)[0]
        array([150.,  10.])
    """
    cyclic = sort_by_centroid_angle(pts)
    anchor = cyclic.min(axis=0)
    distances = np.linalg.norm(cyclic - anchor, axis=1)
    return np.roll(cyclic, -int(np.argmin(distances)), axis=0)


def is_convex_quadrilateral(rect: np.ndarray) -> bool:
    """
    Check if 4 ordered points form a convex quadrilateral.

    All cross products of consecutive edges share a sign for a convex shape;
    mixed signs mean concavity or self-intersection.
    """
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2

        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    signs = [cp > 1e-6 for cp in cross_products]
    return all(signs) or not any(signs)


def order_corners(
    pts: Union[np.ndarray, list],
    method: CornerOrdering = CornerOrdering.CENTROID_ANGLE,
) -> Quadrilateral:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    Non-convex or self-intersecting input is logged and kept: it is treated
    as detection noise, not rejected.

    Args:
        pts: 4 points, any order.
        method: Ordering strategy.

    Returns:
        Quadrilateral with the canonical roles.

    Raises:
        ValueError: If input does not contain exactly 4 points.
    """
    method = CornerOrdering(method)
    if method == CornerOrdering.BOUNDING_BOX:
        ordered = sort_by_bounding_box(pts)
    else:
        ordered = sort_by_centroid_angle(pts)

    logger.debug(
        f"Ordered points ({method.value}): TL={ordered[0]}, TR={ordered[1]}, "
        f"BR={ordered[2]}, BL={ordered[3]}"
    )

    if not is_convex_quadrilateral(ordered):
        logger.warning(f"Non-convex quadrilateral after ordering: {ordered.tolist()}")

    return Quadrilateral(ordered)
