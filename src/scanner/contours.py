"""
Contour extraction and quadrilateral candidate selection (pipeline stages 3-4).

Selection rule: contours are visited by descending area; the first whose
simplified polygon has exactly 4 vertices and whose area exceeds
min_area_fraction of the image becomes the document candidate.
"""

import logging
from typing import List, Optional

import numpy as np

from src.scanner.backend import VisionBackend, resolve_backend
from src.scanner.errors import InvalidImageError
from src.scanner.types import Contour, Polygon, RasterImage

logger = logging.getLogger(__name__)


def extract_contours(
    edge_map: RasterImage, backend: Optional[VisionBackend] = None
) -> List[Contour]:
    """
    Find closed boundaries in a binary edge map.

    Contours are returned as a flat list (no nesting hierarchy). Each records
    its enclosed area (shoelace formula) and closed perimeter.

    Args:
        edge_map: Single-channel binary image (0/255).
        backend: Vision backend; the process default when None.

    Returns:
        List of Contour objects in the order OpenCV traced them.
    """
    if edge_map.channels != 1:
        raise InvalidImageError(
            f"Contour extraction expects a single-channel edge map, got {edge_map.channels}"
        )

    cv = resolve_backend(backend).cv
    binary = edge_map.pixels.reshape(edge_map.height, edge_map.width)
    raw_contours, _ = cv.findContours(binary, cv.RETR_LIST, cv.CHAIN_APPROX_SIMPLE)

    contours = []
    for raw in raw_contours:
        points = raw.reshape(-1, 2).astype(np.float32)
        contours.append(
            Contour(
                points=points,
                area=float(cv.contourArea(points)),
                perimeter=float(cv.arcLength(points, True)),
            )
        )

    logger.debug(f"Extracted {len(contours)} contours")
    return contours


def approximate_polygon(
    contour: Contour,
    approximation_ratio: float = 0.02,
    backend: Optional[VisionBackend] = None,
) -> Polygon:
    """
    Simplify a contour with Douglas-Peucker.

    Args:
        contour: Contour to simplify.
        approximation_ratio: Tolerance as a fraction of the contour perimeter.
        backend: Vision backend; the process default when None.

    Returns:
        Polygon carrying the simplified vertices and the contour's area.
    """
    epsilon = approximation_ratio * contour.perimeter
    cv = resolve_backend(backend).cv
    approx = cv.approxPolyDP(contour.points.reshape(-1, 1, 2), epsilon, True)
    return Polygon(vertices=approx.reshape(-1, 2).astype(np.float64), area=contour.area)


def select_document_candidate(
    contours: List[Contour],
    image_width: int,
    image_height: int,
    approximation_ratio: float = 0.02,
    min_area_fraction: float = 0.10,
    backend: Optional[VisionBackend] = None,
) -> Optional[Polygon]:
    """
    Pick the largest contour that simplifies to a quadrilateral.

    Args:
        contours: Contours from extract_contours.
        image_width: Width of the source image.
        image_height: Height of the source image.
        approximation_ratio: Douglas-Peucker tolerance factor.
        min_area_fraction: Candidates must enclose more than this fraction of
            the image area.
        backend: Vision backend; the process default when None.

    Returns:
        4-vertex Polygon, or None when no contour qualifies.
    """
    backend = resolve_backend(backend)
    min_area = min_area_fraction * image_width * image_height

    for index, contour in enumerate(sorted(contours, key=lambda c: c.area, reverse=True)):
        # Sorted descending: nothing further down can pass the area test
        if contour.area <= min_area:
            logger.debug(
                f"Stopped after {index} contours: area {contour.area:.1f} "
                f"<= minimum {min_area:.1f}"
            )
            break

        polygon = approximate_polygon(contour, approximation_ratio, backend)
        if polygon.is_quadrilateral():
            logger.debug(
                f"Selected candidate #{index} with area {polygon.area:.1f} "
                f"({polygon.area / (image_width * image_height):.1%} of image)"
            )
            return polygon

        logger.debug(
            f"Rejected contour #{index}: {polygon.vertex_count} vertices "
            f"(area {contour.area:.1f})"
        )

    return None


def image_bounds_polygon(image_width: int, image_height: int) -> Polygon:
    """Whole-frame quadrilateral used when no document is detected."""
    vertices = np.array(
        [
            [0, 0],
            [image_width, 0],
            [image_width, image_height],
            [0, image_height],
        ],
        dtype=np.float64,
    )
    return Polygon(vertices=vertices, area=float(image_width * image_height))
