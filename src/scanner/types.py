"""
Data types and structures for the Document Scanner module.

Provides immutable containers for images, geometry and pipeline results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

import numpy as np

from src.scanner.errors import InvalidImageError


class DetectionStatus(Enum):
    """Outcome of document boundary detection."""

    DETECTED = "DETECTED"  # A 4-vertex contour large enough was found
    FALLBACK = "FALLBACK"  # Whole frame used as the document boundary


class CornerOrdering(str, Enum):
    """Strategies for assigning TL/TR/BR/BL roles."""

    CENTROID_ANGLE = "centroid_angle"
    BOUNDING_BOX = "bounding_box"


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Immutable wrapper around a uint8 pixel buffer.

    The stored array is a read-only view, so the image cannot be modified
    through it. Channel layout follows OpenCV (BGR / BGRA).

    Attributes:
        pixels: Array of shape (H, W) or (H, W, C) with C in {1, 3, 4}.

    Raises:
        InvalidImageError: If the buffer is not a valid image.

    Example:
        >>> image = RasterImage(np.zeros((300, 400, 3), dtype=np.uint8))
        >>> image.width, image.height, image.channels
        (400, 300, 3)
    """

    pixels: np.ndarray

    def __post_init__(self):
        data = self.pixels
        if not isinstance(data, np.ndarray):
            raise InvalidImageError(f"Expected numpy.ndarray, got {type(data)}")

        if data.ndim not in (2, 3):
            raise InvalidImageError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {data.shape}"
            )

        if data.ndim == 3 and data.shape[2] not in (1, 3, 4):
            raise InvalidImageError(
                f"Expected 1, 3, or 4 channels, got {data.shape[2]}"
            )

        if data.shape[0] == 0 or data.shape[1] == 0:
            raise InvalidImageError(
                f"Image has zero dimension: width={data.shape[1]}, height={data.shape[0]}"
            )

        if data.dtype != np.uint8:
            raise InvalidImageError(f"Expected uint8 dtype for image, got {data.dtype}")

        view = data.view()
        view.flags.writeable = False
        object.__setattr__(self, "pixels", view)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        """Channel depth (1 for grayscale, 3 for BGR, 4 for BGRA)."""
        if self.pixels.ndim == 2:
            return 1
        return int(self.pixels.shape[2])

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_numpy(self) -> np.ndarray:
        """Return a writable copy of the pixel buffer."""
        return self.pixels.copy()

    def __repr__(self) -> str:
        return f"RasterImage(width={self.width}, height={self.height}, channels={self.channels})"


def ensure_raster(image: Union[np.ndarray, RasterImage, None]) -> RasterImage:
    """Wrap a raw array in a RasterImage, passing RasterImage through."""
    if isinstance(image, RasterImage):
        return image
    if image is None:
        raise InvalidImageError("Invalid input image: image is None")
    return RasterImage(image)


@dataclass(frozen=True)
class Point2D:
    """A point in source-image coordinates."""

    x: float
    y: float

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True, eq=False)
class Contour:
    """
    Closed boundary traced in an edge map.

    Attributes:
        points: Vertex sequence with shape (N, 2), float32.
        area: Enclosed area (shoelace formula).
        perimeter: Length of the closed boundary.
    """

    points: np.ndarray
    area: float
    perimeter: float

    def __len__(self) -> int:
        return int(self.points.shape[0])


@dataclass(frozen=True, eq=False)
class Polygon:
    """Simplified contour: vertices of shape (N, 2) and the source contour area."""

    vertices: np.ndarray
    area: float

    @property
    def vertex_count(self) -> int:
        return int(self.vertices.shape[0])

    def is_quadrilateral(self) -> bool:
        return self.vertex_count == 4


@dataclass(frozen=True, eq=False)
class Quadrilateral:
    """
    Four corners in canonical order: Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    Attributes:
        points: Array of shape (4, 2), float64, rows in TL, TR, BR, BL order.
    """

    points: np.ndarray

    def __post_init__(self):
        pts = np.array(self.points, dtype=np.float64)
        if pts.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
            )
        pts.flags.writeable = False
        object.__setattr__(self, "points", pts)

    @property
    def top_left(self) -> Point2D:
        return Point2D(*map(float, self.points[0]))

    @property
    def top_right(self) -> Point2D:
        return Point2D(*map(float, self.points[1]))

    @property
    def bottom_right(self) -> Point2D:
        return Point2D(*map(float, self.points[2]))

    @property
    def bottom_left(self) -> Point2D:
        return Point2D(*map(float, self.points[3]))

    def corners(self) -> List[Point2D]:
        """Corners as Point2D in TL, TR, BR, BL order."""
        return [self.top_left, self.top_right, self.bottom_right, self.bottom_left]

    def to_list(self) -> List[List[float]]:
        return self.points.tolist()

    def __repr__(self) -> str:
        tl, tr, br, bl = (p.to_tuple() for p in self.corners())
        return f"Quadrilateral(TL={tl}, TR={tr}, BR={br}, BL={bl})"


@dataclass(frozen=True, eq=False)
class Homography:
    """
    3x3 projective transform, scale-normalized so that matrix[2, 2] == 1.

    Attributes:
        matrix: Array of shape (3, 3), float64.
    """

    matrix: np.ndarray

    def __post_init__(self):
        m = np.array(self.matrix, dtype=np.float64)
        if m.shape != (3, 3):
            raise ValueError(f"Expected a 3x3 matrix, got shape {m.shape}")
        if not np.all(np.isfinite(m)):
            raise ValueError("Homography contains non-finite values")
        if abs(m[2, 2]) > 1e-12:
            m = m / m[2, 2]
        m.flags.writeable = False
        object.__setattr__(self, "matrix", m)

    def apply(self, points: Union[np.ndarray, list]) -> np.ndarray:
        """
        Map points through the transform.

        Args:
            points: Array-like of shape (N, 2).

        Returns:
            Array of shape (N, 2) with the projected points.
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
        homogeneous = np.hstack([pts, np.ones((pts.shape[0], 1))])
        projected = homogeneous @ self.matrix.T
        return projected[:, :2] / projected[:, 2:3]

    def inverse(self) -> "Homography":
        return Homography(np.linalg.inv(self.matrix))

    def is_identity(self, atol: float = 1e-6) -> bool:
        return bool(np.allclose(self.matrix, np.eye(3), atol=atol))

    def __repr__(self) -> str:
        return f"Homography({np.array2string(self.matrix, precision=4)})"


@dataclass
class DetectionResult:
    """
    Output of document boundary detection.

    Attributes:
        quadrilateral: Ordered document corners (image bounds on fallback).
        status: DETECTED or FALLBACK.
        contours_examined: Number of contours found in the edge map.
        contour_area: Area of the winning contour, 0.0 on fallback.
    """

    quadrilateral: Quadrilateral
    status: DetectionStatus
    contours_examined: int
    contour_area: float

    def is_fallback(self) -> bool:
        return self.status == DetectionStatus.FALLBACK


@dataclass
class RectificationResult:
    """
    Output of the rectification pipeline.

    Attributes:
        image: Rectified image of size width x height.
        homography: Transform from source corners to the output rectangle.
        quadrilateral: Source corners used, TL/TR/BR/BL.
        status: DETECTED, or FALLBACK when the whole frame was used.
    """

    image: RasterImage
    homography: Homography
    quadrilateral: Quadrilateral
    status: DetectionStatus

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def is_degraded(self) -> bool:
        """True when no document was found and the full frame was rectified."""
        return self.status == DetectionStatus.FALLBACK

    def get_status_message(self) -> str:
        if self.is_degraded():
            return "degraded: used fallback boundary"
        return f"Document rectified to {self.width}x{self.height}"
