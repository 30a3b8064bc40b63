"""
Document Scanner: boundary detection & perspective rectification

Locates the quadrilateral outline of a document in a photo and warps it to a
flat, axis-aligned view.

Pipeline stages:
1. Preprocessing (grayscale + Gaussian blur)
2. Edge detection (Canny)
3. Contour extraction
4. Polygon approximation & candidate selection (whole-frame fallback)
5. Corner ordering (TL, TR, BR, BL)
6. Homography estimation
7. Perspective warp
"""

from src.scanner.backend import VisionBackend, initialize_backend, load_backend
from src.scanner.config_loader import ScannerConfig, get_default_config, load_config
from src.scanner.corner_ordering import order_corners
from src.scanner.errors import (
    DegenerateGeometryError,
    InitializationError,
    InvalidImageError,
    ScannerError,
)
from src.scanner.homography import estimate_homography
from src.scanner.processor import DocumentScanner, create_scanner, scan_document
from src.scanner.types import (
    CornerOrdering,
    DetectionResult,
    DetectionStatus,
    Homography,
    Point2D,
    Quadrilateral,
    RasterImage,
    RectificationResult,
)
from src.scanner.warper import warp_image

__all__ = [
    "DocumentScanner",
    "create_scanner",
    "scan_document",
    "VisionBackend",
    "initialize_backend",
    "load_backend",
    "ScannerConfig",
    "get_default_config",
    "load_config",
    "order_corners",
    "estimate_homography",
    "warp_image",
    "ScannerError",
    "InitializationError",
    "InvalidImageError",
    "DegenerateGeometryError",
    "CornerOrdering",
    "DetectionResult",
    "DetectionStatus",
    "Homography",
    "Point2D",
    "Quadrilateral",
    "RasterImage",
    "RectificationResult",
]
