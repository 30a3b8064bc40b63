"""
Main processor for the Document Scanner module.

Orchestrates the complete pipeline:
1. Preprocessing (grayscale + blur)
2. Edge detection (Canny)
3. Contour extraction
4. Quadrilateral candidate selection (with whole-frame fallback)
5. Corner ordering
6. Homography estimation
7. Perspective warp

A missing document is not an error: the whole frame is used and the result
is flagged as degraded. Invalid input and degenerate geometry propagate.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np

from src.scanner.backend import VisionBackend, initialize_backend, load_backend
from src.scanner.config_loader import ScannerConfig, get_default_config, load_config
from src.scanner.contours import (
    extract_contours,
    image_bounds_polygon,
    select_document_candidate,
)
from src.scanner.corner_ordering import order_corners
from src.scanner.errors import ScannerError
from src.scanner.homography import estimate_homography
from src.scanner.preprocessing import detect_edges, preprocess
from src.scanner.types import (
    DetectionResult,
    DetectionStatus,
    Quadrilateral,
    RasterImage,
    RectificationResult,
    ensure_raster,
)
from src.scanner.warper import warp_image

logger = logging.getLogger(__name__)

ImageInput = Union[np.ndarray, RasterImage]


class DocumentScanner:
    """
    Detects a document in a photo and rectifies it to a flat rectangle.

    The scanner owns its configuration and vision backend; every OpenCV call
    of the pipeline goes through that backend. It holds no per-image state,
    so one instance can serve concurrent calls.

    Example:
        >>> scanner = DocumentScanner()
        >>> image = cv2.imread("receipt.jpg")
        >>> result = scanner.scan(image)
        >>> if not result.is_degraded():
        ...     cv2.imwrite("receipt_flat.jpg", result.image.pixels)
    """

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        config_path: Optional[Path] = None,
        backend: Optional[VisionBackend] = None,
    ):
        """
        Initialize the scanner.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses the bundled default.
            backend: Initialized vision backend. If None, loads it synchronously.

        Raises:
            InitializationError: If no backend is given and OpenCV cannot be loaded.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        elif config_path is not None:
            self.config = load_config(config_path)
        else:
            self.config = get_default_config()

        self.backend = backend if backend is not None else load_backend()

    def detect(self, image: ImageInput) -> DetectionResult:
        """
        Find the document boundary (stages 1-5).

        Args:
            image: Decoded image, numpy array or RasterImage.

        Returns:
            DetectionResult with ordered corners and DETECTED / FALLBACK status.

        Raises:
            InvalidImageError: If the image is empty or malformed.
        """
        raster = ensure_raster(image)
        cfg = self.config

        smoothed = preprocess(
            raster, cfg.preprocessing.blur_kernel_size, backend=self.backend
        )
        edges = detect_edges(
            smoothed,
            cfg.edges.low_threshold,
            cfg.edges.high_threshold,
            backend=self.backend,
        )
        contours = extract_contours(edges, backend=self.backend)

        candidate = select_document_candidate(
            contours,
            raster.width,
            raster.height,
            approximation_ratio=cfg.candidates.approximation_ratio,
            min_area_fraction=cfg.candidates.min_area_fraction,
            backend=self.backend,
        )

        if candidate is None:
            logger.warning(
                f"No document boundary among {len(contours)} contours, "
                "using full image bounds"
            )
            status = DetectionStatus.FALLBACK
            polygon = image_bounds_polygon(raster.width, raster.height)
            contour_area = 0.0
        else:
            status = DetectionStatus.DETECTED
            polygon = candidate
            contour_area = candidate.area

        quadrilateral = order_corners(polygon.vertices, cfg.ordering.method)
        logger.info(f"Detection {status.value}: {quadrilateral}")

        return DetectionResult(
            quadrilateral=quadrilateral,
            status=status,
            contours_examined=len(contours),
            contour_area=contour_area,
        )

    def rectify(
        self,
        image: ImageInput,
        corners: Union[np.ndarray, list, Quadrilateral],
        status: DetectionStatus = DetectionStatus.DETECTED,
    ) -> RectificationResult:
        """
        Warp the region inside 4 corners to an axis-aligned rectangle (stages 5-7).

        Args:
            image: Source image.
            corners: 4 corner points in any order, or an ordered Quadrilateral.
            status: Detection status to carry into the result.

        Returns:
            RectificationResult with the output image and the homography used.

        Raises:
            InvalidImageError: If the image is empty or malformed.
            DegenerateGeometryError: If the corners are collinear or too close.
        """
        raster = ensure_raster(image)
        cfg = self.config

        if isinstance(corners, Quadrilateral):
            quadrilateral = corners
        else:
            quadrilateral = order_corners(corners, cfg.ordering.method)

        homography, width, height = estimate_homography(
            quadrilateral, cfg.geometry.collinearity_tolerance
        )

        rectified = warp_image(
            raster,
            homography,
            width,
            height,
            interpolation=cfg.warp.interpolation,
            border_mode=cfg.warp.border_mode,
            border_value=cfg.warp.border_value,
            workers=cfg.warp.workers,
            min_rows_per_worker=cfg.warp.min_rows_per_worker,
            backend=self.backend,
        )

        return RectificationResult(
            image=rectified,
            homography=homography,
            quadrilateral=quadrilateral,
            status=status,
        )

    def scan(self, image: ImageInput) -> RectificationResult:
        """
        Execute the complete pipeline: detect the document, then rectify it.

        Returns:
            RectificationResult; is_degraded() is True when the whole frame
            was used because no document was found.
        """
        logger.info("=" * 60)
        logger.info("Starting Document Scan")
        logger.info("=" * 60)

        try:
            detection = self.detect(image)
            result = self.rectify(
                image, detection.quadrilateral, status=detection.status
            )
        except ScannerError as e:
            logger.error(f"Document scan failed: {e}")
            raise

        logger.info(f"Scan finished - {result.get_status_message()}")
        return result


async def create_scanner(
    config: Optional[ScannerConfig] = None,
    config_path: Optional[Path] = None,
    num_threads: Optional[int] = None,
) -> DocumentScanner:
    """
    Initialize the vision backend asynchronously and build a scanner on it.

    Example:
        >>> scanner = await create_scanner()
        >>> result = scanner.scan(image)
    """
    backend = await initialize_backend(num_threads)
    return DocumentScanner(config=config, config_path=config_path, backend=backend)


def scan_document(
    image: ImageInput,
    config: Optional[ScannerConfig] = None,
) -> RectificationResult:
    """
    Convenience function for one-shot scanning.

    Args:
        image: Decoded image.
        config: Optional custom configuration. Uses default if None.

    Returns:
        RectificationResult object.
    """
    scanner = DocumentScanner(config=config)
    return scanner.scan(image)
