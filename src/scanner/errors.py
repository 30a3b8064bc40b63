"""
Exception types for the Document Scanner module.

Detection misses are not errors: they are reported through
DetectionStatus.FALLBACK on the result objects.
"""


class ScannerError(Exception):
    """Base class for all scanner failures."""


class InitializationError(ScannerError):
    """The native vision capability is unavailable or failed to load."""


class InvalidImageError(ScannerError):
    """Input raster is empty, zero-sized or has an unsupported layout."""


class DegenerateGeometryError(ScannerError):
    """Quadrilateral is collinear or zero-area; no homography exists."""
