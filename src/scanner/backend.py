"""
Native vision capability (OpenCV) as an explicit, owned object.

Readiness is expressed by holding a VisionBackend: it is returned by
load_backend() or by awaiting initialize_backend(), never by polling a flag.
Loading is idempotent because the interpreter caches the imported module.
Pipeline stages never import cv2 themselves; they call through backend.cv,
so a missing OpenCV surfaces as InitializationError rather than ImportError.
"""

import asyncio
import functools
import importlib
import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Optional

import numpy as np

from src.scanner.errors import InitializationError

logger = logging.getLogger(__name__)

REQUIRED_FUNCTIONS = (
    "cvtColor",
    "GaussianBlur",
    "Canny",
    "findContours",
    "approxPolyDP",
    "contourArea",
    "arcLength",
    "warpPerspective",
)


@dataclass(frozen=True)
class VisionBackend:
    """
    A loaded and verified OpenCV module.

    Attributes:
        cv: The imported cv2 module.
        version: OpenCV version string.
        num_threads: Thread count OpenCV was configured with.
    """

    cv: ModuleType
    version: str
    num_threads: int

    def describe(self) -> str:
        return f"OpenCV {self.version} ({self.num_threads} threads)"


def load_backend(num_threads: Optional[int] = None) -> VisionBackend:
    """
    Import, configure and smoke-test OpenCV.

    Args:
        num_threads: If given, passed to cv2.setNumThreads.

    Returns:
        Ready VisionBackend.

    Raises:
        InitializationError: If OpenCV cannot be imported or does not work.
    """
    try:
        cv = importlib.import_module("cv2")
    except ImportError as e:
        raise InitializationError(f"OpenCV (cv2) is not available: {e}") from e

    missing = [name for name in REQUIRED_FUNCTIONS if not hasattr(cv, name)]
    if missing:
        raise InitializationError(f"OpenCV build is missing functions: {missing}")

    if num_threads is not None:
        if num_threads < 0:
            raise InitializationError(f"num_threads must be >= 0, got {num_threads}")
        cv.setNumThreads(num_threads)

    try:
        probe = np.zeros((8, 8), dtype=np.uint8)
        probe[2:6, 2:6] = 255
        cv.Canny(cv.GaussianBlur(probe, (3, 3), 0), 50, 150)
    except cv.error as e:
        raise InitializationError(f"OpenCV smoke test failed: {e}") from e

    backend = VisionBackend(
        cv=cv,
        version=str(cv.__version__),
        num_threads=int(cv.getNumThreads()),
    )
    logger.info(f"Vision backend ready: {backend.describe()}")
    return backend


async def initialize_backend(num_threads: Optional[int] = None) -> VisionBackend:
    """
    Load the backend without blocking the event loop.

    Example:
        >>> backend = asyncio.run(initialize_backend())
        >>> backend.version
        '4.10.0'
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, functools.partial(load_backend, num_threads)
    )


@functools.lru_cache(maxsize=None)
def default_backend() -> VisionBackend:
    """Process-wide backend for stage functions called without one."""
    return load_backend()


def resolve_backend(backend: Optional[VisionBackend] = None) -> VisionBackend:
    """Return the given backend, or the lazily loaded default."""
    return backend if backend is not None else default_backend()
