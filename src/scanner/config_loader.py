"""Configuration loader with Pydantic validation for the Document Scanner module.

Loads type-safe configuration from YAML files; every field has a default so
partial files are accepted.
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from src.scanner.types import CornerOrdering

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

VALID_INTERPOLATIONS = ["linear", "cubic", "nearest", "lanczos"]
VALID_BORDER_MODES = ["constant", "replicate"]


class PreprocessingConfig(BaseModel):
    """Grayscale + blur stage.

    Attributes:
        blur_kernel_size: Side of the square Gaussian kernel (odd)
    """

    blur_kernel_size: int = Field(default=5, ge=1)

    @field_validator("blur_kernel_size")
    @classmethod
    def _check_odd(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"blur_kernel_size must be odd, got {v}")
        return v


class EdgeConfig(BaseModel):
    """Canny hysteresis thresholds.

    Attributes:
        low_threshold: Gradients below this are suppressed
        high_threshold: Gradients above this are always kept
    """

    low_threshold: float = Field(default=75.0, ge=0.0)
    high_threshold: float = Field(default=200.0, ge=0.0)

    @model_validator(mode="after")
    def _check_order(self) -> "EdgeConfig":
        if self.low_threshold > self.high_threshold:
            raise ValueError(
                f"low_threshold ({self.low_threshold}) must not exceed "
                f"high_threshold ({self.high_threshold})"
            )
        return self


class CandidateConfig(BaseModel):
    """Polygon approximation and candidate acceptance.

    Attributes:
        approximation_ratio: Douglas-Peucker tolerance as a fraction of perimeter
        min_area_fraction: Minimum contour area as a fraction of image area
    """

    approximation_ratio: float = Field(default=0.02, gt=0.0, lt=1.0)
    min_area_fraction: float = Field(default=0.10, ge=0.0, lt=1.0)


class OrderingConfig(BaseModel):
    """Corner role assignment.

    Attributes:
        method: "centroid_angle" (default) or "bounding_box"
    """

    method: CornerOrdering = CornerOrdering.CENTROID_ANGLE


class GeometryConfig(BaseModel):
    """Homography estimation.

    Attributes:
        collinearity_tolerance: Minimum sine of the largest angle of any 3-corner triangle
    """

    collinearity_tolerance: float = Field(default=1e-3, gt=0.0, lt=1.0)


class WarpConfig(BaseModel):
    """Resampling into the output rectangle.

    Attributes:
        interpolation: Sampling method ("linear" is bilinear)
        border_mode: "constant" fills with border_value, "replicate" clamps
        border_value: Background intensity for out-of-bounds samples
        workers: Number of threads used for the warp
        min_rows_per_worker: Smallest strip height given to a thread
    """

    interpolation: str = "linear"
    border_mode: str = "constant"
    border_value: int = Field(default=0, ge=0, le=255)
    workers: int = Field(default=1, ge=1)
    min_rows_per_worker: int = Field(default=64, ge=1)

    @field_validator("interpolation")
    @classmethod
    def _check_interpolation(cls, v: str) -> str:
        if v not in VALID_INTERPOLATIONS:
            raise ValueError(
                f"Invalid interpolation: {v}. Must be one of {VALID_INTERPOLATIONS}"
            )
        return v

    @field_validator("border_mode")
    @classmethod
    def _check_border_mode(cls, v: str) -> str:
        if v not in VALID_BORDER_MODES:
            raise ValueError(
                f"Invalid border_mode: {v}. Must be one of {VALID_BORDER_MODES}"
            )
        return v


class ScannerConfig(BaseModel):
    """Complete scanner configuration.

    Attributes:
        preprocessing: Grayscale + blur settings
        edges: Canny thresholds
        candidates: Polygon approximation and acceptance
        ordering: Corner ordering strategy
        geometry: Homography estimation tolerances
        warp: Resampling settings
    """

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    edges: EdgeConfig = Field(default_factory=EdgeConfig)
    candidates: CandidateConfig = Field(default_factory=CandidateConfig)
    ordering: OrderingConfig = Field(default_factory=OrderingConfig)
    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    warp: WarpConfig = Field(default_factory=WarpConfig)


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> ScannerConfig:
    """
    Load and validate scanner configuration from a YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated ScannerConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If a value is out of range or has the wrong type.

    Example:
        >>> config = load_config()
        >>> config.edges.low_threshold
        75.0
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading scanner config from {config_path}")
    with open(config_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    config = ScannerConfig(**raw)
    logger.info(f"Loaded scanner configuration from {config_path}")
    return config


def get_default_config(config_path: Optional[Path] = None) -> ScannerConfig:
    """Load the bundled config.yaml, or model defaults if it is missing."""
    path = config_path or DEFAULT_CONFIG_PATH
    if path.exists():
        return load_config(path)
    logger.warning(f"Config file {path} missing, using built-in defaults")
    return ScannerConfig()
