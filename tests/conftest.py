"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import cv2
import numpy as np
import pytest

# Corners of the reference document: TL, TR, BR, BL
EXAMPLE_CORNERS = np.array(
    [[50, 40], [350, 60], [340, 270], [60, 260]], dtype=np.float64
)


def render_document(width, height, corners, background=0, foreground=255):
    """Draw a filled quadrilateral on a uniform BGR canvas."""
    image = np.full((height, width, 3), background, dtype=np.uint8)
    pts = np.round(np.asarray(corners)).astype(np.int32)
    cv2.fillPoly(image, [pts], (foreground, foreground, foreground))
    return image


def rotated_rectangle(center, size, angle_deg):
    """Corners (TL, TR, BR, BL) of a rectangle rotated about its center."""
    cx, cy = center
    w, h = size
    theta = np.deg2rad(angle_deg)
    cos, sin = np.cos(theta), np.sin(theta)
    offsets = np.array(
        [[-w / 2, -h / 2], [w / 2, -h / 2], [w / 2, h / 2], [-w / 2, h / 2]]
    )
    return np.array(
        [[cx + dx * cos - dy * sin, cy + dx * sin + dy * cos] for dx, dy in offsets]
    )


@pytest.fixture
def example_corners():
    """Fixture providing the reference document corners."""
    return EXAMPLE_CORNERS.copy()


@pytest.fixture
def synthetic_document():
    """400x300 black image with a white quadrilateral document."""
    image = render_document(400, 300, EXAMPLE_CORNERS)
    return image, EXAMPLE_CORNERS.copy()


@pytest.fixture
def uniform_image():
    """320x240 mid-gray image with nothing to detect."""
    return np.full((240, 320, 3), 128, dtype=np.uint8)


@pytest.fixture
def gradient_image():
    """Smooth 3-channel gradient, useful for comparing resampling paths."""
    xs = np.linspace(0, 255, 400, dtype=np.float64)
    ys = np.linspace(0, 255, 300, dtype=np.float64)
    gx, gy = np.meshgrid(xs, ys)
    image = np.stack([gx, gy, (gx + gy) / 2], axis=2)
    return image.astype(np.uint8)


@pytest.fixture
def document_factory():
    """Factory fixture: render_document(width, height, corners, ...)."""
    return render_document


@pytest.fixture
def rotated_corners():
    """Factory fixture: rotated_rectangle(center, size, angle_deg)."""
    return rotated_rectangle
