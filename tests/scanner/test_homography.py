"""
Unit tests for homography estimation.
"""

import numpy as np
import pytest

from src.scanner.errors import DegenerateGeometryError
from src.scanner.homography import (
    destination_corners,
    estimate_homography,
    solve_homography,
)
from src.scanner.types import Quadrilateral


class TestEstimateHomography:
    """Tests for estimate_homography."""

    def test_round_trip_reproduces_rectangle(self, example_corners):
        """Test that the source corners land exactly on the output rectangle."""
        quad = Quadrilateral(example_corners)

        homography, width, height = estimate_homography(quad)

        assert (width, height) == (301, 220)
        np.testing.assert_allclose(
            homography.apply(quad.points),
            destination_corners(width, height),
            atol=1e-6,
        )

    def test_inverse_maps_rectangle_back(self, example_corners):
        """Test that the inverse sends the rectangle to the source corners."""
        quad = Quadrilateral(example_corners)
        homography, width, height = estimate_homography(quad)

        np.testing.assert_allclose(
            homography.inverse().apply(destination_corners(width, height)),
            example_corners,
            atol=1e-6,
        )

    def test_full_frame_is_identity(self):
        """Test that image-bound corners give the identity transform."""
        quad = Quadrilateral([[0, 0], [640, 0], [640, 480], [0, 480]])

        homography, width, height = estimate_homography(quad)

        assert (width, height) == (640, 480)
        assert homography.is_identity(atol=1e-9)

    def test_translated_rectangle(self):
        """Test that an offset rectangle yields a pure translation."""
        quad = Quadrilateral([[30, 20], [130, 20], [130, 70], [30, 70]])

        homography, _, _ = estimate_homography(quad)

        np.testing.assert_allclose(
            homography.matrix, [[1, 0, -30], [0, 1, -20], [0, 0, 1]], atol=1e-9
        )

    def test_matrix_is_scale_normalized(self, example_corners):
        """Test that H[2, 2] is one."""
        homography, _, _ = estimate_homography(Quadrilateral(example_corners))

        assert homography.matrix[2, 2] == pytest.approx(1.0)

    def test_collinear_corners_rejected(self):
        """Test that four collinear corners raise DegenerateGeometryError."""
        quad = Quadrilateral([[0, 0], [50, 0], [100, 0], [150, 0]])

        with pytest.raises(DegenerateGeometryError):
            estimate_homography(quad)

    def test_three_collinear_corners_rejected(self):
        """Test that three collinear corners raise DegenerateGeometryError."""
        quad = Quadrilateral([[0, 0], [100, 0], [200, 0], [100, 100]])

        with pytest.raises(DegenerateGeometryError):
            estimate_homography(quad)


class TestSolveHomography:
    """Tests for the raw linear solver."""

    def test_singular_system(self):
        """Test that identical source points make the system singular."""
        src = np.zeros((4, 2))
        dst = destination_corners(10, 10)

        with pytest.raises(DegenerateGeometryError, match="singular"):
            solve_homography(src, dst)

    def test_arbitrary_correspondence(self):
        """Test mapping between two general quadrilaterals."""
        src = np.array([[10, 10], [200, 30], [210, 180], [5, 160]], dtype=np.float64)
        dst = np.array([[0, 0], [150, 0], [150, 100], [0, 100]], dtype=np.float64)

        homography = solve_homography(src, dst)

        np.testing.assert_allclose(homography.apply(src), dst, atol=1e-6)
