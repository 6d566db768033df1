"""
Tests for half-plane clipping against convex polygons.

- test_clip_halfplane_*
- test_clip_convex_*
- test_remove_duplicate_vertices_*
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_almost_equal

from clippoly.clipping import (
    clip_polygon_halfplane,
    clip_polygon_convex,
    remove_duplicate_vertices,
)
from clippoly.geometry import polygon_area


# Square [0, 2]^2 whose z equals x
RAMP = np.array([
    [0.0, 0.0, 0.0],
    [2.0, 0.0, 2.0],
    [2.0, 2.0, 2.0],
    [0.0, 2.0, 0.0],
])


class TestClipPolygonHalfplane:
    """Tests for clip_polygon_halfplane() function."""

    def test_clip_halfplane_fully_inside(self):
        """Polygon entirely on the kept side - no clipping needed."""
        # Upward line at x = 3 keeps x < 3
        result = clip_polygon_halfplane(RAMP, np.array([3.0, -1.0]), np.array([3.0, 3.0]))

        assert result.shape == (4, 3)
        assert_array_almost_equal(result, RAMP)

    def test_clip_halfplane_fully_outside(self):
        """Polygon entirely on the clipped side - complete removal."""
        # Upward line at x = -1 keeps x < -1
        result = clip_polygon_halfplane(RAMP, np.array([-1.0, -1.0]), np.array([-1.0, 3.0]))

        assert result.shape == (0, 3)

    def test_clip_halfplane_partial(self):
        """Upward line at x = 1 keeps the left half."""
        result = clip_polygon_halfplane(RAMP, np.array([1.0, -1.0]), np.array([1.0, 3.0]))

        expected = np.array([
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 1.0],
            [1.0, 2.0, 1.0],
            [0.0, 2.0, 0.0],
        ])
        assert_allclose(result, expected)

    def test_clip_halfplane_interpolates_z(self):
        """Entry and exit points carry z interpolated along the polygon edge."""
        result = clip_polygon_halfplane(RAMP, np.array([0.5, 3.0]), np.array([0.5, -1.0]))

        # Downward line keeps x > 0.5
        assert np.all(result[:, 0] >= 0.5 - 1e-12)
        cut = result[np.isclose(result[:, 0], 0.5)]
        assert cut.shape[0] == 2
        assert_allclose(cut[:, 2], [0.5, 0.5])

    def test_clip_halfplane_line_accepts_3d_points(self):
        start = np.array([1.0, -1.0, 99.0])
        end = np.array([1.0, 3.0, -99.0])
        result = clip_polygon_halfplane(RAMP, start, end)
        assert polygon_area(result) == pytest.approx(2.0)

    def test_clip_halfplane_diagonal(self):
        """Diagonal line through opposite corners keeps a triangle."""
        result = clip_polygon_halfplane(RAMP, np.array([0.0, 0.0]), np.array([2.0, 2.0]))

        assert polygon_area(result) == pytest.approx(2.0)
        assert np.all(result[:, 1] >= result[:, 0] - 1e-9)

    def test_clip_halfplane_vertex_on_boundary(self):
        """Vertices exactly on the line are kept."""
        result = clip_polygon_halfplane(RAMP, np.array([2.0, -1.0]), np.array([2.0, 3.0]))
        assert result.shape[0] == 4
        assert polygon_area(result) == pytest.approx(4.0)

    def test_clip_halfplane_empty_input(self):
        empty = np.empty((0, 3))
        result = clip_polygon_halfplane(empty, np.array([0.0, 0.0]), np.array([1.0, 0.0]))
        assert result.shape == (0, 3)


class TestClipPolygonConvex:
    """Tests for clip_polygon_convex() function."""

    def test_clip_convex_overlapping_squares(self):
        clip = RAMP + [1.0, 1.0, 0.0]
        result = clip_polygon_convex(RAMP, clip)

        assert polygon_area(result) == pytest.approx(1.0)
        assert np.all(result[:, :2] >= 1.0 - 1e-9)

    def test_clip_convex_orientation_independent(self):
        """A clockwise clip polygon gives the same region as its CCW twin."""
        clip = RAMP + [1.0, 1.0, 0.0]
        ccw = clip_polygon_convex(RAMP, clip)
        cw = clip_polygon_convex(RAMP, clip[::-1].copy())

        assert polygon_area(cw) == pytest.approx(polygon_area(ccw))

    def test_clip_convex_disjoint(self):
        clip = RAMP + [5.0, 0.0, 0.0]
        result = clip_polygon_convex(RAMP, clip)
        assert result.shape == (0, 3)

    def test_clip_convex_touching_edge_collapses(self):
        """Polygons sharing only an edge leave a zero-area sliver or nothing."""
        clip = RAMP + [2.0, 0.0, 0.0]
        result = clip_polygon_convex(RAMP, clip)
        assert polygon_area(result) == pytest.approx(0.0)

    def test_clip_convex_contained(self):
        big = RAMP * 10.0 - [5.0, 5.0, 0.0]
        result = clip_polygon_convex(RAMP, big)
        assert_allclose(result, RAMP)


class TestRemoveDuplicateVertices:
    """Tests for remove_duplicate_vertices() function."""

    def test_remove_duplicate_vertices_consecutive(self):
        poly = np.array([
            [0.0, 0.0, 0.0],
            [0.0, 0.0, 5.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
        ])
        result = remove_duplicate_vertices(poly)

        assert result.shape == (3, 3)
        # First occurrence wins
        assert result[0, 2] == 0.0

    def test_remove_duplicate_vertices_wraparound(self):
        poly = np.array([
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [1.0, 1.0, 0.0],
            [0.0, 0.0, 0.0],
        ])
        result = remove_duplicate_vertices(poly)
        assert result.shape == (3, 3)

    def test_remove_duplicate_vertices_no_duplicates(self):
        result = remove_duplicate_vertices(RAMP)
        assert_allclose(result, RAMP)

    def test_remove_duplicate_vertices_empty(self):
        result = remove_duplicate_vertices(np.empty((0, 3)))
        assert result.shape == (0, 3)
