"""Tests for the intersection kernel in flowchart_canvas.utils.geometry_utils.

Covers:
- segments_intersect() crossings, touching endpoints, parallel and collinear pairs
- point_in_rectangle() / closest_point_on_segment() boundaries
- polyline_intersects_rectangle() against a brute-force sampling oracle
- paths_intersect() exact and proximity passes
- sample_path_points() spacing and vertex preservation
"""

from __future__ import annotations

import math
import random

import pytest

from flowchart_canvas.utils.geometry_utils import GeometryUtils, Point2D, Rectangle


# ── segments_intersect ──


class TestSegmentsIntersect:

    def test_crossing(self):
        assert GeometryUtils.segments_intersect((0, 0), (10, 10), (0, 10), (10, 0))

    def test_disjoint(self):
        assert not GeometryUtils.segments_intersect((0, 0), (1, 1), (5, 0), (6, 1))

    def test_lines_cross_beyond_segment_end(self):
        # Infinite lines meet at (5, 5) but the first segment stops at (4, 4)
        assert not GeometryUtils.segments_intersect((0, 0), (4, 4), (0, 10), (10, 0))

    def test_touching_endpoints(self):
        assert GeometryUtils.segments_intersect((0, 0), (1, 0), (1, 0), (1, 1))

    def test_t_junction(self):
        assert GeometryUtils.segments_intersect((0, 0), (10, 0), (5, 0), (5, 5))

    def test_parallel(self):
        assert not GeometryUtils.segments_intersect((0, 0), (10, 0), (0, 1), (10, 1))

    def test_collinear_overlap_reports_false(self):
        assert not GeometryUtils.segments_intersect((0, 0), (10, 0), (5, 0), (15, 0))

    def test_degenerate_segment(self):
        assert not GeometryUtils.segments_intersect((3, 3), (3, 3), (0, 0), (10, 10))

    def test_symmetric(self):
        a1, a2, b1, b2 = (0, 0), (4, 2), (1, 3), (3, -1)
        assert GeometryUtils.segments_intersect(a1, a2, b1, b2) == GeometryUtils.segments_intersect(b1, b2, a1, a2)

    def test_accepts_point2d(self):
        assert GeometryUtils.segments_intersect(Point2D(0, 0), Point2D(2, 2), Point2D(0, 2), Point2D(2, 0))


# ── point_in_rectangle / closest_point_on_segment ──


class TestPointAndProjection:

    def test_point_inside(self):
        assert GeometryUtils.point_in_rectangle((5, 5), Rectangle(0, 0, 10, 10))

    def test_point_on_border_is_inside(self):
        rect = Rectangle(0, 0, 10, 10)
        assert GeometryUtils.point_in_rectangle((0, 0), rect)
        assert GeometryUtils.point_in_rectangle((10, 10), rect)
        assert GeometryUtils.point_in_rectangle((10, 3), rect)

    def test_point_outside(self):
        assert not GeometryUtils.point_in_rectangle((10.001, 5), Rectangle(0, 0, 10, 10))

    def test_zero_size_rectangle(self):
        assert GeometryUtils.point_in_rectangle((2, 3), Rectangle(2, 3, 0, 0))

    def test_projection_inside_segment(self):
        p = GeometryUtils.closest_point_on_segment((5, 7), (0, 0), (10, 0))
        assert p == Point2D(5, 0)

    def test_projection_clamped_to_start(self):
        p = GeometryUtils.closest_point_on_segment((-4, 3), (0, 0), (10, 0))
        assert p == Point2D(0, 0)

    def test_projection_clamped_to_end(self):
        p = GeometryUtils.closest_point_on_segment((14, -3), (0, 0), (10, 0))
        assert p == Point2D(10, 0)

    def test_zero_length_segment_returns_start(self):
        p = GeometryUtils.closest_point_on_segment((9, 9), (2, 2), (2, 2))
        assert p == Point2D(2, 2)


# ── polyline_intersects_rectangle ──


def _oracle_hits(points, rect, step=0.02):
    """True if a densely sampled point of the polyline falls inside rect."""
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        length = math.hypot(x2 - x1, y2 - y1)
        n = max(1, int(length / step))
        for i in range(n + 1):
            t = i / n
            if GeometryUtils.point_in_rectangle((x1 + (x2 - x1) * t, y1 + (y2 - y1) * t), rect):
                return True
    return False


class TestPolylineIntersectsRectangle:

    def test_single_point_never_hits(self):
        assert not GeometryUtils.polyline_intersects_rectangle([(5, 5)], Rectangle(0, 0, 10, 10))

    def test_empty_never_hits(self):
        assert not GeometryUtils.polyline_intersects_rectangle([], Rectangle(0, 0, 10, 10))

    def test_vertex_inside(self):
        assert GeometryUtils.polyline_intersects_rectangle([(5, 5), (50, 50)], Rectangle(0, 0, 10, 10))

    def test_segment_passes_through(self):
        assert GeometryUtils.polyline_intersects_rectangle([(-10, 5), (20, 5)], Rectangle(0, 0, 10, 10))

    def test_segment_clips_corner(self):
        assert GeometryUtils.polyline_intersects_rectangle([(-5, 3), (3, -5)], Rectangle(0, 0, 10, 10))

    def test_miss(self):
        assert not GeometryUtils.polyline_intersects_rectangle([(-10, -10), (-1, 20)], Rectangle(0, 0, 10, 10))

    def test_agrees_with_sampling_oracle(self):
        rng = random.Random(1234)
        for _ in range(300):
            rect = Rectangle(rng.uniform(-20, 20), rng.uniform(-20, 20), rng.uniform(0.5, 15), rng.uniform(0.5, 15))
            points = [(rng.uniform(-40, 40), rng.uniform(-40, 40)) for _ in range(rng.randint(2, 5))]
            if _oracle_hits(points, rect):
                assert GeometryUtils.polyline_intersects_rectangle(points, rect), (points, rect)

    def test_kernel_hits_are_confirmed_by_oracle(self):
        # A hit on the border itself may fall between samples, so the oracle
        # gets a margin of one sampling step around the rectangle.
        step = 0.02
        rng = random.Random(4321)
        hits = 0
        for _ in range(300):
            rect = Rectangle(rng.uniform(-20, 20), rng.uniform(-20, 20), rng.uniform(0.5, 15), rng.uniform(0.5, 15))
            points = [(rng.uniform(-40, 40), rng.uniform(-40, 40)) for _ in range(rng.randint(2, 5))]
            if GeometryUtils.polyline_intersects_rectangle(points, rect):
                hits += 1
                grown = Rectangle(rect.x - step, rect.y - step, rect.width + 2 * step, rect.height + 2 * step)
                assert _oracle_hits(points, grown, step), (points, rect)
        assert hits > 0

    def test_disjoint_polyline_next_to_rectangle(self):
        rect = Rectangle(0, 0, 10, 10)
        assert not GeometryUtils.polyline_intersects_rectangle([(10.5, -5), (10.5, 15)], rect)
        assert not GeometryUtils.polyline_intersects_rectangle([(-5, 10.5), (15, 10.5)], rect)


# ── paths_intersect ──


class TestPathsIntersect:

    EDGE = [(0, 0), (100, 0)]

    def test_exact_crossing(self):
        assert GeometryUtils.paths_intersect([(50, -5), (50, 5)], self.EDGE)

    def test_near_miss_within_threshold(self):
        assert GeometryUtils.paths_intersect([(50, 0.5), (60, 0.5)], self.EDGE, threshold=1.0)

    def test_stroke_ending_just_short_of_edge(self):
        assert GeometryUtils.paths_intersect([(50, -10), (50, -0.8)], self.EDGE, threshold=1.0)

    def test_far_miss(self):
        assert not GeometryUtils.paths_intersect([(50, 5), (60, 5)], self.EDGE, threshold=1.0)

    def test_zero_threshold_disables_proximity(self):
        assert not GeometryUtils.paths_intersect([(50, 0.5), (60, 0.5)], self.EDGE, threshold=0)

    def test_short_paths_never_intersect(self):
        assert not GeometryUtils.paths_intersect([(50, 0)], self.EDGE)
        assert not GeometryUtils.paths_intersect([(50, -5), (50, 5)], [(0, 0)])

    def test_multi_segment_paths(self):
        stroke = [(0, 10), (20, 10), (20, -10)]
        assert GeometryUtils.paths_intersect(stroke, self.EDGE, threshold=0)


# ── sample_path_points ──


class TestSamplePathPoints:

    def test_fills_gap_evenly(self):
        result = GeometryUtils.sample_path_points([(0, 0), (10, 0)], max_distance=5)
        assert [p.to_tuple() for p in result] == [(0, 0), (5, 0), (10, 0)]

    def test_uneven_gap_uses_ceiling(self):
        result = GeometryUtils.sample_path_points([(0, 0), (12, 0)], max_distance=5)
        assert len(result) == 4
        assert result[1].x == pytest.approx(4.0)
        assert result[2].x == pytest.approx(8.0)

    def test_short_gap_untouched(self):
        result = GeometryUtils.sample_path_points([(0, 0), (3, 4)], max_distance=5)
        assert [p.to_tuple() for p in result] == [(0, 0), (3, 4)]

    def test_fewer_than_two_points_returns_copy(self):
        source = [Point2D(1, 1)]
        result = GeometryUtils.sample_path_points(source)
        assert result == source
        assert result is not source

    def test_non_positive_gap_returns_copy(self):
        source = [(0, 0), (100, 0)]
        assert len(GeometryUtils.sample_path_points(source, max_distance=0)) == 2

    def test_spacing_and_vertices_preserved(self):
        rng = random.Random(7)
        points = [(rng.uniform(-200, 200), rng.uniform(-200, 200)) for _ in range(12)]
        result = GeometryUtils.sample_path_points(points, max_distance=5.0)

        for a, b in zip(result, result[1:]):
            assert a.distance_to(b) <= 5.0 + 1e-9

        # Every input vertex appears, in order
        remaining = iter(result)
        for x, y in points:
            assert any(p.x == x and p.y == y for p in remaining)


# ── bounding_box ──


class TestBoundingBox:

    def test_box(self):
        rect = GeometryUtils.bounding_box([(1, 5), (-2, 3), (4, -1)])
        assert (rect.x, rect.y, rect.width, rect.height) == (-2, -1, 6, 6)

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            GeometryUtils.bounding_box([])
