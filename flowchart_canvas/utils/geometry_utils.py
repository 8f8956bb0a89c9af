"""
Geometry Utilities
This module provides the geometric calculations behind eraser hit-testing:
segment intersection, rectangle containment, closest points and polyline
resampling. All functions are pure and keep no state.
"""

import math
import logging
from typing import List, Tuple, Sequence, Union
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

# Denominator below which two segments are treated as parallel
PARALLEL_EPSILON = 1e-10


@dataclass
class Point2D:
    """2D point with basic geometric operations."""
    x: float
    y: float

    def __add__(self, other: 'Point2D') -> 'Point2D':
        return Point2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point2D') -> 'Point2D':
        return Point2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> 'Point2D':
        return Point2D(self.x * scalar, self.y * scalar)

    def distance_to(self, other: 'Point2D') -> float:
        """Calculate Euclidean distance to another point."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2)

    def dot(self, other: 'Point2D') -> float:
        """Calculate dot product with another point."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: 'Point2D') -> float:
        """Calculate 2D cross product (scalar)."""
        return self.x * other.y - self.y * other.x

    def to_tuple(self) -> Tuple[float, float]:
        """Convert to tuple."""
        return (self.x, self.y)


@dataclass
class Rectangle:
    """Axis-aligned rectangle given by its top-left corner and size."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point2D:
        return Point2D(self.x + self.width / 2, self.y + self.height / 2)


PointLike = Union[Point2D, Tuple[float, float], Sequence[float]]


def as_point(value: PointLike) -> Point2D:
    """Coerce an (x, y) pair or Point2D into a Point2D."""
    if isinstance(value, Point2D):
        return value
    return Point2D(float(value[0]), float(value[1]))


def as_points(values: Sequence[PointLike]) -> List[Point2D]:
    """Coerce a sequence of point-likes into a list of Point2D."""
    return [as_point(v) for v in values]


class GeometryUtils:
    """Utility class for geometric calculations."""

    @staticmethod
    def distance(p1: PointLike, p2: PointLike) -> float:
        """Euclidean distance between two points."""
        return as_point(p1).distance_to(as_point(p2))

    @staticmethod
    def segments_intersect(a1: PointLike, a2: PointLike,
                           b1: PointLike, b2: PointLike) -> bool:
        """
        Test whether two closed segments share at least one point.

        Args:
            a1: Start point of first segment
            a2: End point of first segment
            b1: Start point of second segment
            b2: End point of second segment

        Returns:
            True if the segments intersect, touching endpoints included.
            Parallel and collinear segments report no intersection.
        """
        p1, p2, p3, p4 = as_point(a1), as_point(a2), as_point(b1), as_point(b2)

        # Segment A: p1 + t * (p2 - p1), segment B: p3 + u * (p4 - p3)
        denom = (p1.x - p2.x) * (p3.y - p4.y) - (p1.y - p2.y) * (p3.x - p4.x)
        if abs(denom) < PARALLEL_EPSILON:
            return False

        t = ((p1.x - p3.x) * (p3.y - p4.y) - (p1.y - p3.y) * (p3.x - p4.x)) / denom
        u = -((p1.x - p2.x) * (p1.y - p3.y) - (p1.y - p2.y) * (p1.x - p3.x)) / denom

        return 0 <= t <= 1 and 0 <= u <= 1

    @staticmethod
    def point_in_rectangle(point: PointLike, rect: Rectangle) -> bool:
        """
        Inclusive bounds test.

        Args:
            point: Point to test
            rect: Rectangle with non-negative width and height

        Returns:
            True if point lies inside or on the border of rect
        """
        p = as_point(point)
        return rect.x <= p.x <= rect.right and rect.y <= p.y <= rect.bottom

    @staticmethod
    def closest_point_on_segment(point: PointLike, seg_start: PointLike,
                                 seg_end: PointLike) -> Point2D:
        """
        Get closest point on a segment to the given point.

        Args:
            point: Point to project
            seg_start: Segment start point
            seg_end: Segment end point

        Returns:
            Orthogonal projection clamped to the segment. A zero-length
            segment returns its start point.
        """
        p, s1, s2 = as_point(point), as_point(seg_start), as_point(seg_end)
        seg_vec = s2 - s1
        length_sq = seg_vec.dot(seg_vec)
        if length_sq == 0:
            return s1

        t = max(0.0, min(1.0, (p - s1).dot(seg_vec) / length_sq))
        return s1 + seg_vec * t

    @staticmethod
    def rectangle_edges(rect: Rectangle) -> List[Tuple[Point2D, Point2D]]:
        """Return the four edges of a rectangle, clockwise from the top."""
        top_left = Point2D(rect.x, rect.y)
        top_right = Point2D(rect.right, rect.y)
        bottom_right = Point2D(rect.right, rect.bottom)
        bottom_left = Point2D(rect.x, rect.bottom)
        return [
            (top_left, top_right),
            (top_right, bottom_right),
            (bottom_right, bottom_left),
            (bottom_left, top_left),
        ]

    @staticmethod
    def polyline_intersects_rectangle(points: Sequence[PointLike], rect: Rectangle) -> bool:
        """
        Check whether a polyline touches a rectangle.

        Args:
            points: Polyline vertices in order
            rect: Rectangle to test against

        Returns:
            True if any vertex is inside rect or any polyline segment crosses
            one of its four edges
        """
        pts = as_points(points)
        if len(pts) < 2:
            return False

        for point in pts:
            if GeometryUtils.point_in_rectangle(point, rect):
                return True

        rect_edges = GeometryUtils.rectangle_edges(rect)
        for start, end in zip(pts, pts[1:]):
            for edge_start, edge_end in rect_edges:
                if GeometryUtils.segments_intersect(start, end, edge_start, edge_end):
                    return True

        return False

    @staticmethod
    def paths_intersect(path_a: Sequence[PointLike], path_b: Sequence[PointLike],
                        threshold: float = 1.0) -> bool:
        """
        Check whether two polylines cross or pass within threshold of each other.

        Exact segment intersection is tried first over every segment pair.
        When nothing crosses and threshold > 0, each segment pair is compared
        by the shortest of the four endpoint-to-opposite-segment distances.

        Args:
            path_a: First polyline
            path_b: Second polyline
            threshold: Proximity tolerance in diagram units

        Returns:
            True on an exact crossing or a near miss within threshold
        """
        a = as_points(path_a)
        b = as_points(path_b)
        if len(a) < 2 or len(b) < 2:
            return False

        segments_a = list(zip(a, a[1:]))
        segments_b = list(zip(b, b[1:]))

        for a1, a2 in segments_a:
            for b1, b2 in segments_b:
                if GeometryUtils.segments_intersect(a1, a2, b1, b2):
                    return True

        if threshold <= 0:
            return False

        closest = GeometryUtils.closest_point_on_segment
        for a1, a2 in segments_a:
            for b1, b2 in segments_b:
                nearest = min(
                    a1.distance_to(closest(a1, b1, b2)),
                    a2.distance_to(closest(a2, b1, b2)),
                    b1.distance_to(closest(b1, a1, a2)),
                    b2.distance_to(closest(b2, a1, a2)),
                )
                if nearest <= threshold:
                    return True

        return False

    @staticmethod
    def sample_path_points(points: Sequence[PointLike], max_distance: float = 5.0) -> List[Point2D]:
        """
        Resample a polyline so no two consecutive points are farther apart
        than max_distance.

        Args:
            points: Polyline vertices, possibly sparse
            max_distance: Largest allowed gap between consecutive output points

        Returns:
            New list of points including every input vertex, with linearly
            interpolated points inserted into long gaps
        """
        pts = as_points(points)
        if len(pts) < 2 or max_distance <= 0:
            return list(pts)

        result: List[Point2D] = [pts[0]]
        for current in pts[1:]:
            prev = result[-1]
            gap = prev.distance_to(current)

            if gap > max_distance:
                num_segments = math.ceil(gap / max_distance)
                ts = np.linspace(0.0, 1.0, num_segments + 1)[1:-1]
                xs = prev.x + (current.x - prev.x) * ts
                ys = prev.y + (current.y - prev.y) * ts
                result.extend(Point2D(float(x), float(y)) for x, y in zip(xs, ys))

            result.append(current)

        return result

    @staticmethod
    def bounding_box(points: Sequence[PointLike]) -> Rectangle:
        """
        Calculate axis-aligned bounding box for points.

        Args:
            points: List of points

        Returns:
            Smallest Rectangle containing every point
        """
        pts = as_points(points)
        if not pts:
            raise ValueError("Points list cannot be empty")

        coords = np.array([p.to_tuple() for p in pts], dtype=float)
        x_min, y_min = coords.min(axis=0)
        x_max, y_max = coords.max(axis=0)
        return Rectangle(float(x_min), float(y_min), float(x_max - x_min), float(y_max - y_min))
