"""
Intersection (corner) landmarks.

Two fitted edges that meet, or would meet just past their observed extent,
mark a corner. The corner itself is never reported; instead the nearest
observed scan point stands in for it, so every landmark is a real
measurement.
"""

import logging
from itertools import combinations

import numpy as np

from .Config import ExtractionConfig
from .geometry import Point2D
from .math_utils import _as_points_array, eps

logger = logging.getLogger(__name__)


def _line_coefficients(segment):
    """
    General form a*x + b*y = c of the line through a segment.

    (a, b) is the unit normal, so vertical segments need no special case.

    :return: (a, b, c), or None for a zero-length segment.
    """
    x1, y1 = segment.start.x, segment.start.y
    x2, y2 = segment.end.x, segment.end.y
    norm = segment.length()
    if norm < eps:
        return None
    a = (y2 - y1) / norm
    b = (x1 - x2) / norm
    return a, b, a * x1 + b * y1


def _within_extent(point, segment, margin):
    x_min, y_min, x_max, y_max = segment.bounding_box(margin)
    return x_min < point.x < x_max and y_min < point.y < y_max


class IntersectionLandmarkDetector:
    """
    Turns pairwise line intersections into landmarks.

    :param intersection_margin:   Maximum distance from the intersection to the
                                  nearest scan point, and the growth applied to
                                  each segment's bounding box.
    :param determinant_tolerance: Pairs whose |sin| of the angle between the normals
                                  is at or below this are skipped as parallel.
    """
    def __init__(
        self,
        intersection_margin=ExtractionConfig.intersection_margin,
        determinant_tolerance=ExtractionConfig.determinant_tolerance,
    ):
        self.intersection_margin = float(intersection_margin)
        self.determinant_tolerance = float(determinant_tolerance)
        if self.intersection_margin <= 0.0:
            raise ValueError("intersection_margin must be > 0.")
        if self.determinant_tolerance < 0.0:
            raise ValueError("determinant_tolerance must be >= 0.")

    def intersection(self, first, second):
        """
        Intersection point of the infinite lines through two segments.

        Solves
            [a1 b1] [x]   [c1]
            [a2 b2] [y] = [c2]

        :return: numpy array of shape (2,), or None when the lines are
                 (near) parallel or a segment has zero length.
        """
        line1 = _line_coefficients(first)
        line2 = _line_coefficients(second)
        if line1 is None or line2 is None:
            return None

        A = np.array([[line1[0], line1[1]], [line2[0], line2[1]]], dtype=float)
        if abs(np.linalg.det(A)) <= self.determinant_tolerance:
            return None
        try:
            return np.linalg.solve(A, np.array([line1[2], line2[2]], dtype=float))
        except np.linalg.LinAlgError:
            return None  # singular despite a zero tolerance

    def detect(self, lines, points):
        """
        Corner landmarks for every pair of fitted segments.

        For each pair (i < j): intersect the lines, snap the intersection to
        the nearest scan point, and keep that point if it is closer than the
        margin and lies inside both segments' bounding boxes grown by the
        margin. Duplicates are kept.

        :param lines:  Fitted LineSegment list.
        :param points: Observed point cloud the landmarks are drawn from.
        :return: List of landmark points from the cloud.
        """
        points = list(points)
        landmarks = []
        if len(lines) < 2 or not points:
            return landmarks

        cloud = _as_points_array(points)
        for first, second in combinations(lines, 2):
            corner = self.intersection(first, second)
            if corner is None:
                continue

            gaps = np.hypot(cloud[:, 0] - corner[0], cloud[:, 1] - corner[1])
            nearest = int(np.argmin(gaps))
            if gaps[nearest] >= self.intersection_margin:
                continue

            candidate = points[nearest]
            probe = candidate if isinstance(candidate, Point2D) else Point2D.from_array(candidate)
            if _within_extent(probe, first, self.intersection_margin) and _within_extent(
                probe, second, self.intersection_margin
            ):
                landmarks.append(candidate)

        logger.debug("Found %d intersection landmarks from %d lines", len(landmarks), len(lines))
        return landmarks
