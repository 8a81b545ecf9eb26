"""
RANSAC Line Fitting

Robustly fits straight obstacle edges to one scan partition. Each round runs
a fixed number of random two-point hypotheses against the remaining points,
keeps the hypothesis with the most inliers, and, if it is supported well
enough, turns it into a LineSegment and removes its inliers from the pool.
Rounds repeat until nothing more qualifies.

Sampling is random by nature: two runs on the same partition may place the
segment boundaries differently. Pass a seeded numpy Generator (or
random_seed) to make a run reproducible.
"""

import logging

import numpy as np

from .Config import ExtractionConfig
from .geometry import LineSegment, Point2D
from .math_utils import _as_points_array, _perpendicular_distances

logger = logging.getLogger(__name__)


class RansacLineFitter:
    """
    Multi-line RANSAC over an ordered point sequence.

    :param iterations:  Random trials per round (N).
    :param threshold:   Perpendicular distance below which a point is an inlier (tau).
    :param min_inliers: A line is accepted only with strictly more inliers than this (M).
    :param rng:         Optional numpy Generator used for sampling.
    :param random_seed: Seed for a fresh default_rng when rng is not given.
    """
    def __init__(
        self,
        iterations=ExtractionConfig.ransac_iterations,
        threshold=ExtractionConfig.ransac_threshold,
        min_inliers=ExtractionConfig.ransac_min_inliers,
        rng=None,
        random_seed=None,
    ):
        self.iterations = int(iterations)
        self.threshold = float(threshold)
        self.min_inliers = int(min_inliers)
        if self.iterations < 1:
            raise ValueError("iterations must be >= 1.")
        if self.threshold <= 0.0:
            raise ValueError("threshold must be > 0.")
        if self.min_inliers < 1:
            raise ValueError("min_inliers must be >= 1.")
        self.rng = rng if rng is not None else np.random.default_rng(random_seed)

    def _best_hypothesis(self, pool):
        """
        Run one round of trials and return the inlier mask of the best one.

        Every trial draws two indices with replacement; the first trial with
        the largest inlier count wins ties.

        :param pool: Remaining points, shape (n, 2).
        :return: Boolean mask of shape (n,).
        """
        samples = self.rng.integers(0, len(pool), size=(self.iterations, 2))
        distances = _perpendicular_distances(pool[samples[:, 0]], pool[samples[:, 1]], pool)
        inliers = distances < self.threshold
        best = int(np.argmax(np.count_nonzero(inliers, axis=1)))
        return inliers[best]

    def fit_lines(self, points):
        """
        Fit as many line segments as the partition supports.

        The segment endpoints are the first and last inlier in scan order,
        taken from the input points themselves.

        :param points: Ordered partition points (Point2D or 2-element array-likes).
        :return: List of LineSegment in acceptance order.
        """
        points = list(points)
        lines = []
        if len(points) < 2:
            return lines

        coords = _as_points_array(points)
        remaining = np.arange(len(points))  # indices into points, kept in scan order

        while True:
            inlier_mask = self._best_hypothesis(coords[remaining])
            inlier_count = int(np.count_nonzero(inlier_mask))
            if inlier_count <= self.min_inliers:
                break

            inlier_indices = remaining[inlier_mask]
            start = points[inlier_indices[0]]
            end = points[inlier_indices[-1]]
            if not isinstance(start, Point2D):
                start, end = Point2D.from_array(start), Point2D.from_array(end)
            lines.append(LineSegment(start, end, inlier_count))
            remaining = remaining[~inlier_mask]

            if len(remaining) < self.min_inliers + 2:
                break

        logger.debug("RANSAC fitted %d lines to %d points (%d left over)", len(lines), len(points), len(remaining))
        return lines
