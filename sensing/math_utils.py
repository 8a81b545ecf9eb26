"""
Math Utilities Module

This module provides helper functions for the planar geometry shared by the
laser sensor simulation and the landmark extraction pipeline. It covers
vector validation and normalization, perpendicular point-to-line distances
and the conversion of point sequences into numpy arrays.

All functions accept any array-like input and return float numpy data so
that the callers can stay agnostic of whether points arrive as tuples,
arrays or Point2D values.
"""

import numpy as np

# Small numerical tolerance to prevent division by zero and handle
# degenerate edge cases like near-zero vector norms.
eps = 1e-12  # [dimensionless]


def _as_vector2(value, name):
    """
    Validate and convert an input into a flat 2-element float vector.

    :param value: Array-like input to convert into a 2D vector. Objects with an
                  as_array() method (Point2D) are converted through it.
    :param name:  Human-readable parameter name, shown in error messages.

    :return: numpy array of shape (2,) with dtype float64.
    :raises ValueError: If the input does not contain exactly 2 elements.
    """
    if hasattr(value, "as_array"):
        value = value.as_array()

    vec = np.asarray(value, dtype=float).reshape(-1)

    if vec.size != 2:
        raise ValueError(f"{name} must be a 2D vector.")

    return vec


def _as_points_array(points, name="points"):
    """
    Convert an ordered sequence of 2D points into an (n, 2) float array.

    An empty sequence yields an array of shape (0, 2).

    :param points: Sequence of Point2D values or 2-element array-likes.
    :param name:   Human-readable parameter name, shown in error messages.

    :return: numpy array of shape (n, 2).
    :raises ValueError: If any entry is not a 2D point.
    """
    if len(points) == 0:
        return np.empty((0, 2), dtype=float)
    return np.vstack([_as_vector2(p, name) for p in points])


def _normalize(vec, fallback=(1.0, 0.0)):
    """
    Normalize a vector to unit length, with a safe fallback for zero-length vectors.

    :param vec:      Input vector (array-like, any dimension).
    :param fallback: Direction to return when the input has near-zero norm.
                     Defaults to (1, 0), pointing along the +X axis.

    :return: Unit-length numpy vector in the same direction as the input.
    :raises ValueError: If both the input and fallback vectors have near-zero norm.
    """
    vec = np.asarray(vec, dtype=float)
    norm = np.linalg.norm(vec)

    if norm < eps:
        fallback = np.asarray(fallback, dtype=float)
        fallback_norm = np.linalg.norm(fallback)
        if fallback_norm < eps:
            raise ValueError("Fallback vector must be non-zero.")
        return fallback / fallback_norm

    return vec / norm


def _perpendicular_distances(p1, p2, points):
    """
    Perpendicular distance from every point to the infinite line through p1 and p2.

        d = |(y2 - y1) * x0 - (x2 - x1) * y0 + x2 * y1 - y2 * x1| / ||p2 - p1||

    p1 and p2 may be single points of shape (2,) or stacks of shape (m, 2),
    in which case one row of distances is produced per defining pair.

    A zero-length defining pair has no direction, so its distances are
    reported as +inf and no point can count as an inlier.

    :param p1:     First defining point(s), shape (2,) or (m, 2).
    :param p2:     Second defining point(s), same shape as p1.
    :param points: Points to measure, shape (n, 2).

    :return: numpy array of shape (n,) or (m, n) with the distances.
    """
    p1 = np.asarray(p1, dtype=float)
    p2 = np.asarray(p2, dtype=float)
    points = np.asarray(points, dtype=float).reshape(-1, 2)

    dx = p2[..., 0] - p1[..., 0]
    dy = p2[..., 1] - p1[..., 1]
    cross = p2[..., 0] * p1[..., 1] - p2[..., 1] * p1[..., 0]
    den = np.hypot(dx, dy)[..., None]

    num = np.abs(dy[..., None] * points[:, 0] - dx[..., None] * points[:, 1] + cross[..., None])
    with np.errstate(divide="ignore", invalid="ignore"):
        distances = num / den
    return np.where(den < eps, np.inf, distances)
