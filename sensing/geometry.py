"""
Value types shared by the sensor and the extraction pipeline.

Point2D is the unit of every geometric computation, LineSegment is a
detected obstacle edge, and ScanSnapshot is one published laser scan. All of
them are frozen dataclasses, so a value handed to a consumer can never be
changed under another consumer's feet.
"""

from dataclasses import dataclass

import numpy as np

from .math_utils import _as_vector2


@dataclass(frozen=True)
class Point2D:
    """
    Immutable planar point.

    :param x: X coordinate [units].
    :param y: Y coordinate [units].
    """
    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def from_array(cls, value):
        vec = _as_vector2(value, "value")
        return cls(vec[0], vec[1])

    def as_array(self):
        return np.array([self.x, self.y], dtype=float)

    def distance_to(self, other):
        other = _as_vector2(other, "other")
        return float(np.hypot(self.x - other[0], self.y - other[1]))


@dataclass(frozen=True)
class LineSegment:
    """
    Detected straight obstacle edge.

    The endpoints are the first and last inlier points of the fit in scan
    order, not the ends of an idealized model line.

    :param start:        First inlier point.
    :param end:          Last inlier point.
    :param inlier_count: Number of points that supported the line.
    """
    start: Point2D
    end: Point2D
    inlier_count: int = 0

    def length(self):
        return self.start.distance_to(self.end)

    def bounding_box(self, margin=0.0):
        """Return (x_min, y_min, x_max, y_max) grown by margin on every side."""
        return (
            min(self.start.x, self.end.x) - margin,
            min(self.start.y, self.end.y) - margin,
            max(self.start.x, self.end.x) + margin,
            max(self.start.y, self.end.y) + margin,
        )


@dataclass(frozen=True, eq=False)
class ScanSnapshot:
    """
    One published laser scan.

    distances[i] and angles[i] describe beam i of the same update tick.
    The arrays are private read-only copies owned by the snapshot.

    :param distances: Measured distance per beam, or the invalid sentinel.
    :param angles:    Actual (noisy) world-frame angle per beam [rad].
    :param timestamp: Capture time of the scan [s].
    :param tick:      Number of sensor updates completed when captured.
    """
    distances: np.ndarray
    angles: np.ndarray
    timestamp: float = 0.0
    tick: int = 0

    def __post_init__(self):
        distances = np.array(self.distances, copy=True)
        angles = np.array(self.angles, copy=True)
        if distances.shape != angles.shape or distances.ndim != 1:
            raise ValueError("distances and angles must be 1D arrays of equal length.")
        distances.flags.writeable = False
        angles.flags.writeable = False
        object.__setattr__(self, "distances", distances)
        object.__setattr__(self, "angles", angles)
        object.__setattr__(self, "timestamp", float(self.timestamp))
        object.__setattr__(self, "tick", int(self.tick))

    def __len__(self):
        return len(self.distances)
