"""
Laser Range Sensor Simulation

This module implements a planar rotating-beam laser range sensor. On every
simulation tick the writer calls LaserSensor.update(), which casts a fan of
beams against the current obstacles, perturbs each beam's angle and distance
with bounded uniform noise, and publishes the result as one atomic snapshot.
Readers on other threads call LaserSensor.read_snapshot() and always receive
an independent copy in which every distance and angle belongs to the same
tick.

The primary entry points are:
    LaserSensor.update()          Recompute and publish a scan (writer).
    LaserSensor.read_snapshot()   Copy the latest published scan (readers).
    snapshot_to_points()          Polar to Cartesian conversion for extraction.
"""

import logging
import threading
import time

import numpy as np

from .Config import LaserSensorConfig
from .geometry import Point2D, ScanSnapshot
from .math_utils import _as_vector2

logger = logging.getLogger(__name__)


class LaserSensor:
    """
    Configurable planar laser range sensor.

    Built from a LaserSensorConfig (or any object exposing the same
    attributes). Owns the distance buffer, the angle buffer and the capture
    timestamp; none of them is ever handed out by reference.
    """
    def __init__(self, config=LaserSensorConfig, rng=None):
        """
        Initialize the sensor from a configuration object.

        :param config: Class or instance with LaserSensorConfig-compatible attributes.
        :param rng:    Optional numpy Generator; defaults to default_rng(config.random_seed).
        """
        # ---------- beam fan ----------
        self.count = int(getattr(config, "count", 181))
        self.min_theta = float(getattr(config, "min_theta", -np.pi / 2))  # [rad]
        self.max_theta = float(getattr(config, "max_theta", np.pi / 2))   # [rad]
        if self.count < 2:
            raise ValueError("count must be >= 2.")
        if self.max_theta <= self.min_theta:
            raise ValueError("max_theta must be greater than min_theta.")
        # Resolution is the span over count beams, not count - 1 intervals.
        self.angular_resolution = (self.max_theta - self.min_theta) / self.count  # [rad]

        # ---------- range envelope ----------
        self.max_distance = float(getattr(config, "max_distance", 500.0))
        if self.max_distance <= 0.0:
            raise ValueError("max_distance must be > 0.")
        invalid_distance = getattr(config, "invalid_distance", None)
        self.invalid_distance = self.max_distance + 1.0 if invalid_distance is None else float(invalid_distance)
        if self.invalid_distance <= self.max_distance:
            raise ValueError("invalid_distance must be greater than max_distance.")

        # ---------- noise model ----------
        self.distance_error_limit = float(getattr(config, "distance_error_limit", 0.0))
        self.angle_error_limit = float(getattr(config, "angle_error_limit", 0.0))
        if self.distance_error_limit < 0.0:
            raise ValueError("distance_error_limit must be >= 0.")
        if self.angle_error_limit < 0.0:
            raise ValueError("angle_error_limit must be >= 0.")

        # ---------- numeric precision ----------
        self.dtype = np.dtype(getattr(config, "dtype", np.float64))
        if self.dtype.kind != "f":
            raise ValueError("dtype must be a floating point type.")

        self.random_seed = getattr(config, "random_seed", None)
        self.rng = rng if rng is not None else np.random.default_rng(self.random_seed)

        # ---------- published state, guarded by _lock ----------
        self._lock = threading.Lock()
        self._distances = np.full(self.count, self.invalid_distance, dtype=self.dtype)
        self._angles = self.nominal_angles().astype(self.dtype)
        self._timestamp = 0.0
        self._tick = 0

        logger.info(
            "LaserSensor: %d beams, theta=[%.3f, %.3f] rad, max_distance=%.1f, noise=(%.3f, %.3f)",
            self.count,
            self.min_theta,
            self.max_theta,
            self.max_distance,
            self.distance_error_limit,
            self.angle_error_limit,
        )

    def nominal_angles(self, orientation=0.0):
        """
        Noise-free beam angles for a given sensor orientation.

        angle_i = min_theta + (max_theta - min_theta) * i / (count - 1) + orientation

        :param orientation: Sensor heading in the world frame [rad].
        :return: numpy array of shape (count,).
        """
        fraction = np.arange(self.count, dtype=float) / (self.count - 1.0)
        return self.min_theta + (self.max_theta - self.min_theta) * fraction + float(orientation)

    def is_valid(self, distance):
        """True when a distance is a real measurement rather than the invalid sentinel."""
        return np.asarray(distance) != self.dtype.type(self.invalid_distance)

    def _cast_beam(self, origin, direction, obstacles):
        """
        Nearest obstacle hit along one beam.

        :return: Minimum distance in [0, max_distance] over all obstacles, or None.
        """
        best = None
        for obstacle in obstacles:
            distance = obstacle.ray_intersection_distance(origin, direction)
            if distance is None:
                continue
            distance = float(distance)
            # Non-finite or negative answers are treated as misses.
            if not (0.0 <= distance <= self.max_distance):
                continue
            if best is None or distance < best:
                best = distance
        return best

    def update(self, position, orientation, obstacles, timestamp=None):
        """
        Recompute every beam against the obstacles and publish the new scan.

        1. Perturb each nominal angle by U(-k * resolution, +k * resolution).
        2. Cast the beam from position; keep the nearest hit within max_distance.
        3. Add U(-distance_error_limit, +distance_error_limit) to valid beams.
        4. Swap distances, angles and timestamp in under the lock.

        :param position:    Sensor origin in the world frame [units].
        :param orientation: Sensor heading in the world frame [rad].
        :param obstacles:   Iterable of objects with ray_intersection_distance().
        :param timestamp:   Capture time [s]; defaults to time.time().
        :return: The published ScanSnapshot.
        """
        origin = _as_vector2(position, "position")
        obstacles = list(obstacles)
        for obstacle in obstacles:
            if not hasattr(obstacle, "ray_intersection_distance"):
                raise TypeError("obstacles must provide a ray_intersection_distance(origin, direction) method.")

        # Sampled in one draw per tick so the whole fan shares the generator state.
        angle_limit = self.angle_error_limit * self.angular_resolution
        angle_errors = self.rng.uniform(-angle_limit, angle_limit, self.count) if angle_limit > 0.0 else np.zeros(self.count)
        angles = self.nominal_angles(orientation) + angle_errors

        distances = np.full(self.count, self.invalid_distance, dtype=float)
        for i, theta in enumerate(angles):
            direction = np.array([np.cos(theta), np.sin(theta)], dtype=float)
            hit = self._cast_beam(origin, direction, obstacles)
            if hit is not None:
                distances[i] = hit

        valid = distances != self.invalid_distance
        if self.distance_error_limit > 0.0 and np.any(valid):
            noise = self.rng.uniform(-self.distance_error_limit, self.distance_error_limit, int(np.count_nonzero(valid)))
            distances[valid] = np.maximum(distances[valid] + noise, 0.0)

        new_distances = distances.astype(self.dtype)
        new_angles = angles.astype(self.dtype)
        new_timestamp = time.time() if timestamp is None else float(timestamp)

        with self._lock:
            self._distances = new_distances
            self._angles = new_angles
            self._timestamp = new_timestamp
            self._tick += 1
            snapshot = ScanSnapshot(self._distances, self._angles, self._timestamp, self._tick)

        logger.debug("LaserSensor tick %d: %d/%d valid beams", snapshot.tick, int(np.count_nonzero(valid)), self.count)
        return snapshot

    def read_snapshot(self):
        """
        Copy of the latest published scan.

        Safe to call from any thread while update() runs on another; the
        copy is taken inside the same critical section as the publish.

        :return: ScanSnapshot with private copies of the buffers.
        """
        with self._lock:
            return ScanSnapshot(self._distances, self._angles, self._timestamp, self._tick)


def snapshot_to_points(snapshot, position):
    """
    Convert a scan from polar beam data into world-frame Cartesian points.

        point_i = position + distance_i * (cos(angle_i), sin(angle_i))

    Invalid beams are converted like any other, landing at the sentinel
    range, so the result stays index-aligned with snapshot.distances.

    :param snapshot: ScanSnapshot from LaserSensor.read_snapshot().
    :param position: Sensor origin used for the scan [units].
    :return: List of Point2D, one per beam.
    """
    origin = _as_vector2(position, "position")
    distances = np.asarray(snapshot.distances, dtype=float)
    angles = np.asarray(snapshot.angles, dtype=float)
    xs = origin[0] + distances * np.cos(angles)
    ys = origin[1] + distances * np.sin(angles)
    return [Point2D(x, y) for x, y in zip(xs, ys)]
