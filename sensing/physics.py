"""
Planar Obstacle Geometry and Ray Intersection for Laser Simulation

This module defines the single capability the laser sensor needs from the
simulated world, plus a few concrete obstacle shapes implementing it:

An Obstacle base class whose ray_intersection_distance() returns the
distance to the nearest intersection along a ray, or None when the ray
misses.
Ray-geometry intersection for common 2D primitives (LineSegmentObstacle,
CircleObstacle, BoxObstacle).

Any object exposing ray_intersection_distance(origin, direction) can be
handed to LaserSensor.update(); subclassing Obstacle is not required.
"""

import numpy as np

from .math_utils import _as_vector2, _normalize, eps


class Obstacle:
    """
    Abstract base class for ray-traceable 2D obstacles.

    Subclasses must override ray_intersection_distance(). The object_id is
    only used for debugging output.
    """
    def __init__(self, object_id=None):
        self.object_id = str(object_id) if object_id is not None else self.__class__.__name__

    def ray_intersection_distance(self, origin, direction):
        """
        Distance along the ray to the nearest intersection (abstract method).

        :param origin:    Ray origin [units].
        :param direction: Ray direction (normalized internally) [unit].

        :return: Nearest non-negative hit distance, or None if the ray misses.
        :raises NotImplementedError: Must be overridden by subclasses.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}({self.object_id!r})"


class LineSegmentObstacle(Obstacle):
    """
    Straight wall between two endpoints.

    :param p1:        First endpoint [units].
    :param p2:        Second endpoint [units].
    :param object_id: Identifier string for this obstacle.
    """
    def __init__(self, p1, p2, object_id=None):
        super().__init__(object_id=object_id)
        self.p1 = _as_vector2(p1, "p1")
        self.p2 = _as_vector2(p2, "p2")
        if np.linalg.norm(self.p2 - self.p1) <= eps:
            raise ValueError("Line segment endpoints must be distinct.")

    def ray_intersection_distance(self, origin, direction):
        """
        Ray-segment intersection.

        Solves origin + t * direction = p1 + u * (p2 - p1) with 2D cross
        products:
            denom = cross(direction, edge)
            t     = cross(p1 - origin, edge) / denom
            u     = cross(p1 - origin, direction) / denom
        A hit requires t >= 0 and 0 <= u <= 1. Parallel rays miss.

        :return: Hit distance or None.
        """
        origin = _as_vector2(origin, "origin")
        direction = _normalize(_as_vector2(direction, "direction"))
        edge = self.p2 - self.p1
        denom = direction[0] * edge[1] - direction[1] * edge[0]
        if abs(denom) < eps:
            return None  # parallel or collinear with the ray

        diff = self.p1 - origin
        t_hit = (diff[0] * edge[1] - diff[1] * edge[0]) / denom
        u = (diff[0] * direction[1] - diff[1] * direction[0]) / denom
        if t_hit < 0.0 or u < 0.0 or u > 1.0:
            return None
        return float(t_hit)


class CircleObstacle(Obstacle):
    """
    Solid disc defined by centre and radius.

    :param center:    Centre of the disc [units].
    :param radius:    Radius of the disc [units].
    :param object_id: Identifier string for this obstacle.
    """
    def __init__(self, center, radius, object_id=None):
        super().__init__(object_id=object_id)
        self.center = _as_vector2(center, "center")
        self.radius = float(radius)
        if self.radius <= eps:
            raise ValueError("Circle radius must be > 0.")

    def ray_intersection_distance(self, origin, direction):
        """
        Ray-circle intersection via the quadratic formula (unit direction, a = 1).

            oc = origin - centre,  b = dot(oc, d),  c = dot(oc, oc) - r^2
            t  = -b -/+ sqrt(b^2 - c)
        The entry point is preferred; a ray starting inside reports the exit.

        :return: Hit distance or None.
        """
        origin = _as_vector2(origin, "origin")
        direction = _normalize(_as_vector2(direction, "direction"))
        oc = origin - self.center
        b = float(np.dot(oc, direction))
        c = float(np.dot(oc, oc) - self.radius * self.radius)
        disc = b * b - c
        if disc < 0.0:
            return None

        sqrt_disc = np.sqrt(disc)
        t_near = -b - sqrt_disc
        t_far = -b + sqrt_disc
        if t_near >= 0.0:
            return float(t_near)
        if t_far >= 0.0:
            return float(t_far)
        return None  # circle is behind the ray


class BoxObstacle(Obstacle):
    """
    Axis-aligned rectangle defined by its min and max corners.

    :param min_corner: Minimum (x, y) corner [units].
    :param max_corner: Maximum (x, y) corner [units].
    :param object_id:  Identifier string for this obstacle.
    """
    def __init__(self, min_corner, max_corner, object_id=None):
        super().__init__(object_id=object_id)
        self.min_corner = _as_vector2(min_corner, "min_corner")
        self.max_corner = _as_vector2(max_corner, "max_corner")
        if np.any(self.max_corner <= self.min_corner):
            raise ValueError("max_corner must be strictly greater than min_corner on both axes.")

    def ray_intersection_distance(self, origin, direction):
        """
        Ray-rectangle intersection via the slab method.

            t0 = (min - origin) / direction,  t1 = (max - origin) / direction
            t_enter = max(min(t0, t1)),       t_exit = min(max(t0, t1))
        The ray misses when t_exit < t_enter or the box lies behind it.

        :return: Hit distance or None.
        """
        origin = _as_vector2(origin, "origin")
        direction = _normalize(_as_vector2(direction, "direction"))

        # Rays parallel to a side produce inf slabs, which the min/max handle.
        with np.errstate(divide="ignore", invalid="ignore"):
            inv_dir = 1.0 / direction
            t0 = (self.min_corner - origin) * inv_dir
            t1 = (self.max_corner - origin) * inv_dir

        t_small = np.fmin(t0, t1)
        t_big = np.fmax(t0, t1)
        t_enter = float(np.max(t_small))
        t_exit = float(np.min(t_big))

        if np.isnan(t_enter) or np.isnan(t_exit) or t_exit < t_enter or t_exit < 0.0:
            return None
        return t_enter if t_enter >= 0.0 else t_exit
