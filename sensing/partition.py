"""
Scan partitioning and loose-end landmarks.

A scan is cut into partitions wherever two consecutive beams disagree by more
than the discontinuity threshold; each partition is then a candidate for
line fitting. The same jumps mark occlusion edges, whose near-side point is
reported as a "loose end" landmark.

Beams carrying the invalid sentinel take part in the jump tests but never
contribute a point, so every point handed downstream is an observed one.
"""

import logging

from .Config import ExtractionConfig

logger = logging.getLogger(__name__)


def _check_lengths(points, distances):
    if len(points) != len(distances):
        raise ValueError(
            f"points and distances must have the same length ({len(points)} != {len(distances)})."
        )


class ScanPartitioner:
    """
    Splits an ordered scan at distance discontinuities.

    :param discontinuity_threshold: Jump between neighbouring beams that starts a new partition.
    :param lower_landmark_margin:   Jump into or out of an invalid beam that still marks a loose end.
    :param invalid_distance:        Sentinel distance of beams without a hit.
    """
    def __init__(
        self,
        discontinuity_threshold=ExtractionConfig.discontinuity_threshold,
        lower_landmark_margin=ExtractionConfig.lower_landmark_margin,
        invalid_distance=ExtractionConfig.invalid_distance,
    ):
        self.discontinuity_threshold = float(discontinuity_threshold)
        self.lower_landmark_margin = float(lower_landmark_margin)
        self.invalid_distance = float(invalid_distance)
        if self.discontinuity_threshold < 0.0:
            raise ValueError("discontinuity_threshold must be >= 0.")
        if self.lower_landmark_margin < 0.0:
            raise ValueError("lower_landmark_margin must be >= 0.")

    def _is_invalid(self, distance):
        return float(distance) == self.invalid_distance

    def valid_points(self, points, distances):
        """Observed points of the scan, in order, with invalid beams removed."""
        _check_lengths(points, distances)
        return [p for p, d in zip(points, distances) if not self._is_invalid(d)]

    def partition(self, points, distances):
        """
        Split the scan into contiguous runs without a large distance jump.

        A new partition starts whenever |d[i] - d[i-1]| > discontinuity_threshold.
        Concatenating the partitions reproduces the valid points in order.

        :param points:    Ordered scan points, one per beam.
        :param distances: Distance per beam, same length as points.
        :return: List of non-empty lists of points.
        """
        _check_lengths(points, distances)
        partitions = []
        current = []
        for i, (point, distance) in enumerate(zip(points, distances)):
            if i > 0 and abs(float(distance) - float(distances[i - 1])) > self.discontinuity_threshold:
                if current:
                    partitions.append(current)
                current = []
            if not self._is_invalid(distance):
                current.append(point)
        if current:
            partitions.append(current)

        logger.debug("Partitioned %d beams into %d partitions", len(points), len(partitions))
        return partitions

    def loose_end_landmarks(self, points, distances):
        """
        Near-side points of occlusion edges.

        For each neighbouring pair (i-1, i):
          the distance grows by more than the threshold, or beam i turns
          invalid with more than lower_landmark_margin: the point before the
          jump is a landmark;
          otherwise the distance shrinks by more than the threshold, or beam
          i-1 was invalid: the point after the jump is a landmark.

        The landmark beam is always the nearer of the two, so it is a valid
        one for any sensor scan; a jump whose near side is itself invalid
        (only possible with hand-made input) records nothing.

        :param points:    Ordered scan points, one per beam.
        :param distances: Distance per beam, same length as points.
        :return: List of landmark points in scan order.
        """
        _check_lengths(points, distances)
        landmarks = []
        for i in range(1, len(distances)):
            prev = float(distances[i - 1])
            curr = float(distances[i])
            if (curr - prev) > self.discontinuity_threshold or (
                self._is_invalid(curr) and (curr - prev) > self.lower_landmark_margin
            ):
                edge = i - 1
            elif (prev - curr) > self.discontinuity_threshold or (
                self._is_invalid(prev) and (prev - curr) > self.lower_landmark_margin
            ):
                edge = i
            else:
                continue
            if not self._is_invalid(distances[edge]):
                landmarks.append(points[edge])

        logger.debug("Found %d loose ends", len(landmarks))
        return landmarks
