"""
Landmark extraction pipeline.

Converts one laser scan, given as Cartesian points plus the matching beam
distances, into line-segment obstacles and point landmarks:

    partition -> RANSAC per partition -> loose ends -> intersections

The pipeline holds configuration and a random generator only; every call
works on its own copies, so independent scans can be extracted from several
threads at once as long as each thread owns its pipeline (or supplies its
own generator).
"""

import logging

import numpy as np

from .Config import ExtractionConfig
from .intersection import IntersectionLandmarkDetector
from .partition import ScanPartitioner
from .ransac import RansacLineFitter

logger = logging.getLogger(__name__)


class LandmarkExtractionPipeline:
    """
    Scan to (obstacles, landmarks) extraction.

    Built from an ExtractionConfig (or any object exposing the same
    attributes). The collaborators are exposed as attributes so callers can
    run a single stage on its own.
    """
    def __init__(self, config=ExtractionConfig, rng=None, invalid_distance=None):
        """
        :param config:           Class or instance with ExtractionConfig-compatible attributes.
        :param rng:              Optional numpy Generator for RANSAC sampling; defaults to
                                 default_rng(config.random_seed).
        :param invalid_distance: Sentinel of the sensor that produced the scans, usually
                                 LaserSensor.invalid_distance; overrides config.invalid_distance.
        """
        if invalid_distance is None:
            invalid_distance = getattr(config, "invalid_distance", ExtractionConfig.invalid_distance)
        self.random_seed = getattr(config, "random_seed", None)
        self.rng = rng if rng is not None else np.random.default_rng(self.random_seed)

        self.partitioner = ScanPartitioner(
            discontinuity_threshold=getattr(config, "discontinuity_threshold", ExtractionConfig.discontinuity_threshold),
            lower_landmark_margin=getattr(config, "lower_landmark_margin", ExtractionConfig.lower_landmark_margin),
            invalid_distance=invalid_distance,
        )
        self.line_fitter = RansacLineFitter(
            iterations=getattr(config, "ransac_iterations", ExtractionConfig.ransac_iterations),
            threshold=getattr(config, "ransac_threshold", ExtractionConfig.ransac_threshold),
            min_inliers=getattr(config, "ransac_min_inliers", ExtractionConfig.ransac_min_inliers),
            rng=self.rng,
        )
        self.intersection_detector = IntersectionLandmarkDetector(
            intersection_margin=getattr(config, "intersection_margin", ExtractionConfig.intersection_margin),
            determinant_tolerance=getattr(config, "determinant_tolerance", ExtractionConfig.determinant_tolerance),
        )

    def extract(self, points, distances):
        """
        Extract line-segment obstacles and landmarks from one scan.

        1. Partition the scan at distance discontinuities.
        2. Fit lines to every partition with RANSAC.
        3. Add loose-end landmarks at the discontinuities.
        4. Add intersection landmarks between the fitted lines.

        :param points:    Ordered scan points in Cartesian coordinates, one per beam.
        :param distances: Beam distances, same length as points; invalid beams
                          carry the sentinel and contribute no point.
        :return: (lines, landmarks) as lists of LineSegment and points.
        :raises ValueError: If points and distances differ in length.
        """
        points = list(points)
        distances = [float(d) for d in distances]
        if len(points) != len(distances):
            raise ValueError(
                f"points and distances must have the same length ({len(points)} != {len(distances)})."
            )

        lines = []
        for partition in self.partitioner.partition(points, distances):
            lines.extend(self.line_fitter.fit_lines(partition))

        landmarks = list(self.partitioner.loose_end_landmarks(points, distances))
        observed = self.partitioner.valid_points(points, distances)
        landmarks.extend(self.intersection_detector.detect(lines, observed))

        logger.debug("Extracted %d lines and %d landmarks from %d beams", len(lines), len(landmarks), len(points))
        return lines, landmarks
