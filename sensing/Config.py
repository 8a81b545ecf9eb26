import numpy as np


class LaserSensorConfig:
    # Beam fan
    count = 181  # number of beams
    min_theta = -np.pi / 2  # [rad], first beam relative to the sensor orientation
    max_theta = np.pi / 2  # [rad], last beam relative to the sensor orientation

    # Range envelope
    max_distance = 500.0  # [units], hits beyond this are reported invalid
    invalid_distance = None  # sentinel for no hit, None uses max_distance + 1

    # Noise model:
    # angle = nominal + U(-angle_error_limit * resolution, +angle_error_limit * resolution)
    # distance = true + U(-distance_error_limit, +distance_error_limit)
    distance_error_limit = 5.0  # [units]
    angle_error_limit = 0.05  # [fraction of the angular resolution]

    # Numeric precision of the measurement buffers
    dtype = np.float64

    random_seed = None  # optional deterministic seed


class ExtractionConfig:
    # RANSAC line fitting
    ransac_iterations = 1000  # trials per round
    ransac_threshold = 4.0  # [units], perpendicular inlier distance
    ransac_min_inliers = 15  # a line needs strictly more inliers than this

    # Scan partitioning and loose ends
    discontinuity_threshold = 60.0  # [units], distance jump that splits the scan
    lower_landmark_margin = 1.0  # [units], jump into an invalid beam that still counts

    # Intersection landmarks
    intersection_margin = 30.0  # [units], nearest point distance and bounding box growth
    determinant_tolerance = 1e-6  # below this the two lines are treated as parallel

    # Must match the sensor sentinel. Fixed from the default sensor range here;
    # a sensor with a different max_distance passes its own invalid_distance
    # to LandmarkExtractionPipeline.
    invalid_distance = LaserSensorConfig.max_distance + 1.0

    random_seed = None  # optional deterministic seed for RANSAC sampling
