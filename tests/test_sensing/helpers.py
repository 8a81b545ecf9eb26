"""
Shared test helpers for the sensing test suite.

Provides plot embedding, a chi-squared variance bound, noise-free sensor
configurations, and small synthetic scan builders used across multiple test
modules.
"""

import base64
import io

import numpy as np

from sensing.Config import ExtractionConfig, LaserSensorConfig
from sensing.geometry import Point2D


def attach_plot_to_html_report(request, fig, name):
    """
    Embed a matplotlib figure into the pytest HTML report as an inline PNG.

    The figure is rendered to an in memory byte buffer, Base64 encoded, and
    appended to the ``extras`` list on the current test node. If the
    ``pytest-html`` plugin is not active the function silently does nothing.

    :param request:  the pytest ``request`` fixture
    :param fig:      a ``matplotlib.figure.Figure`` to embed
    :param name:     a short label shown beside the image in the report
    """
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=160)

    html_plugin = request.config.pluginmanager.getplugin("html")
    if html_plugin is not None and hasattr(html_plugin, "extras"):
        png_b64 = base64.b64encode(buf.getvalue()).decode("ascii")
        extra = getattr(request.node, "extra", [])
        extra.append(html_plugin.extras.png(png_b64, name=name))
        request.node.extra = extra


def chi2_variance_bounds(n, confidence=0.99):
    """
    Chi-squared confidence interval ratio bounds for a sample variance.

    Wilson Hilferty approximation:
        chi2_q  ~  nu * (1 - 2/(9*nu) +/- z * sqrt(2/(9*nu)))^3
    The bounds are exact for Gaussian samples and conservative for
    uniform ones, whose sample variance scatters less.

    :param n:          number of samples
    :param confidence: two-sided confidence level (default 0.99)
    :return: (lower_ratio, upper_ratio) for s^2 / sigma^2
    """
    z_table = {0.99: 2.576, 0.95: 1.960, 0.90: 1.645}
    z = z_table.get(confidence, 2.576)

    nu = float(n - 1)
    a = 2.0 / (9.0 * nu)
    chi2_lo = nu * (1.0 - a - z * np.sqrt(a)) ** 3
    chi2_hi = nu * (1.0 - a + z * np.sqrt(a)) ** 3
    return chi2_lo / nu, chi2_hi / nu


class NoiselessSensorConfig(LaserSensorConfig):
    distance_error_limit = 0.0  # exact ranges
    angle_error_limit = 0.0     # exact beam directions
    random_seed = 7


class SeededExtractionConfig(ExtractionConfig):
    random_seed = 1234


def points_on_segment(start, end, count):
    """Evenly spaced Point2D values from start to end inclusive."""
    xs = np.linspace(start[0], end[0], count)
    ys = np.linspace(start[1], end[1], count)
    return [Point2D(x, y) for x, y in zip(xs, ys)]


def points_from_distances(distances, spacing=1.0):
    """
    Synthetic scan points for partitioning tests.

    Beam i is placed at (i * spacing, distance_i); only the order and the
    identity of the points matter to the partitioner.
    """
    return [Point2D(i * spacing, d) for i, d in enumerate(distances)]
