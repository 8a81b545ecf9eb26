"""
Pytest Configuration and HTML Report Hooks

This module configures the pytest test runner for the laser landmark
project. Every run writes a self-contained pytest-html report into
tests/test_reports/, named after the component under test when a single
test module is run (report_ransac.html, report_laser_sensor.html, ...).

Two extra columns are added to the report table: the human readable
test_meta of each test (description, goal, passing criteria) and any
matplotlib plots the test attached, such as scan geometry, noise
histograms and extracted walls and corners.
"""

import sys
from html import escape
from pathlib import Path

import pytest

# Project root: the directory holding sensing/ and tests/
ROOT = Path(__file__).resolve().parents[1]

# Make the sensing package importable when the tests run from a plain checkout
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# All reports of the suite are collected in one place
REPORT_DIR = ROOT / "tests" / "test_reports"


def _component_from_test_module(text):
    """
    Extract the component name from a command-line argument naming a test module.

    Accepts plain paths as well as node IDs, so both
    "tests/test_sensing/test_ransac.py" and "test_ransac.py::test_foo" map to
    "ransac".

    :param text: Raw command-line argument string.
    :return: Component name, or None if the argument is not a test module.
    """
    # Drop the "::test_name" part of a node ID
    path = Path(text.split("::", 1)[0])

    # Only test modules qualify, directories and other files do not
    if path.suffix != ".py" or not path.name.startswith("test_"):
        return None
    return path.stem.removeprefix("test_") or None


def _report_name_from_args(args):
    """
    Choose the HTML report filename for this pytest invocation.

    A run over exactly one test module is reported as
    "report_<component>.html". Runs over several modules, directories or
    the whole suite share "report_all.html".

    :param args: List of command-line arguments passed to pytest.
    :return: Report filename string.
    """
    components = set()
    for arg in args:
        text = str(arg)

        # Options never name a test module
        if text.startswith("-"):
            continue

        component = _component_from_test_module(text)
        if component is not None:
            components.add(component.lower())

    # One component: give it its own report so reruns do not overwrite the suite report
    if len(components) == 1:
        return f"report_{components.pop()}.html"

    return "report_all.html"


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config):
    """
    Point pytest-html at tests/test_reports/ unless --html was given.

    Runs before pytest-html reads its options, so the computed path is the
    one the plugin writes to.

    :param config: The pytest Config object for this session.
    """
    # An explicit --html on the command line always wins
    if any(str(arg).startswith("--html") for arg in config.invocation_params.args):
        return

    REPORT_DIR.mkdir(parents=True, exist_ok=True)
    config.option.htmlpath = str(REPORT_DIR / _report_name_from_args(config.invocation_params.args))


def pytest_html_results_table_header(cells):
    """
    Add the "Test Description" and "Plot" column headers after the default columns.

    :param cells: List of HTML header cell strings, modified in place.
    """
    cells.insert(3, '<th class="col-testmeta">Test Description</th>')
    cells.insert(4, '<th class="col-plot">Plot</th>')


def _format_test_meta(report):
    """
    Render the test_meta of a report as an HTML block.

    Tests without a test_meta marker (small edge case and validation
    tests) get a grey "n/a" placeholder.

    :param report: The pytest test report object.
    :return: HTML string with description, goal and passing criteria.
    """
    meta = getattr(report, "test_meta", None)
    if not meta:
        return '<div style="color:#666;">n/a</div>'

    # Marker text is free-form and may contain < or &, e.g. "d < 30"
    fields = [
        ("Test Description", meta.get("description", "")),
        ("Test Goal", meta.get("goal", "")),
        ("Passing Criteria", meta.get("passing_criteria", "")),
    ]
    rows = "".join(f"<div><strong>{label}:</strong> {escape(str(value))}</div>" for label, value in fields)
    return f'<div style="min-width:340px;max-width:520px;line-height:1.35;">{rows}</div>'


def _format_plots(report):
    """
    Render the image extras of a report as clickable thumbnails.

    :param report: The pytest test report object.
    :return: HTML string, empty when the test attached no plot.
    """
    images = []
    for extra in getattr(report, "extras", []):
        # attach_plot_to_html_report only ever adds PNG images
        if extra.get("format_type") != "image" or not extra.get("content"):
            continue

        content = extra["content"]
        images.append(
            f'<a href="{content}" target="_blank" rel="noopener noreferrer">'
            f'<img src="{content}" alt="plot" '
            f'style="max-width:320px;height:auto;display:block;margin:4px 0;cursor:zoom-in;" />'
            f"</a>"
        )
    return "".join(images)


def pytest_html_results_table_row(report, cells):
    """
    Fill the two extra columns for one test row.

    :param report: The pytest test report object for this row.
    :param cells:  List of HTML cell strings for this row, modified in place.
    """
    cells.insert(3, f'<td class="col-testmeta">{_format_test_meta(report)}</td>')
    cells.insert(4, f'<td class="col-plot">{_format_plots(report)}</td>')


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Copy the test_meta marker and any attached plots onto the call-phase report.

    :param item: The pytest test item that just ran.
    :param call: The pytest CallInfo object for this test phase.
    """
    # Let pytest build the report first
    outcome = yield
    report = outcome.get_result()

    # Setup and teardown rows carry no metadata
    if report.when != "call":
        return

    marker = item.get_closest_marker("test_meta")
    if marker:
        report.test_meta = {key: marker.kwargs.get(key, "") for key in ("description", "goal", "passing_criteria")}

    # Plots are stored on the item by attach_plot_to_html_report
    item_extra = getattr(item, "extra", None)
    if not item_extra:
        return

    extras = getattr(report, "extras", [])
    extras.extend(dict(extra) for extra in item_extra)
    report.extras = extras

    # Older pytest-html versions read report.extra instead of report.extras
    if hasattr(report, "extra"):
        report.extra = extras
