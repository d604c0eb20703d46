"""
Test Configuration
==================

Pytest fixtures and test configuration for the surface tracker.
"""

import numpy as np
import pytest

from surface_tracker.tracking import GridReading, GridShape, Tracker, TrackerThresholds


BASELINE_LEVEL = 10.0


@pytest.fixture
def shape():
    """Provide a small 4x4 grid shape."""
    return GridShape(height=4, width=4)


@pytest.fixture
def make_reading(shape):
    """Provide a factory for readings on the test grid."""

    def _make(level=0.0, blocks=None):
        """
        Build a reading with a uniform level plus optional blocks.

        Args:
            level: Value added to every cell
            blocks: Iterable of (row_slice, col_slice, value_per_cell)
        """
        cells = np.full((shape.height, shape.width), float(level))
        for rows, cols, value in blocks or ():
            cells[rows, cols] += value
        return GridReading(cells)

    return _make


@pytest.fixture
def small_thresholds():
    """Provide thresholds with short windows for fast scenarios."""
    return TrackerThresholds(
        new_object_threshold=140.0,
        delete_object_threshold=80.0,
        calibration_window=5,
        test_window=4,
    )


@pytest.fixture
def calibrated_tracker(shape, small_thresholds, make_reading):
    """Provide a tracker that has finished calibrating on a constant surface."""
    tracker = Tracker(shape, small_thresholds, clock=lambda: 1707321234.0)
    baseline = make_reading(BASELINE_LEVEL)
    for _ in range(small_thresholds.calibration_window):
        tracker.observe(baseline)
    return tracker
