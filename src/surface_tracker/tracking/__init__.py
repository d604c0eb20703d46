"""
Tracking Module
===============

Object-tracking core for the load-cell surface.

Components:
    - GridReading: Immutable sensor snapshot with weight/peak summaries
    - RollingAverage: Windowed incremental mean (calibration, transient test)
    - TrackedObject: Confirmed object with memoised centroid/spread
    - Tracker: CALIBRATING / STEADY / TESTING state machine

This package does NOT import configuration, transport or FastAPI code.
"""

from surface_tracker.tracking.reading import CELL_MAX, CELL_MIN, GridReading, GridShape
from surface_tracker.tracking.average import RollingAverage
from surface_tracker.tracking.tracked_object import TrackedObject
from surface_tracker.tracking.tracker import (
    Tracker,
    TrackerEvent,
    TrackerThresholds,
    TrackerUpdate,
)

__all__ = [
    "CELL_MAX",
    "CELL_MIN",
    "GridReading",
    "GridShape",
    "RollingAverage",
    "TrackedObject",
    "Tracker",
    "TrackerEvent",
    "TrackerThresholds",
    "TrackerUpdate",
]
