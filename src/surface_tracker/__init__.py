"""
SurfaceTracker
==============

Object placement and removal tracking for load-cell sensing surfaces.

This package ingests a stream of 2D weight-sensor snapshots, learns the
empty-surface baseline, and infers discrete "object placed" / "object
removed" events without any prior model of object shape or weight.

Components:
    - tracking: Grid readings, rolling averages, tracked objects, Tracker
    - stream: Ingestion boundary, reading buffer, WebSocket/mock sources
    - agent: LangGraph workflow that drives the tracker
    - publish: Outbound event and reading channels
    - models: Pydantic input/output contracts

Example:
    from surface_tracker.tracking import GridReading, GridShape, Tracker

    shape = GridShape(height=8, width=8)
    tracker = Tracker(shape)
    update = tracker.observe(GridReading.from_matrix(matrix, shape))
"""

__version__ = "0.1.0"
__author__ = "Surface Tracker Project"

__all__ = [
    "__version__",
]
