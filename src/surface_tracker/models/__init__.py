"""
Data Models
===========

Pydantic models and enums for the surface tracker.

Models:
    Input:
        - SnapshotMessage: Envelope for raw sensor snapshots

    State:
        - TrackerPhase: CALIBRATING, STEADY, TESTING
        - EventKind: new-object, delete-object

    Output:
        - ObjectEvent: Lifecycle event payload
        - TrackedObjectView: Display view of a tracked object
        - ReadingUpdate: Per-reading display refresh payload
"""

from surface_tracker.models.input import SnapshotMessage
from surface_tracker.models.state import EventKind, TrackerPhase
from surface_tracker.models.output import ObjectEvent, ReadingUpdate, TrackedObjectView

__all__ = [
    # Input
    "SnapshotMessage",
    # State
    "TrackerPhase",
    "EventKind",
    # Output
    "ObjectEvent",
    "TrackedObjectView",
    "ReadingUpdate",
]
