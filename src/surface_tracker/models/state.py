"""
Tracker State Models
====================

Discrete phases of the object-tracking state machine and the kinds of
lifecycle events it emits.

Phases:
    CALIBRATING → STEADY ⇄ TESTING

    CALIBRATING: Learning the empty-surface baseline (initial phase)
    STEADY:      Slowly averaging drift into the steady-state reading
    TESTING:     A transient began; averaging a fixed window to decide
                 whether an object appeared or disappeared

There is no terminal phase; the tracker runs indefinitely.
"""

from enum import Enum


class TrackerPhase(str, Enum):
    """
    Phase of the tracker state machine.

    Attributes:
        CALIBRATING: Baseline not yet established
        STEADY: Tracking drift against the steady-state average
        TESTING: Transient test window is open
    """

    CALIBRATING = "CALIBRATING"
    STEADY = "STEADY"
    TESTING = "TESTING"


class EventKind(str, Enum):
    """
    Object lifecycle event kinds.

    Attributes:
        NEW_OBJECT: An object was placed on the surface
        DELETE_OBJECT: A tracked object was removed
    """

    NEW_OBJECT = "new-object"
    DELETE_OBJECT = "delete-object"
