"""
Publish Module
==============

Outbound channels for lifecycle events and reading updates.

DESIGN RULES:
    - Does NOT import tracker logic
    - Publishing never blocks the processing loop
"""

from surface_tracker.publish.broadcaster import EventBroadcaster


__all__ = [
    "EventBroadcaster",
]
