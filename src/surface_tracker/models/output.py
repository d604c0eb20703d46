"""
Output Models
=============

This module defines the outbound contract of the surface tracker.

Two streams leave the service:
    1. Lifecycle events (ObjectEvent): emitted at most once per reading,
       only when an object is confirmed placed or removed
    2. Reading updates (ReadingUpdate): emitted for EVERY accepted reading,
       for continuous display refresh

Event Contract:
    {
        "kind": "new-object",
        "object_id": "3f2a...",
        "weight": 498.7,
        "position": [3.5, 4.5],
        "spread": 0.71,
        "timestamp": 1707321234.567
    }

Design Rules:
    - Reading updates are display-only and carry no lifecycle meaning
    - position/spread are null when the object's centroid is undefined
"""

import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from surface_tracker.exceptions import UndefinedCentroidError
from surface_tracker.models.state import EventKind, TrackerPhase
from surface_tracker.tracking.tracked_object import TrackedObject


logger = logging.getLogger(__name__)


def _spatial_stats(obj: TrackedObject) -> Tuple[Optional[Tuple[float, float]], Optional[float]]:
    """Return (centroid, spread), or (None, None) when undefined."""
    try:
        return obj.centroid, obj.spread
    except UndefinedCentroidError as e:
        logger.warning(f"Spatial statistics unavailable: {e}")
        return None, None


class ObjectEvent(BaseModel):
    """
    Object lifecycle event.

    Attributes:
        kind: new-object or delete-object
        object_id: Identifier of the placed/removed object
        weight: Net weight of the object's signature
        position: Centroid as [row, col] in cell units
        spread: Radius of gyration in cell units
        timestamp: UNIX timestamp when the event was emitted
    """

    kind: EventKind = Field(..., description="Lifecycle event kind")
    object_id: str = Field(..., description="Identifier of the object")
    weight: float = Field(..., description="Net weight of the object signature")
    position: Optional[Tuple[float, float]] = Field(
        default=None,
        description="Centroid [row, col]; null if undefined",
    )
    spread: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Radius of gyration; null if undefined",
    )
    timestamp: float = Field(..., description="UNIX timestamp of the event")

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "kind": "new-object",
                "object_id": "3f2a9c0d1e4b4f6a8b7c6d5e4f3a2b1c",
                "weight": 498.7,
                "position": [3.5, 4.5],
                "spread": 0.71,
                "timestamp": 1707321234.567,
            }
        }

    @classmethod
    def from_object(
        cls,
        kind: EventKind,
        obj: TrackedObject,
        timestamp: float,
    ) -> "ObjectEvent":
        """Build an event payload from a tracked object."""
        position, spread = _spatial_stats(obj)
        return cls(
            kind=kind,
            object_id=obj.object_id,
            weight=obj.weight,
            position=position,
            spread=spread,
            timestamp=timestamp,
        )


class TrackedObjectView(BaseModel):
    """
    Read-only view of a tracked object for display.

    Attributes:
        object_id: Identifier of the object
        weight: Net weight of the object signature
        position: Centroid [row, col], or null
        spread: Radius of gyration, or null
        created_at: UNIX timestamp when the object was confirmed
    """

    object_id: str
    weight: float
    position: Optional[Tuple[float, float]] = None
    spread: Optional[float] = None
    created_at: float

    @classmethod
    def from_object(cls, obj: TrackedObject) -> "TrackedObjectView":
        """Build a view from a tracked object."""
        position, spread = _spatial_stats(obj)
        return cls(
            object_id=obj.object_id,
            weight=obj.weight,
            position=position,
            spread=spread,
            created_at=obj.created_at,
        )


class ReadingUpdate(BaseModel):
    """
    Per-reading display refresh payload.

    Attributes:
        timestamp: UNIX timestamp when the reading was processed
        phase: Tracker phase after processing the reading
        weight: Total weight of the (normalized) reading
        peak: Maximum cell of the (normalized) reading
        cells: Normalized reading as nested rows
        objects: Current tracked objects
    """

    timestamp: float
    phase: TrackerPhase
    weight: float
    peak: float
    cells: List[List[float]]
    objects: List[TrackedObjectView] = Field(default_factory=list)
