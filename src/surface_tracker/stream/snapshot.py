"""
Snapshot Data Model
===================

Internal representation of one accepted sensor snapshot.

This is the typed interface between the ingestion boundary and the
processing loop. Only validated readings are wrapped in a Snapshot.
"""

from dataclasses import dataclass

from surface_tracker.tracking.reading import GridReading


@dataclass(frozen=True, slots=True)
class Snapshot:
    """
    Validated sensor snapshot.

    Attributes:
        sequence: Arrival order assigned by the ingestion boundary
        timestamp: UNIX timestamp (from the bridge, or arrival time)
        reading: Validated raw GridReading
    """

    sequence: int
    timestamp: float
    reading: GridReading

    def __repr__(self) -> str:
        return (
            f"Snapshot(sequence={self.sequence}, "
            f"timestamp={self.timestamp:.3f}, "
            f"weight={self.reading.weight:.2f})"
        )
