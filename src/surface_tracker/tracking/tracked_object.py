"""
Tracked Object
==============

A confirmed physical object on the surface, represented by the signed
difference reading attributed to it.

Spatial statistics are derived once and memoised:
    centroid = weight-weighted mean (row, col), each cell a point mass
               at its center (i + 0.5, j + 0.5)
    spread   = sqrt(sum(|cell| * dist²(cell, centroid)) / weight)
               (radius of gyration)

A zero-weight signature has no centroid; requesting it raises
UndefinedCentroidError instead of producing NaN.
"""

import math
import time
import uuid
from functools import cached_property
from typing import Optional, Tuple

import numpy as np

from surface_tracker.exceptions import UndefinedCentroidError
from surface_tracker.tracking.reading import GridReading


class TrackedObject:
    """
    Object currently believed to be on the surface.

    Identity is the object instance (and its object_id); two objects with
    identical readings are still distinct.

    Attributes:
        reading: Signed difference reading that characterizes the object
        object_id: Unique hex identifier
        created_at: UNIX timestamp of creation
    """

    def __init__(
        self,
        reading: GridReading,
        created_at: Optional[float] = None,
        object_id: Optional[str] = None,
    ) -> None:
        self.reading = reading
        self.created_at = created_at if created_at is not None else time.time()
        self.object_id = object_id or uuid.uuid4().hex

    @property
    def weight(self) -> float:
        """Net weight of the attributed reading."""
        return self.reading.weight

    @cached_property
    def centroid(self) -> Tuple[float, float]:
        """
        Weight-weighted mean (row, col) position.

        Raises:
            UndefinedCentroidError: If the object's weight is zero
        """
        weight = self.reading.weight
        if weight == 0:
            raise UndefinedCentroidError(
                f"Object {self.object_id} has zero weight"
            )

        cells = self.reading.cells
        rows = np.arange(cells.shape[0]) + 0.5
        cols = np.arange(cells.shape[1]) + 0.5

        row = float((cells.sum(axis=1) * rows).sum() / weight)
        col = float((cells.sum(axis=0) * cols).sum() / weight)
        return (row, col)

    @cached_property
    def spread(self) -> float:
        """
        Radius of gyration around the centroid.

        Raises:
            UndefinedCentroidError: If the object's weight is zero, or
                negative (the moment would be negative)
        """
        row, col = self.centroid
        if self.reading.weight < 0:
            raise UndefinedCentroidError(
                f"Object {self.object_id} has negative net weight"
            )
        cells = self.reading.cells
        rows, cols = np.indices(cells.shape)

        sq_dist = (rows + 0.5 - row) ** 2 + (cols + 0.5 - col) ** 2
        moment = float((np.abs(cells) * sq_dist).sum() / self.reading.weight)
        return math.sqrt(moment)

    def __repr__(self) -> str:
        return (
            f"TrackedObject(id={self.object_id[:8]}, "
            f"weight={self.weight:.2f})"
        )
