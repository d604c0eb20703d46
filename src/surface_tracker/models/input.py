"""
Input Message Schema
====================

Pydantic model for snapshot messages received from the sensor bridge.

Input Contract:
    The bridge either sends the bare matrix (nested rows or a flat list):

        [[0, 3, 1, ...], [2, 0, 0, ...], ...]

    or an envelope with an optional timestamp:

        {"cells": [[0, 3, 1, ...], ...], "timestamp": 1707321234.567}

Shape and weight are NOT validated here; that happens when the cells
are turned into a GridReading at the ingestion boundary.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class SnapshotMessage(BaseModel):
    """
    Envelope for one raw sensor snapshot.

    Attributes:
        cells: Nested or flat list of raw cell values
        timestamp: UNIX timestamp from the bridge, if provided
    """

    cells: List[Any] = Field(
        ...,
        description="Raw cell values, nested rows or a flat list",
    )

    timestamp: Optional[float] = Field(
        default=None,
        gt=0,
        description="UNIX timestamp in seconds when the snapshot was taken",
    )

    class Config:
        """Pydantic model configuration."""

        json_schema_extra = {
            "example": {
                "cells": [[0, 0, 1], [0, 12, 3], [0, 1, 0]],
                "timestamp": 1707321234.567,
            }
        }
