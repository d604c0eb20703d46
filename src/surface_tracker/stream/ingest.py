"""
Ingestion Boundary
==================

Parses and validates raw sensor messages before they reach the tracker.

This module provides:
    - SnapshotValidator: Turns raw messages into Snapshots or rejections
    - IngestionStats: Explicit counters owned by one validator instance
    - IngestResult: Accepted snapshot OR rejection reason

Validation Order:
    1. JSON parse (text/bytes input)
    2. Envelope check (bare matrix or {"cells": ..., "timestamp": ...})
    3. Cell count == height × width      → SHAPE_MISMATCH
    4. Numeric cells, finite total weight → INVALID_WEIGHT

Design Rules:
    - A rejected sample never touches tracker state
    - Rejections are logged and counted, never raised to the caller
    - Sequence numbers are assigned to accepted snapshots only
"""

import json
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import ValidationError

from surface_tracker.exceptions import InvalidWeightError, ShapeMismatchError
from surface_tracker.models.input import SnapshotMessage
from surface_tracker.stream.snapshot import Snapshot
from surface_tracker.tracking.reading import GridReading, GridShape


logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    """Why a raw message was rejected."""

    PARSE_ERROR = "PARSE_ERROR"
    SHAPE_MISMATCH = "SHAPE_MISMATCH"
    INVALID_WEIGHT = "INVALID_WEIGHT"


class IngestionStats:
    """Counters for ingestion observability."""

    __slots__ = (
        "received",
        "accepted",
        "parse_errors",
        "shape_rejects",
        "weight_rejects",
    )

    def __init__(self) -> None:
        self.received: int = 0
        self.accepted: int = 0
        self.parse_errors: int = 0
        self.shape_rejects: int = 0
        self.weight_rejects: int = 0

    @property
    def rejected(self) -> int:
        """Total rejected messages."""
        return self.parse_errors + self.shape_rejects + self.weight_rejects

    def to_dict(self) -> dict:
        """Export stats as dict."""
        return {
            "received": self.received,
            "accepted": self.accepted,
            "rejected": self.rejected,
            "parse_errors": self.parse_errors,
            "shape_rejects": self.shape_rejects,
            "weight_rejects": self.weight_rejects,
        }


@dataclass(frozen=True)
class IngestResult:
    """
    Outcome of validating one raw message.

    Exactly one of `snapshot` / `reason` is set.
    """

    snapshot: Optional[Snapshot] = None
    reason: Optional[RejectReason] = None
    detail: str = ""

    @property
    def accepted(self) -> bool:
        """Whether the message produced a snapshot."""
        return self.snapshot is not None


class SnapshotValidator:
    """
    Validates raw sensor messages against the fixed grid shape.

    Attributes:
        shape: Configured grid shape
        stats: Ingestion counters for this validator

    Example:
        validator = SnapshotValidator(GridShape(8, 8))
        result = validator.validate(raw_message)
        if result.accepted:
            await buffer.put(result.snapshot)
    """

    def __init__(
        self,
        shape: GridShape,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize validator.

        Args:
            shape: Fixed grid shape every reading must match
            clock: Timestamp source for messages without a timestamp
        """
        self.shape = shape
        self.stats = IngestionStats()
        self._clock = clock
        self._sequence: int = 0

    def validate(self, raw: Any) -> IngestResult:
        """
        Validate one raw message.

        Args:
            raw: JSON text/bytes, a matrix (list) or an envelope (dict)

        Returns:
            IngestResult with a Snapshot, or the rejection reason
        """
        self.stats.received += 1

        try:
            message = self._parse(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError, TypeError) as e:
            self.stats.parse_errors += 1
            logger.warning(f"Rejected snapshot (parse error): {e}")
            return IngestResult(reason=RejectReason.PARSE_ERROR, detail=str(e))

        try:
            reading = GridReading.from_matrix(message.cells, self.shape)
        except ShapeMismatchError as e:
            self.stats.shape_rejects += 1
            logger.warning(f"Rejected snapshot (shape mismatch): {e}")
            return IngestResult(reason=RejectReason.SHAPE_MISMATCH, detail=str(e))
        except InvalidWeightError as e:
            self.stats.weight_rejects += 1
            logger.warning(f"Rejected snapshot (invalid weight): {e}")
            return IngestResult(reason=RejectReason.INVALID_WEIGHT, detail=str(e))

        self.stats.accepted += 1
        self._sequence += 1

        timestamp = message.timestamp if message.timestamp is not None else self._clock()
        return IngestResult(
            snapshot=Snapshot(
                sequence=self._sequence,
                timestamp=timestamp,
                reading=reading,
            )
        )

    def _parse(self, raw: Any) -> SnapshotMessage:
        """Decode raw input into a SnapshotMessage envelope."""
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if isinstance(raw, str):
            raw = json.loads(raw)

        if isinstance(raw, list):
            return SnapshotMessage(cells=raw)
        if isinstance(raw, dict):
            return SnapshotMessage.model_validate(raw)

        raise TypeError(f"Unsupported snapshot payload type: {type(raw).__name__}")
