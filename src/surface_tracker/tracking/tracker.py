"""
Object Tracker
==============

Stateful controller that turns a stream of GridReadings into discrete
"object placed" / "object removed" events.

State Machine:
    CALIBRATING: Average the first `calibration_window` raw readings into
                 the baseline, then → STEADY.
    STEADY:      Normalize against the baseline (clamped). If the L1
                 distance to the steady-state average is below the
                 new-object threshold, fold the reading into the average.
                 Otherwise open a test window → TESTING.
    TESTING:     Feed readings into the test window. When it completes,
                 diff its average against the steady-state average
                 (signed). The window average becomes the new steady
                 state → STEADY, and:
                     net weight >  new_object_threshold    → new object
                     net weight < -delete_object_threshold → best-match removal
                     otherwise                             → absorbed as noise

Object Matching:
    Each candidate is scored with
        candidate.reading.distance_to(diff, use_absolute_sum=True)
    i.e. the candidate's positive signature added to the observed negative
    diff. The lowest score wins; ties resolve to the earliest-created
    object.

Concurrency:
    Single-threaded. observe() runs to completion and must not be called
    concurrently on one instance.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from surface_tracker.exceptions import ShapeMismatchError
from surface_tracker.models.state import EventKind, TrackerPhase
from surface_tracker.tracking.average import RollingAverage
from surface_tracker.tracking.reading import GridReading, GridShape
from surface_tracker.tracking.tracked_object import TrackedObject


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackerThresholds:
    """
    Thresholds and window lengths, fixed for the tracker's lifetime.
    """

    # Weight thresholds
    new_object_threshold: float = 140.0
    delete_object_threshold: float = 80.0

    # Window lengths (readings)
    calibration_window: int = 100
    test_window: int = 20

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.new_object_threshold < 0 or self.delete_object_threshold < 0:
            raise ValueError("thresholds must be non-negative")
        if self.calibration_window < 1 or self.test_window < 1:
            raise ValueError("windows must be >= 1")


@dataclass(frozen=True)
class TrackerEvent:
    """Lifecycle event produced by a single observe() call."""

    kind: EventKind
    obj: TrackedObject
    timestamp: float

    def __repr__(self) -> str:
        return f"TrackerEvent({self.kind.value}, {self.obj!r})"


@dataclass(frozen=True)
class TrackerUpdate:
    """
    Result of one observe() call.

    Attributes:
        reading: Normalized reading (raw reading while calibrating)
        objects: Snapshot of tracked objects after this reading
        event: Lifecycle event, if one fired
        phase: Tracker phase after this reading
    """

    reading: GridReading
    objects: Tuple[TrackedObject, ...]
    event: Optional[TrackerEvent]
    phase: TrackerPhase


class Tracker:
    """
    Object-tracking state machine over baseline-normalized readings.

    Owns the baseline, the steady-state average, the optional test
    window and the tracked-object set. Nothing outside may mutate them;
    consumers only see the snapshots returned by observe().

    Example:
        tracker = Tracker(GridShape(8, 8))
        for reading in readings:
            update = tracker.observe(reading)
            if update.event is not None:
                publish(update.event)
    """

    def __init__(
        self,
        shape: GridShape,
        thresholds: Optional[TrackerThresholds] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the tracker in the CALIBRATING phase.

        Args:
            shape: Fixed grid shape of every reading
            thresholds: Thresholds and windows (defaults if None)
            clock: Timestamp source for events and objects
        """
        self.shape = shape
        self.thresholds = thresholds or TrackerThresholds()
        self._clock = clock

        self._phase = TrackerPhase.CALIBRATING
        self._calibration: Optional[RollingAverage] = None
        self._baseline: Optional[GridReading] = None

        self._steady_average = GridReading.zeros(shape)
        self._cycle_count = 0
        self._test_window: Optional[RollingAverage] = None

        # Insertion-ordered; keyed by object_id
        self._objects: Dict[str, TrackedObject] = {}

        logger.info(
            f"Tracker initialized: grid={shape.height}x{shape.width}, "
            f"new_threshold={self.thresholds.new_object_threshold}, "
            f"delete_threshold={self.thresholds.delete_object_threshold}, "
            f"calibration={self.thresholds.calibration_window}, "
            f"test_window={self.thresholds.test_window}"
        )

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> TrackerPhase:
        """Current state machine phase."""
        return self._phase

    @property
    def baseline(self) -> Optional[GridReading]:
        """Calibrated baseline, or None while calibrating."""
        return self._baseline

    @property
    def steady_average(self) -> GridReading:
        """Current steady-state average (normalized units)."""
        return self._steady_average

    @property
    def objects(self) -> Tuple[TrackedObject, ...]:
        """Snapshot of currently tracked objects."""
        return tuple(self._objects.values())

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    def observe(self, raw: GridReading) -> TrackerUpdate:
        """
        Process one raw reading.

        Args:
            raw: Validated reading with the tracker's grid shape

        Returns:
            TrackerUpdate with the normalized reading, an object snapshot
            and at most one lifecycle event

        Raises:
            ShapeMismatchError: Reading shape differs from the tracker's
        """
        if raw.shape != self.shape:
            raise ShapeMismatchError(
                f"Reading shape {raw.shape} does not match tracker shape {self.shape}"
            )

        if self._phase == TrackerPhase.CALIBRATING:
            self._calibrate(raw)
            return self._snapshot(raw, None)

        reading = raw.difference_from(self._baseline, clamp=True)

        if self._phase == TrackerPhase.STEADY:
            event = self._observe_steady(reading)
        else:
            event = self._observe_testing(reading)

        return self._snapshot(reading, event)

    def _snapshot(
        self,
        reading: GridReading,
        event: Optional[TrackerEvent],
    ) -> TrackerUpdate:
        return TrackerUpdate(
            reading=reading,
            objects=self.objects,
            event=event,
            phase=self._phase,
        )

    def _calibrate(self, raw: GridReading) -> None:
        """Accumulate raw readings into the baseline."""
        if self._calibration is None:
            self._calibration = RollingAverage(raw, self.thresholds.calibration_window)
            result = self._calibration.average if self._calibration.is_complete else None
        else:
            result = self._calibration.accept(raw)

        if result is None:
            return

        self._baseline = result
        self._calibration = None
        self._phase = TrackerPhase.STEADY
        logger.info(
            f"Calibration complete: baseline weight={result.weight:.2f}, "
            f"peak={result.peak:.2f}"
        )

    def _observe_steady(self, reading: GridReading) -> Optional[TrackerEvent]:
        """Fold drift into the steady state, or open a test window."""
        delta = self._steady_average.distance_to(reading)

        if delta < self.thresholds.new_object_threshold:
            self._cycle_count += 1
            self._steady_average = self._steady_average.averaged_with(
                reading, self._cycle_count
            )
            return None

        logger.info(f"Transient started: delta={delta:.2f}")
        self._test_window = RollingAverage(reading, self.thresholds.test_window)
        self._phase = TrackerPhase.TESTING

        # A one-reading window is complete on its seed
        if self._test_window.is_complete:
            return self._resolve_transient(self._test_window.average)
        return None

    def _observe_testing(self, reading: GridReading) -> Optional[TrackerEvent]:
        """Feed the test window; resolve the transient when it completes."""
        result = self._test_window.accept(reading)
        if result is None:
            return None
        return self._resolve_transient(result)

    def _resolve_transient(self, test_result: GridReading) -> Optional[TrackerEvent]:
        """Adopt the new steady state and classify the change."""
        diff = test_result.difference_from(self._steady_average)
        magnitude = diff.weight

        self._cycle_count = 1
        self._steady_average = test_result
        self._test_window = None
        self._phase = TrackerPhase.STEADY

        if magnitude > self.thresholds.new_object_threshold:
            return self._add_object(diff)

        if magnitude < -self.thresholds.delete_object_threshold:
            return self._remove_best_match(diff)

        logger.info(f"Transient absorbed as noise: net weight={magnitude:+.2f}")
        return None

    def _add_object(self, diff: GridReading) -> TrackerEvent:
        now = self._clock()
        obj = TrackedObject(diff, created_at=now)
        self._objects[obj.object_id] = obj

        logger.info(
            f"New object {obj.object_id[:8]}: weight={obj.weight:.2f}, "
            f"tracked={len(self._objects)}"
        )
        return TrackerEvent(kind=EventKind.NEW_OBJECT, obj=obj, timestamp=now)

    def _remove_best_match(self, diff: GridReading) -> Optional[TrackerEvent]:
        if not self._objects:
            logger.warning(
                f"Removal detected (net weight={diff.weight:+.2f}) "
                f"but no objects are tracked"
            )
            return None

        scores = {
            object_id: obj.reading.distance_to(diff, use_absolute_sum=True)
            for object_id, obj in self._objects.items()
        }
        best_id = min(scores, key=scores.get)
        obj = self._objects.pop(best_id)

        logger.info(
            f"Deleted object {best_id[:8]}: weight={obj.weight:.2f}, "
            f"score={scores[best_id]:.2f}, tracked={len(self._objects)}"
        )
        return TrackerEvent(
            kind=EventKind.DELETE_OBJECT,
            obj=obj,
            timestamp=self._clock(),
        )

    def get_metrics(self) -> dict:
        """Get tracker metrics for observability."""
        return {
            "phase": self._phase.value,
            "calibrated": self._baseline is not None,
            "tracked_objects": len(self._objects),
            "steady_weight": round(self._steady_average.weight, 4),
            "test_window_progress": (
                self._test_window.count if self._test_window else None
            ),
        }
