"""
Rolling Average
===============

Fixed-length incremental-mean accumulator over GridReadings.

Used twice by the tracker with different window lengths:
    - Calibration: learns the empty-surface baseline (100 samples)
    - Transient test: averages the post-change surface (20 samples)

The window is seeded by its first reading (count = 1). Each accepted
sample is folded in with the standard incremental-mean update using the
pre-increment count as the index. When the count reaches the window
length the finalized average is reported and the window is closed;
callers discard it and build a new one when needed.
"""

import logging
from typing import Optional

from surface_tracker.tracking.reading import GridReading


logger = logging.getLogger(__name__)


class RollingAverage:
    """
    Windowed incremental mean of GridReadings.

    Attributes:
        window: Number of samples to average
        count: Samples folded in so far (starts at 1)

    Example:
        window = RollingAverage(first_reading, window=20)
        for reading in readings:
            result = window.accept(reading)
            if result is not None:
                break
    """

    def __init__(self, initial: GridReading, window: int = 20) -> None:
        """
        Initialize the window.

        Args:
            initial: Seed reading (counts as the first sample)
            window: Target number of samples, >= 1
        """
        if window < 1:
            raise ValueError("window must be >= 1")

        self._average = initial
        self._count = 1
        self._window = window

    @property
    def window(self) -> int:
        """Target window length."""
        return self._window

    @property
    def count(self) -> int:
        """Number of samples averaged so far."""
        return self._count

    @property
    def is_complete(self) -> bool:
        """Whether the window has collected all its samples."""
        return self._count >= self._window

    @property
    def average(self) -> GridReading:
        """Current (possibly partial) average."""
        return self._average

    def accept(self, sample: GridReading) -> Optional[GridReading]:
        """
        Fold a sample into the window.

        Args:
            sample: Next reading

        Returns:
            The finalized average once the window is full, else None.
            A sample offered to an already-full window is not merged.
        """
        if self._count < self._window:
            self._average = self._average.averaged_with(sample, self._count)
            self._count += 1
            logger.debug(f"RollingAverage {self._count}/{self._window}")

        if self.is_complete:
            return self._average
        return None
