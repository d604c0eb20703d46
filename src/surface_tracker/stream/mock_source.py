"""
Mock Sensor Source
==================

Deterministic synthetic surface for running without hardware.

The mock simulates:
    - A constant ambient load on every cell plus small seeded noise
    - A square object of configured weight placed on the surface after
      `place_after` readings and lifted again at `remove_after`
    - The cycle repeats every `remove_after` readings

Raw matrices go through the same SnapshotValidator as live data, so the
ingestion counters and buffer behave exactly as in production.
"""

import asyncio
import logging
from typing import List

import numpy as np

from surface_tracker.stream.buffer import ReadingBuffer
from surface_tracker.stream.ingest import SnapshotValidator


logger = logging.getLogger(__name__)


class MockSensorSource:
    """
    Seeded synthetic snapshot generator.

    Attributes:
        validator: Ingestion boundary (owns the grid shape)
        buffer: ReadingBuffer to push snapshots into
        interval_seconds: Delay between snapshots
    """

    def __init__(
        self,
        validator: SnapshotValidator,
        buffer: ReadingBuffer,
        interval_seconds: float = 0.05,
        ambient_level: float = 10.0,
        noise_amplitude: float = 1.0,
        object_weight: float = 500.0,
        place_after: int = 150,
        remove_after: int = 300,
        seed: int = 7,
    ) -> None:
        """
        Initialize mock source.

        Args:
            validator: Validator for generated matrices
            buffer: Buffer to push accepted snapshots into
            interval_seconds: Seconds between snapshots
            ambient_level: Constant per-cell ambient load
            noise_amplitude: Max per-cell uniform noise
            object_weight: Total weight of the simulated object
            place_after: Reading index at which the object appears
            remove_after: Reading index at which it disappears (cycle length)
            seed: RNG seed for reproducible noise
        """
        if remove_after <= place_after:
            raise ValueError("remove_after must be greater than place_after")

        self.validator = validator
        self.buffer = buffer
        self.interval_seconds = interval_seconds
        self.ambient_level = ambient_level
        self.noise_amplitude = noise_amplitude
        self.object_weight = object_weight
        self.place_after = place_after
        self.remove_after = remove_after

        self._rng = np.random.default_rng(seed)
        self._index: int = 0
        self._running: bool = False

        shape = validator.shape
        self._block = (min(2, shape.height), min(2, shape.width))
        self._origin = (
            (shape.height - self._block[0]) // 2,
            (shape.width - self._block[1]) // 2,
        )

        logger.info(
            f"MockSensorSource initialized: grid={shape.height}x{shape.width}, "
            f"object_weight={object_weight}, cycle={remove_after} readings"
        )

    def object_present(self, index: int) -> bool:
        """Whether the simulated object is on the surface at `index`."""
        return self.place_after <= index % self.remove_after

    def generate(self, index: int) -> List[List[float]]:
        """
        Generate the raw matrix for reading `index`.

        Args:
            index: Reading index (drives object placement)

        Returns:
            Nested list of cell values
        """
        shape = self.validator.shape
        cells = np.full((shape.height, shape.width), self.ambient_level)
        cells += self._rng.uniform(0.0, self.noise_amplitude, size=cells.shape)

        if self.object_present(index):
            rows, cols = self._block
            r0, c0 = self._origin
            cells[r0:r0 + rows, c0:c0 + cols] += self.object_weight / (rows * cols)

        return np.round(cells, 2).tolist()

    async def run(self) -> None:
        """Push generated snapshots until stop() is called."""
        self._running = True
        logger.info("MockSensorSource started")

        while self._running:
            result = self.validator.validate(self.generate(self._index))
            if result.accepted:
                await self.buffer.put(result.snapshot)
            self._index += 1
            await asyncio.sleep(self.interval_seconds)

        logger.info("MockSensorSource stopped")

    async def stop(self) -> None:
        """Stop generating snapshots."""
        self._running = False
