"""
Grid Reading
============

Immutable snapshot of the load-cell matrix plus its scalar summaries.

A GridReading wraps a read-only 2D numpy array. Every transform
(averaging, differencing) returns a new instance; nothing mutates
an existing reading.

Derived at construction:
    weight = sum of all cells
    peak   = maximum cell value

Design Rules:
    - All readings in one process share the same GridShape
    - Binary operations between readings of different shapes raise
      ShapeMismatchError
    - Signed cells are allowed internally (differences); ingestion
      validates shape and weight via from_matrix()
"""

import math
from dataclasses import dataclass
from typing import Any, List, Sequence

import numpy as np

from surface_tracker.exceptions import InvalidWeightError, ShapeMismatchError


# Bounded sensor range used when clamping baseline-subtracted readings
CELL_MIN = 0.0
CELL_MAX = 255.0


@dataclass(frozen=True, slots=True)
class GridShape:
    """
    Fixed sensor matrix dimensions.

    Attributes:
        height: Number of rows
        width: Number of columns
    """

    height: int
    width: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.height < 1 or self.width < 1:
            raise ValueError("grid dimensions must be positive")

    @property
    def cell_count(self) -> int:
        """Total number of cells (height × width)."""
        return self.height * self.width


def _flatten(matrix: Any) -> List[Any]:
    """Flatten a nested or flat matrix into a list of cell values."""
    if isinstance(matrix, np.ndarray):
        return matrix.ravel().tolist()

    values: List[Any] = []
    for row in matrix:
        if isinstance(row, (list, tuple, np.ndarray)):
            values.extend(row)
        else:
            values.append(row)
    return values


class GridReading:
    """
    Immutable snapshot of the sensor matrix.

    Attributes:
        cells: Read-only 2D float array of cell values
        weight: Sum of all cells
        peak: Maximum cell value

    Example:
        shape = GridShape(height=2, width=2)
        reading = GridReading.from_matrix([[0, 10], [5, 0]], shape)
        print(reading.weight)  # 15.0
    """

    __slots__ = ("_cells", "_weight", "_peak")

    def __init__(self, cells: Sequence) -> None:
        array = np.array(cells, dtype=np.float64)
        if array.ndim != 2:
            raise ShapeMismatchError(
                f"Expected a 2D matrix, got {array.ndim} dimension(s)"
            )
        array.flags.writeable = False

        self._cells = array
        self._weight = float(array.sum())
        self._peak = float(array.max())

    @classmethod
    def from_matrix(cls, matrix: Any, shape: GridShape) -> "GridReading":
        """
        Build a reading from raw sensor data.

        Accepts nested rows or a flat list. Only the total cell count is
        checked against the grid shape; cells are laid out row-major and
        must be numeric scalars (no deeper nesting, no strings).

        Args:
            matrix: Nested or flat sequence of numeric cell values
            shape: Configured grid shape

        Returns:
            Validated GridReading

        Raises:
            ShapeMismatchError: Cell count != height × width
            InvalidWeightError: Non-numeric cells or non-finite weight
        """
        try:
            values = _flatten(matrix)
        except TypeError as e:
            raise ShapeMismatchError(f"Reading is not a matrix: {e}") from e

        if len(values) != shape.cell_count:
            raise ShapeMismatchError(
                f"Expected {shape.cell_count} cells "
                f"({shape.height}x{shape.width}), got {len(values)}"
            )

        for value in values:
            if isinstance(value, (list, tuple, np.ndarray)):
                raise ShapeMismatchError("Reading is nested deeper than rows of cells")
            if isinstance(value, (str, bytes)):
                raise InvalidWeightError(f"Non-numeric cell value: {value!r}")

        try:
            array = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidWeightError(f"Non-numeric cell value: {e}") from e

        if array.ndim != 1 or array.size != shape.cell_count:
            raise ShapeMismatchError(
                f"Expected {shape.cell_count} scalar cells, got array of shape {array.shape}"
            )

        reading = cls(array.reshape(shape.height, shape.width))
        if not math.isfinite(reading.weight):
            raise InvalidWeightError(f"Reading weight is not finite: {reading.weight}")

        return reading

    @classmethod
    def zeros(cls, shape: GridShape) -> "GridReading":
        """Create an all-zero reading (empty surface)."""
        return cls(np.zeros((shape.height, shape.width)))

    @property
    def cells(self) -> np.ndarray:
        """Read-only cell array."""
        return self._cells

    @property
    def weight(self) -> float:
        """Sum of all cells."""
        return self._weight

    @property
    def peak(self) -> float:
        """Maximum cell value."""
        return self._peak

    @property
    def shape(self) -> GridShape:
        """Grid dimensions of this reading."""
        height, width = self._cells.shape
        return GridShape(height=height, width=width)

    def _check_shape(self, other: "GridReading") -> None:
        if self._cells.shape != other._cells.shape:
            raise ShapeMismatchError(
                f"Reading shapes differ: {self._cells.shape} vs {other._cells.shape}"
            )

    def averaged_with(self, other: "GridReading", sample_index: int) -> "GridReading":
        """
        Fold a new sample into this running mean.

        Treats self as the mean over `sample_index` prior samples:
            new = (other + sample_index * self) / (sample_index + 1)

        Args:
            other: New sample
            sample_index: Number of samples already in the mean

        Returns:
            New GridReading holding the updated mean
        """
        self._check_shape(other)
        cells = (other._cells + sample_index * self._cells) / (sample_index + 1)
        return GridReading(cells)

    def difference_from(self, other: "GridReading", clamp: bool = False) -> "GridReading":
        """
        Elementwise difference (self - other).

        Args:
            other: Reading to subtract
            clamp: Clamp each cell to [CELL_MIN, CELL_MAX]

        Returns:
            New GridReading with the difference
        """
        self._check_shape(other)
        diff = self._cells - other._cells
        if clamp:
            diff = np.clip(diff, CELL_MIN, CELL_MAX)
        return GridReading(diff)

    def distance_to(self, other: "GridReading", use_absolute_sum: bool = False) -> float:
        """
        Sum of absolute elementwise combinations.

        With use_absolute_sum=False this is the L1 distance
        sum(|other - self|). With use_absolute_sum=True the cells are
        added instead: sum(|other + self|), which scores how well a
        positive signature cancels a negative one.

        Args:
            other: Reading to compare against
            use_absolute_sum: Add instead of subtract before abs

        Returns:
            Scalar score
        """
        self._check_shape(other)
        if use_absolute_sum:
            combined = other._cells + self._cells
        else:
            combined = other._cells - self._cells
        return float(np.abs(combined).sum())

    def to_list(self) -> List[List[float]]:
        """Export cells as nested lists for serialization."""
        return self._cells.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridReading):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        height, width = self._cells.shape
        return (
            f"GridReading({height}x{width}, "
            f"weight={self._weight:.2f}, peak={self._peak:.2f})"
        )
