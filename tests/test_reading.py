"""
Grid Reading Tests
==================
"""

import numpy as np
import pytest

from surface_tracker.exceptions import InvalidWeightError, ShapeMismatchError
from surface_tracker.tracking import GridReading, GridShape


class TestFromMatrix:
    """Tests for validated construction."""

    def test_nested_matrix(self):
        shape = GridShape(height=2, width=3)
        reading = GridReading.from_matrix([[0, 1, 2], [3, 4, 5]], shape)

        assert reading.weight == 15.0
        assert reading.peak == 5.0
        assert reading.shape == shape

    def test_flat_list_is_row_major(self):
        shape = GridShape(height=2, width=2)
        reading = GridReading.from_matrix([1, 2, 3, 4], shape)

        assert reading.to_list() == [[1.0, 2.0], [3.0, 4.0]]

    def test_ragged_rows_with_correct_total(self):
        """Only the flattened cell count is checked."""
        shape = GridShape(height=2, width=2)
        reading = GridReading.from_matrix([[1, 2, 3], [4]], shape)

        assert reading.to_list() == [[1.0, 2.0], [3.0, 4.0]]

    def test_wrong_cell_count(self):
        shape = GridShape(height=2, width=2)

        with pytest.raises(ShapeMismatchError):
            GridReading.from_matrix([[1, 2], [3]], shape)

    def test_nan_cell_is_invalid_weight(self):
        shape = GridShape(height=1, width=2)

        with pytest.raises(InvalidWeightError):
            GridReading.from_matrix([1.0, float("nan")], shape)

    def test_non_numeric_cell_is_invalid_weight(self):
        shape = GridShape(height=1, width=2)

        with pytest.raises(InvalidWeightError):
            GridReading.from_matrix([1.0, "heavy"], shape)

    def test_extra_nesting_is_shape_mismatch(self):
        shape = GridShape(height=1, width=2)

        with pytest.raises(ShapeMismatchError):
            GridReading.from_matrix([[[1, 2]], [[3, 4]]], shape)

    def test_numeric_string_cell_is_invalid_weight(self):
        shape = GridShape(height=2, width=2)

        with pytest.raises(InvalidWeightError):
            GridReading.from_matrix(["1", "2", "3", "4"], shape)

    def test_shape_mismatch_is_value_error(self):
        assert issubclass(ShapeMismatchError, ValueError)
        assert issubclass(InvalidWeightError, ValueError)


class TestReadingSummaries:
    """Tests for derived scalars and immutability."""

    def test_weight_is_sum_of_cells(self, make_reading):
        reading = make_reading(2.0, blocks=[(slice(0, 1), slice(0, 1), 5.0)])

        assert reading.weight == pytest.approx(16 * 2.0 + 5.0)
        assert reading.weight >= 0
        assert reading.peak == 7.0

    def test_cells_are_read_only(self, make_reading):
        reading = make_reading(1.0)

        with pytest.raises(ValueError):
            reading.cells[0, 0] = 99.0

    def test_source_array_is_copied(self):
        source = np.zeros((2, 2))
        reading = GridReading(source)
        source[0, 0] = 50.0

        assert reading.weight == 0.0


class TestAveraging:
    """Tests for the incremental-mean update."""

    def test_incremental_mean_formula(self):
        mean = GridReading([[0.0, 2.0]])
        sample = GridReading([[4.0, 4.0]])

        result = mean.averaged_with(sample, 1)

        assert result.to_list() == [[2.0, 3.0]]

    def test_constant_reading_is_fixed_point(self, make_reading):
        reading = make_reading(4.0, blocks=[(slice(1, 2), slice(2, 4), 6.0)])

        average = reading
        for index in range(1, 50):
            average = average.averaged_with(reading, index)

        np.testing.assert_allclose(average.cells, reading.cells)

    def test_averaging_returns_new_instance(self, make_reading):
        reading = make_reading(1.0)
        result = reading.averaged_with(make_reading(3.0), 1)

        assert result is not reading
        assert reading.weight == 16.0


class TestDifference:
    """Tests for elementwise difference."""

    def test_unclamped_preserves_sign(self):
        a = GridReading([[5.0, 1.0]])
        b = GridReading([[2.0, 4.0]])

        assert a.difference_from(b).to_list() == [[3.0, -3.0]]
        assert a.difference_from(b).weight == 0.0

    def test_clamped_to_sensor_range(self):
        a = GridReading([[300.0, 1.0, 50.0]])
        b = GridReading([[0.0, 6.0, 20.0]])

        assert a.difference_from(b, clamp=True).to_list() == [[255.0, 0.0, 30.0]]

    def test_difference_is_antisymmetric(self, make_reading):
        a = make_reading(3.0, blocks=[(slice(0, 2), slice(0, 2), 7.0)])
        b = make_reading(5.0)

        forward = a.difference_from(b)
        backward = b.difference_from(a)

        np.testing.assert_array_equal(forward.cells, -backward.cells)
        assert b.difference_from(backward) == a


class TestDistance:
    """Tests for the L1 score."""

    def test_l1_distance(self):
        a = GridReading([[1.0, 5.0]])
        b = GridReading([[4.0, 1.0]])

        assert a.distance_to(b) == 7.0
        assert b.distance_to(a) == 7.0

    def test_absolute_sum(self):
        positive = GridReading([[3.0, 2.0]])
        negative = GridReading([[-3.0, -1.0]])

        assert positive.distance_to(negative, use_absolute_sum=True) == 1.0

    def test_binary_ops_reject_shape_mismatch(self):
        a = GridReading(np.zeros((2, 2)))
        b = GridReading(np.zeros((2, 3)))

        with pytest.raises(ShapeMismatchError):
            a.averaged_with(b, 1)
        with pytest.raises(ShapeMismatchError):
            a.difference_from(b)
        with pytest.raises(ShapeMismatchError):
            a.distance_to(b)
