"""
Rolling Average Tests
=====================
"""

import pytest

from surface_tracker.tracking import GridReading, RollingAverage


class TestRollingAverage:
    """Tests for windowed incremental averaging."""

    def test_seeded_with_first_reading(self):
        window = RollingAverage(GridReading([[3.0]]), window=3)

        assert window.count == 1
        assert not window.is_complete
        assert window.average.to_list() == [[3.0]]

    def test_reports_average_when_window_fills(self):
        window = RollingAverage(GridReading([[0.0]]), window=3)

        assert window.accept(GridReading([[3.0]])) is None
        assert window.count == 2

        result = window.accept(GridReading([[6.0]]))

        assert result is not None
        assert result.to_list() == [[3.0]]
        assert window.count == 3
        assert window.is_complete

    def test_full_window_does_not_merge(self):
        window = RollingAverage(GridReading([[0.0]]), window=2)
        result = window.accept(GridReading([[4.0]]))

        again = window.accept(GridReading([[100.0]]))

        assert again == result
        assert window.count == 2

    def test_window_of_one_is_complete_on_seed(self):
        window = RollingAverage(GridReading([[7.0]]), window=1)

        assert window.is_complete
        assert window.accept(GridReading([[1.0]])).to_list() == [[7.0]]

    def test_count_increases_by_one_per_sample(self):
        window = RollingAverage(GridReading([[1.0]]), window=10)

        for expected in range(2, 10):
            assert window.accept(GridReading([[1.0]])) is None
            assert window.count == expected

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            RollingAverage(GridReading([[1.0]]), window=0)
