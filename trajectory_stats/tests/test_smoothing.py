"""
Tests for the moving averages.
"""

import numpy as np
import pytest

import sys
sys.path.insert(0, str(__file__).rsplit('/', 2)[0])

from trajectory_stats.smoothing import moving_average, trailing_average


class TestMovingAverage:
    """Tests for the boundary-truncated symmetric moving average."""

    def test_window_three(self):
        """Edges average over the neighbours that exist."""
        result = moving_average(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 3)
        assert result == pytest.approx([1.5, 2.0, 3.0, 4.0, 4.5])

    def test_window_five_no_zero_padding(self):
        """A spike is spread without pulling the edges toward zero."""
        result = moving_average(np.array([0.0, 0.0, 10.0, 0.0, 0.0]), 5)
        assert result == pytest.approx([10 / 3, 2.5, 2.0, 2.5, 10 / 3])

    def test_constant_series_unchanged(self):
        """Smoothing a constant series returns the same constant."""
        values = np.full(12, 7.5)
        assert moving_average(values, 5) == pytest.approx(values)

    def test_series_shorter_than_window(self):
        """Output keeps the input length when n < window."""
        result = moving_average(np.array([1.0, 2.0]), 5)
        assert result == pytest.approx([1.5, 1.5])

    def test_window_one_is_identity(self):
        """Window 1 returns the input values."""
        values = np.array([3.0, -1.0, 4.0])
        assert moving_average(values, 1) == pytest.approx(values)

    def test_empty(self):
        """Empty input gives empty output."""
        assert len(moving_average(np.array([]), 5)) == 0

    def test_nan_skipped_and_preserved(self):
        """Missing values are left out of neighbourhoods and stay missing."""
        result = moving_average(np.array([1.0, np.nan, 3.0, 5.0]), 3)

        assert result[0] == pytest.approx(1.0)
        assert np.isnan(result[1])
        assert result[2] == pytest.approx(4.0)
        assert result[3] == pytest.approx(4.0)

    @pytest.mark.parametrize("window", [0, 2, 4, -3])
    def test_invalid_window(self, window):
        """Windows must be positive odd integers."""
        with pytest.raises(ValueError):
            moving_average(np.array([1.0, 2.0, 3.0]), window)


class TestTrailingAverage:
    """Tests for the trailing average used by the moving gate."""

    def test_trailing(self):
        """Each value averages itself and up to window - 1 predecessors."""
        result = trailing_average(np.array([3.0, 6.0, 9.0, 12.0]), 2)
        assert result == pytest.approx([3.0, 4.5, 7.5, 10.5])

    def test_window_longer_than_series(self):
        """Early values average over what exists so far."""
        result = trailing_average(np.array([2.0, 4.0, 9.0]), 5)
        assert result == pytest.approx([2.0, 3.0, 5.0])

    def test_empty(self):
        assert len(trailing_average(np.array([]), 3)) == 0

    def test_invalid_window(self):
        """Window must be positive."""
        with pytest.raises(ValueError):
            trailing_average(np.array([1.0]), 0)
