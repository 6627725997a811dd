"""Tests for the built-in interval strategies."""

import pytest

from repass import intervals


class TestStrategies:
    """Tests for delay values."""

    def test_no_delay(self):
        assert [intervals.no_delay(i) for i in (1, 2, 10)] == [0.0, 0.0, 0.0]

    def test_constant(self):
        strategy = intervals.constant(0.25)
        assert [strategy(i) for i in (1, 2, 3)] == [0.25, 0.25, 0.25]

    def test_linear(self):
        """Delay grows by step after each pass."""
        strategy = intervals.linear(10)
        assert [strategy(i) for i in (1, 2, 3)] == [10, 20, 30]

    def test_linear_with_start(self):
        strategy = intervals.linear(1, start=5)
        assert [strategy(i) for i in (1, 2)] == [6, 7]

    def test_exponential(self):
        """Delay doubles after each pass by default."""
        strategy = intervals.exponential(0.5)
        assert [strategy(i) for i in (1, 2, 3, 4)] == [0.5, 1.0, 2.0, 4.0]

    def test_exponential_cap(self):
        strategy = intervals.exponential(1, factor=3, maximum=5)
        assert [strategy(i) for i in (1, 2, 3, 4)] == [1, 3, 5, 5]


class TestValidation:
    """Tests for rejected arguments."""

    def test_negative_constant(self):
        with pytest.raises(ValueError):
            intervals.constant(-1)

    def test_negative_linear(self):
        with pytest.raises(ValueError):
            intervals.linear(-0.1)

    def test_exponential_shrinking_factor(self):
        with pytest.raises(ValueError):
            intervals.exponential(1, factor=0.5)

    def test_exponential_negative_maximum(self):
        with pytest.raises(ValueError):
            intervals.exponential(1, maximum=-1)
