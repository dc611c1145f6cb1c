"""
Tests for the combination enumerator.
"""

import math

import pytest

from fmgen.combinations import combinations


class TestCombinations:
    """Test k-subset enumeration."""

    def test_lexicographic_order(self):
        """Should enumerate index subsets in lexicographic order."""
        assert list(combinations(4, 2)) == [
            [0, 1], [0, 2], [0, 3], [1, 2], [1, 3], [2, 3],
        ]

    def test_full_subset(self):
        """k == n yields the single full subset."""
        assert list(combinations(3, 3)) == [[0, 1, 2]]

    def test_empty_subset(self):
        """k == 0 yields exactly one empty combination."""
        assert list(combinations(3, 0)) == [[]]
        assert list(combinations(0, 0)) == [[]]

    def test_count_matches_binomial(self):
        for n in range(7):
            for k in range(n + 1):
                assert len(list(combinations(n, k))) == math.comb(n, k)

    def test_restartable(self):
        """Calling again restarts the enumeration from the beginning."""
        first = list(combinations(5, 3))
        second = list(combinations(5, 3))
        assert first == second
        assert len(first) == 10

    def test_lazy(self):
        """Should not materialize every subset up front."""
        gen = combinations(30, 15)
        assert next(gen) == list(range(15))

    def test_invalid_arguments(self):
        """Out-of-range arguments are rejected on the call."""
        with pytest.raises(ValueError):
            combinations(-1, 0)
        with pytest.raises(ValueError):
            combinations(3, 4)
        with pytest.raises(ValueError):
            combinations(3, -1)
