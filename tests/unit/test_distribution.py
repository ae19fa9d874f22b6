"""
Unit tests for prize distribution parsing and payout math
"""

import pytest

from tourneyhub.core.errors import InvalidInput
from tourneyhub.services.distribution import compute_prizes, parse_distribution


class TestParseDistribution:
    """Distribution string parsing"""

    def test_default_split(self):
        assert parse_distribution("60-30-10") == [60, 30, 10]

    def test_spaces_are_ignored(self):
        assert parse_distribution(" 50 - 50 ") == [50, 50]

    def test_single_winner(self):
        assert parse_distribution("100") == [100]

    def test_percentages_need_not_sum_to_100(self):
        assert parse_distribution("3-2-1") == [3, 2, 1]

    @pytest.mark.parametrize("value", ["", "   ", "60-30-", "sixty-30-10", "60--10", "-60-40", "60-30-10.5"])
    def test_malformed_strings_rejected(self, value):
        with pytest.raises(InvalidInput):
            parse_distribution(value)

    def test_all_zero_rejected(self):
        with pytest.raises(InvalidInput):
            parse_distribution("0-0-0")


class TestComputePrizes:
    """Payout amounts from the locked prize"""

    def test_exact_split(self):
        assert compute_prizes(3000, [60, 30, 10]) == [1800, 900, 300]

    def test_amounts_are_floored(self):
        prizes = compute_prizes(1001, [60, 30, 10])
        assert prizes == [600, 300, 100]
        assert sum(prizes) <= 1001

    def test_relative_weights(self):
        assert compute_prizes(600, [3, 2, 1]) == [300, 200, 100]

    def test_zero_weight_position_gets_nothing(self):
        assert compute_prizes(1000, [100, 0]) == [1000, 0]

    def test_total_never_exceeds_locked(self):
        for locked in (1, 7, 999, 1000, 123457):
            assert sum(compute_prizes(locked, [33, 33, 34])) <= locked
