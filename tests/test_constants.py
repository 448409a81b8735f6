"""
Tests for unit conversion and the staking reward table.
"""

from decimal import Decimal

import pytest

from core.constants import (
    SECONDS_PER_DAY,
    STAKING_APY,
    apy_for_duration,
    format_ether,
    format_units,
    parse_ether,
    parse_units,
    staking_reward,
)


class TestUnits:

    def test_parse_whole_tokens(self):
        assert parse_units("1000000", 18) == 10 ** 24

    def test_parse_fraction(self):
        assert parse_units("1000.5", 18) == 1000 * 10 ** 18 + 5 * 10 ** 17

    def test_parse_truncates_extra_digits(self):
        assert parse_units("0.1234567", 6) == 123456

    def test_parse_accepts_decimal(self):
        assert parse_units(Decimal("2.5"), 2) == 250

    def test_parse_ether_smallest_unit(self):
        assert parse_ether("0.000000000000000001") == 1

    def test_format_strips_trailing_zeros(self):
        assert format_units(1500 * 10 ** 15, 18) == "1.5"
        assert format_units(10 ** 24, 18) == "1000000"

    def test_format_zero(self):
        assert format_units(0, 18) == "0"
        assert format_ether(0) == "0"

    def test_format_keeps_full_precision(self):
        assert format_ether(10 ** 24 + 1) == "1000000.000000000000000001"


class TestRewardTable:

    def test_tiers(self):
        assert STAKING_APY == {30: 5, 90: 8, 180: 12, 365: 20}

    @pytest.mark.parametrize("days,apy", [(30, 5), (90, 8), (180, 12), (365, 20)])
    def test_listed_durations(self, days, apy):
        assert apy_for_duration(days * SECONDS_PER_DAY) == apy

    @pytest.mark.parametrize("seconds", [0, -SECONDS_PER_DAY, 7 * SECONDS_PER_DAY, 30 * SECONDS_PER_DAY + 1])
    def test_unlisted_durations(self, seconds):
        assert apy_for_duration(seconds) is None

    def test_thirty_day_reward(self):
        amount = 1000 * 10 ** 18
        reward = staking_reward(amount, 5, 30 * SECONDS_PER_DAY)
        assert reward == amount * 5 * 30 // (100 * 365)

    def test_full_year_reward_is_apy(self):
        assert staking_reward(100 * 10 ** 18, 20, 365 * SECONDS_PER_DAY) == 20 * 10 ** 18

    def test_reward_floors(self):
        assert staking_reward(1, 5, 30 * SECONDS_PER_DAY) == 0
