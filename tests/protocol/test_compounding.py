"""Tests for rate → APY compounding."""

import pytest

from src.data.constants import MAX_APY_BPS, SECONDS_PER_YEAR
from src.protocol.compounding import to_apy_bps


class TestNoCompounding:
    @pytest.mark.parametrize("rate", [0, 1, 625, 1250, 10_000, 123_456])
    def test_single_period_returns_rate(self, rate: int) -> None:
        assert to_apy_bps(rate, 1) == rate

    def test_zero_rate(self) -> None:
        assert to_apy_bps(0, 365) == 0


class TestCompounding:
    def test_daily_compounding(self) -> None:
        # (1 + 0.125/365)^365 - 1 = 13.3124%
        assert abs(to_apy_bps(1250, 365) - 1331) <= 1

    def test_per_second_compounding_approaches_continuous(self) -> None:
        # e^0.10 - 1 = 10.517%
        assert abs(to_apy_bps(1000, SECONDS_PER_YEAR) - 1051) <= 1

    def test_apy_at_least_rate(self) -> None:
        for rate in [1, 100, 625, 1250, 5000, 20_000]:
            assert to_apy_bps(rate, 12) >= rate

    def test_monotonic_in_rate(self) -> None:
        prev = -1
        for rate in range(0, 20_000, 37):
            apy = to_apy_bps(rate, 365)
            assert apy >= prev
            prev = apy

    def test_more_periods_more_yield(self) -> None:
        assert to_apy_bps(2000, 1) <= to_apy_bps(2000, 12) <= to_apy_bps(2000, 365)


class TestSaturation:
    def test_overflowing_intermediate_saturates(self) -> None:
        assert to_apy_bps(10**9, 8760) == MAX_APY_BPS

    def test_huge_rate_with_compounding_saturates(self) -> None:
        assert to_apy_bps(10**20, 2) == MAX_APY_BPS

    def test_single_period_is_never_capped(self) -> None:
        assert to_apy_bps(MAX_APY_BPS + 5, 1) == MAX_APY_BPS + 5
        assert to_apy_bps(10**20, 1) == 10**20


class TestValidation:
    def test_zero_periods(self) -> None:
        with pytest.raises(ValueError):
            to_apy_bps(100, 0)

    def test_negative_rate(self) -> None:
        with pytest.raises(ValueError):
            to_apy_bps(-1, 365)
